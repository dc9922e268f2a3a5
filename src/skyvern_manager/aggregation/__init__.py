"""Aggregation module for run analytics.

- runs: eligibility, bounded run collection and per-title summaries
- report: HTML report rendering of summaries
"""
