"""Skyvern Manager.

Shapes workflow records from the Skyvern API into documentation and
summarizes workflow runs over a cutoff window.
"""

__version__ = "0.1.0"
