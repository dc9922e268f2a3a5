"""Persisted configuration documents (filter, fields, template, analytics)."""
