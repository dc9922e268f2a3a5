"""API module for Skyvern Manager.

HTTP layer only:
- Validates inputs, reads/writes config documents
- Calls the workflow source and hands results to projection, templating
  and aggregation
- Maps service errors to HTTP responses
"""
