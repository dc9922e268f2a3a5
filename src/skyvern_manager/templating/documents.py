"""Full HTML documents handed to an external PDF engine."""

from __future__ import annotations

DOCUMENT_SHELL = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <link rel="stylesheet" href="styles.css">
</head>
<body class="workflow-doc-preview">
{body}
</body>
</html>"""


def wrap_document(body_html: str) -> str:
    """Wrap rendered workflow entries in the doc page shell."""
    return DOCUMENT_SHELL.replace("{body}", body_html, 1)
