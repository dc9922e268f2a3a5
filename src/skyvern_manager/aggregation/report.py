"""HTML report for run analytics summaries.

The report is rendered with the same templating engine as workflow docs.
Blocks do not nest, so each (title, status) pair becomes one table row and
the title cell is filled only on the first row of its group. Values are
HTML-escaped before rendering because titles come from the API.
"""

from __future__ import annotations

import html
import math
from collections.abc import Iterable
from datetime import datetime, timezone

from skyvern_manager.models.types import WorkflowRunSummary
from skyvern_manager.templating.renderer import compile_template

NO_DURATION = "—"

REPORT_STYLE = """
  body { font-family: Arial, sans-serif; font-size: 11px; color: #111; }
  h1   { font-size: 16px; margin-bottom: 4px; }
  p    { margin: 0 0 12px; font-size: 10px; color: #555; }
  table { width: 100%; border-collapse: collapse; }
  th   { background: #f0f0f0; text-align: left; padding: 6px 8px;
         border-bottom: 2px solid #ccc; font-size: 10px; }
  td   { padding: 5px 8px; border-bottom: 1px solid #e0e0e0; }
  tr.group-start td { border-top: 2px solid #ccc; }
"""

# Braces in CSS would read as placeholders, so the stylesheet is passed in
# through the {style} placeholder.
REPORT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>{style}</style>
</head>
<body>
<h1>Run Analytics</h1>
<p>Generated: {generated_at} &nbsp;|&nbsp; Cut-off: {cutoff}</p>
<table>
  <thead>
    <tr>
      <th>Workflow Title</th>
      <th>Total Runs</th>
      <th>Status</th>
      <th>Count</th>
      <th>Avg Run Time</th>
      <th>Max Run Time</th>
      <th>Min Run Time</th>
    </tr>
  </thead>
  <tbody>{{#each rows}}
    <tr class="{row_class}">
      <td>{title}</td>
      <td>{total}</td>
      <td>{status}</td>
      <td>{count}</td>
      <td>{avg}</td>
      <td>{max}</td>
      <td>{min}</td>
    </tr>{{/each}}
  </tbody>
</table>
</body>
</html>"""


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_duration(seconds: float | None) -> str:
    """Human-readable duration: 42s, 3m 5s, 1h 2m 3s.

    Seconds round half up, so 2.5 prints as 3s.
    """
    if seconds is None:
        return NO_DURATION
    if seconds < 60:
        return f"{_round_half_up(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {_round_half_up(seconds % 60)}s"
    return (
        f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m "
        f"{_round_half_up(seconds % 60)}s"
    )


def report_rows(summaries: Iterable[WorkflowRunSummary]) -> list[dict[str, str]]:
    """Flatten summaries into escaped table rows."""
    rows: list[dict[str, str]] = []
    for summary in summaries:
        for index, row in enumerate(summary.status_rows):
            first = index == 0
            rows.append(
                {
                    "row_class": "group-start" if first else "",
                    "title": html.escape(summary.workflow_title) if first else "",
                    "total": str(summary.total_count) if first else "",
                    "status": html.escape(row.status),
                    "count": str(row.count),
                    "avg": format_duration(row.avg_run_time_seconds),
                    "max": format_duration(row.max_run_time_seconds),
                    "min": format_duration(row.min_run_time_seconds),
                }
            )
    return rows


def build_report_html(
    summaries: Iterable[WorkflowRunSummary],
    cutoff_timestamp: str,
    generated_at: datetime | None = None,
) -> str:
    """Render the full report page for an external PDF engine."""
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    context = {
        "style": REPORT_STYLE,
        "generated_at": generated_at.isoformat(),
        "cutoff": html.escape(cutoff_timestamp),
        "rows": report_rows(summaries),
    }
    return compile_template(REPORT_TEMPLATE).render(context)
