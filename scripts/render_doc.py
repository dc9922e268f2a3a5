#!/usr/bin/env python3
"""Render a workflow doc offline from a JSON dump of workflows.

Runs the same filter -> projection -> template pipeline as
POST /api/export/html, without calling the Skyvern API.

Usage:
    python scripts/render_doc.py workflows.json -o workflow-doc.html
    python scripts/render_doc.py workflows.json --fields fields.json --template doc.html

workflows.json holds a list of workflow records as returned by
GET /workflows. Without --fields/--template/--filter the built-in
defaults are used.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from skyvern_manager.models.types import FieldConfig, FilterConfig  # noqa: E402
from skyvern_manager.projection.engine import project_many  # noqa: E402
from skyvern_manager.providers.static import StaticWorkflowSource  # noqa: E402
from skyvern_manager.store.defaults import (  # noqa: E402
    DEFAULT_FIELD_CONFIG,
    DEFAULT_FILTER_CONFIG,
    DEFAULT_TEMPLATE,
)
from skyvern_manager.templating.documents import wrap_document  # noqa: E402
from skyvern_manager.templating.renderer import compile_template  # noqa: E402


def _load_json(path: Path | None, default):
    if path is None:
        return default
    return json.loads(path.read_text(encoding="utf-8"))


def render_doc(
    workflows: list[dict],
    filter_config: FilterConfig,
    field_config: FieldConfig,
    template: str,
) -> str:
    """Filter, project and render workflows into a full HTML page."""
    source = StaticWorkflowSource(workflows)
    selected = asyncio.run(source.fetch_all_workflows(filter_config))
    shaped = project_many(selected, field_config)
    return wrap_document(compile_template(template).render_many(shaped))


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("workflows", type=Path, help="JSON list of workflow records")
    parser.add_argument("--filter", type=Path, help="Filter config JSON")
    parser.add_argument("--fields", type=Path, help="Field config JSON")
    parser.add_argument("--template", type=Path, help="Doc template HTML")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    args = parser.parse_args()

    workflows = _load_json(args.workflows, [])
    if not isinstance(workflows, list):
        print(f"{args.workflows} must contain a JSON list", file=sys.stderr)
        return 1

    filter_config = FilterConfig.model_validate(_load_json(args.filter, DEFAULT_FILTER_CONFIG))
    field_config = FieldConfig.model_validate(_load_json(args.fields, DEFAULT_FIELD_CONFIG))
    template = (
        args.template.read_text(encoding="utf-8") if args.template else DEFAULT_TEMPLATE
    )

    html = render_doc(workflows, filter_config, field_config, template)

    if args.output:
        args.output.write_text(html, encoding="utf-8")
        print(f"Rendered {len(workflows)} workflow record(s) to {args.output}")
    else:
        sys.stdout.write(html)
    return 0


if __name__ == "__main__":
    sys.exit(main())
