"""Placeholder and block templating for HTML output.

- parser: template source -> Literal / Placeholder / Block nodes
- renderer: node rendering against JSON records
- documents: page shell for exported docs
"""

from skyvern_manager.templating.renderer import (
    CompiledTemplate,
    compile_template,
    render,
    render_many,
)

__all__ = [
    "CompiledTemplate",
    "compile_template",
    "render",
    "render_many",
]
