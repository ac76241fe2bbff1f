# File: contact_scout/report/html_report.py
"""contact_scout.report.html_report: HTML table of resolved contacts rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from contact_scout.engine import Resolution

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def render_html(
    results: Sequence[Resolution],
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Render the report template and save it.

    Args:
        results: resolutions returned by ``Engine.resolve_many``.
        output_path: path of the resulting HTML file.
        template_dir: directory holding ``report.html.j2``; the packaged
            template is used when omitted.

    Returns:
        Path of the saved HTML file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    rows = [r.to_dict() for r in results]
    context: dict[str, Any] = {
        "rows": rows,
        "found": sum(1 for r in rows if r["email"]),
        "rejected": sum(1 for r in rows if r["error"]),
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
