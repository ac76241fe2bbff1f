# File: contact_scout/report/__init__.py
"""contact_scout.report: JSON and HTML reports of resolved contacts, used by the CLI."""

from contact_scout.report.html_report import render_html
from contact_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
