# contact_scout/report/json_report.py

"""
JSON report of a batch of resolved contacts.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from contact_scout.engine import Resolution


def render_json(results: Sequence[Resolution], output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Write *results* as a JSON list to *output_path*.

    :param results: resolutions returned by ``Engine.resolve_many``
    :param output_path: path of the JSON file
    :param pretty: indent the output by 2 spaces
    :return: Path of the written file

    Example:
    ```python
    from contact_scout.report.json_report import render_json
    report_path = render_json(results, 'reports/contacts.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [r.to_dict() for r in results]

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output
