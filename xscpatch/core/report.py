"""YAML patch reports.

Renders a ``PatchReport`` (and optionally the parsed ``RuleSet`` with its
diagnostics) as a YAML document using ruamel.yaml in block style, e.g.::

    target: game.exe
    size: 1048576
    modified: true
    written: true
    total_matches: 2
    rules:
    - rule: 1
      source_line: 3
      find: '4142'
      replace: '4344'
      matches: 2
      offsets:
      - '0x10'
      - '0x2F0'
"""

from io import StringIO
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ruamel.yaml import YAML

from xscpatch.core.schema.result import PatchReport
from xscpatch.core.schema.rule import RuleSet


def _create_yaml_instance() -> YAML:
    """Create configured ruamel.yaml instance for report output.

    Returns:
        YAML instance configured to:
        - Not wrap long strings (hex sequences stay on one line)
        - Use block style (not flow style)
    """
    yaml = YAML()
    yaml.width = 4096
    yaml.default_flow_style = False
    yaml.allow_unicode = True
    return yaml


def build_report_data(report: PatchReport, rule_set: Optional[RuleSet] = None) -> Dict[str, Any]:
    """Combine patch results and parser diagnostics into one plain dict."""
    data = report.to_serializable()
    if rule_set is not None:
        data["diagnostics"] = [d.to_serializable() for d in rule_set.diagnostics]
    return data


def render_report(report: PatchReport, rule_set: Optional[RuleSet] = None) -> str:
    """Render a patch report as a YAML string.

    Args:
        report: Result of a patch call
        rule_set: Rule set that was applied, to include its parse diagnostics

    Returns:
        YAML document
    """
    yaml = _create_yaml_instance()
    stream = StringIO()
    yaml.dump(build_report_data(report, rule_set), stream)
    return stream.getvalue()


def write_report(path: Union[str, Path], report: PatchReport, rule_set: Optional[RuleSet] = None) -> Path:
    """Write a YAML patch report to disk, creating parent directories.

    Returns:
        Path of the written report
    """
    report_path = Path(path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(render_report(report, rule_set), encoding="utf-8")
    return report_path
