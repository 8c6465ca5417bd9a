"""
Writer — serialize the pipeline report to JSON.

Filesystem layout:
    <output_dir>/crossbuild_report.json
"""
import json
from pathlib import Path

from crossbuild.io.schema import PipelineReport

REPORT_FILENAME = "crossbuild_report.json"


def write_report(report: PipelineReport, output_dir: Path) -> Path:
    """
    Write crossbuild_report.json into *output_dir*.

    Creates *output_dir* if it does not exist.
    Returns the report path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / REPORT_FILENAME
    report_path.write_text(
        json.dumps(
            report.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return report_path
