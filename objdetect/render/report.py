"""Structured name/probability reports."""

from __future__ import annotations

import json
from collections.abc import Sequence

from objdetect.core.models import Detection, ReportRecord


class ReportBuilder:
    """Turns filtered detections into an ordered report."""

    @staticmethod
    def build(detections: Sequence[Detection]) -> list[ReportRecord]:
        """One record per detection, input order preserved."""
        return [
            ReportRecord(name=d.label, probability=d.probability) for d in detections
        ]

    @staticmethod
    def to_json(report: Sequence[ReportRecord]) -> str:
        """Encode a report as a JSON array; an empty report gives ``[]``."""
        return json.dumps([record.model_dump() for record in report])
