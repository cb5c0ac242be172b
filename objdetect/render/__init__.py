"""Render module - Annotated images and structured reports."""

from objdetect.render.annotator import Annotator
from objdetect.render.dispatch import OutputDispatcher
from objdetect.render.report import ReportBuilder

__all__ = [
    "Annotator",
    "OutputDispatcher",
    "ReportBuilder",
]
