"""Service layer for the sync tool."""

from .mapping_registry import DEFAULT_REGISTRY, load_registry
from .normalizer import (
    ABSENT,
    normalize_record,
    normalize_value,
    sanitize_for_destination,
)
from .report import render_summary, save_report

__all__ = [
    "DEFAULT_REGISTRY",
    "load_registry",
    "ABSENT",
    "normalize_record",
    "normalize_value",
    "sanitize_for_destination",
    "render_summary",
    "save_report",
]
