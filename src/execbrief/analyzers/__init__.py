"""Analyzers — extraction, revenue resolution, and risk derivation."""
from execbrief.analyzers.extraction import (
    Extraction,
    FieldKind,
    FieldPattern,
    extract_bool,
    extract_date,
    extract_fields,
    extract_number,
    find_choice,
    find_date,
    find_flag,
    find_number,
)
from execbrief.analyzers.revenue import RevenueProvider, RevenueResolver
from execbrief.analyzers.risk import RiskThresholds, derive_risks

__all__ = [
    "Extraction",
    "FieldKind",
    "FieldPattern",
    "RevenueProvider",
    "RevenueResolver",
    "RiskThresholds",
    "derive_risks",
    "extract_bool",
    "extract_date",
    "extract_fields",
    "extract_number",
    "find_choice",
    "find_date",
    "find_flag",
    "find_number",
]
