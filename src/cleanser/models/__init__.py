"""Cleanser data models."""

from cleanser.models.category import Category, RiskLevel
from cleanser.models.scan_config import ScanConfig, ScanSpeed
from cleanser.models.scan_result import ScanItem, ScanResult
from cleanser.models.clean_report import CleanAttempt, CleanReport, Outcome

__all__ = [
    "Category",
    "CleanAttempt",
    "CleanReport",
    "Outcome",
    "RiskLevel",
    "ScanConfig",
    "ScanItem",
    "ScanResult",
    "ScanSpeed",
]
