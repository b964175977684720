"""framerate: PC build compatibility analysis."""

from .builder import ALL_RULES, CompatibilityEngine
from .schemas import (
    BuildAnalysis,
    CompatibilityStatus,
    ComponentCategory,
    Product,
    ValidationCode,
    ValidationIssue,
    ValidationSeverity,
)

__all__ = [
    "ALL_RULES",
    "CompatibilityEngine",
    "BuildAnalysis",
    "CompatibilityStatus",
    "ComponentCategory",
    "Product",
    "ValidationCode",
    "ValidationIssue",
    "ValidationSeverity",
]
