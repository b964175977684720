"""Builder module: compatibility engine and validation rules"""

from .engine import CompatibilityEngine, determine_status, estimate_wattage
from .rules import (
    ALL_RULES,
    BuildRule,
    CoolerClearanceRule,
    FormFactorRule,
    FunctionRule,
    GpuClearanceRule,
    MemoryTypeRule,
    SocketCompatibilityRule,
    WattageRule,
    default_rules,
    rule,
)
from .specs import parse_watts

__all__ = [
    "CompatibilityEngine",
    "determine_status",
    "estimate_wattage",
    "ALL_RULES",
    "BuildRule",
    "CoolerClearanceRule",
    "FormFactorRule",
    "FunctionRule",
    "GpuClearanceRule",
    "MemoryTypeRule",
    "SocketCompatibilityRule",
    "WattageRule",
    "default_rules",
    "rule",
    "parse_watts",
]
