"""Compatibility engine: runs every registered rule over a components map."""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from ..schemas import (
    BuildAnalysis,
    CompatibilityStatus,
    ComponentCategory,
    ComponentsMap,
    Product,
    ValidationCode,
    ValidationIssue,
    ValidationSeverity,
    components_map,
)
from .rules import BASELINE_WATTS, BuildRule, default_rules
from .specs import has_spec, parse_watts

logger = logging.getLogger(__name__)

# flat draw per present part, on top of CPU/GPU TDP and the baseline
_ACCESSORY_WATTS = {
    ComponentCategory.RAM: 5,
    ComponentCategory.SSD: 5,
    ComponentCategory.HDD: 8,
    ComponentCategory.CPU_COOLER: 5,
    ComponentCategory.CASE_FAN: 5,
}


def estimate_wattage(parts: ComponentsMap) -> int:
    """Estimated total draw of a build in watts.

    CPU and GPU contribute their ``tdp`` spec, other present parts a flat figure,
    and the motherboard baseline is always added, even when no board is
    selected.
    """
    total = 0
    for category in (ComponentCategory.CPU, ComponentCategory.GPU):
        product = parts.get(category)
        if has_spec(product, "tdp"):
            total += parse_watts(product.specs["tdp"])

    for category, watts in _ACCESSORY_WATTS.items():
        if parts.get(category) is not None:
            total += watts

    total += BASELINE_WATTS
    # half-up, not banker's rounding
    return int(math.floor(total + 0.5))


def determine_status(issues: Sequence[ValidationIssue]) -> CompatibilityStatus:
    if not issues:
        return CompatibilityStatus.VALID
    if any(issue.severity == ValidationSeverity.ERROR for issue in issues):
        return CompatibilityStatus.INCOMPATIBLE
    if any(issue.severity == ValidationSeverity.WARNING for issue in issues):
        return CompatibilityStatus.WARNING
    return CompatibilityStatus.VALID


class CompatibilityEngine:
    """
    Runs an ordered list of rules and folds their issues into a BuildAnalysis.

    The rule list is copy-on-write: ``add_rule``/``remove_rule`` swap in a new
    tuple and ``run`` iterates the tuple it saw on entry, so mutating a shared
    engine never disturbs a run already in progress. Building the engine once
    with every rule and never mutating it afterwards is still the recommended
    setup for shared instances.

    Example::

        engine = CompatibilityEngine()
        analysis = engine.run({
            "cpu": Product(name="Ryzen 5 7600", specs={"socket": "AM5", "tdp": "65W"}),
            "motherboard": Product(name="B650M", specs={"socket": "AM5"}),
        })
        if analysis.status == "incompatible":
            ...
    """

    def __init__(self, rules: Optional[Iterable[BuildRule]] = None):
        self._rules: tuple[BuildRule, ...] = tuple(default_rules() if rules is None else rules)
        self._lock = threading.Lock()

    def run(self, parts: Mapping[Union[ComponentCategory, str], Product]) -> BuildAnalysis:
        """
        Analyze a (possibly partial) build.

        Never raises for an incompatible build or a failing rule; a rule that
        raises is reported as an ``INTERNAL_VALIDATION_ERROR`` warning and the
        remaining rules still run. Unknown category keys raise
        ``InvalidCategoryError`` before any rule runs.
        """
        components = components_map(parts)
        rules = self._rules
        issues: List[ValidationIssue] = []

        for rule in rules:
            # a rule that fails part-way contributes none of its output
            try:
                rule_issues = [ValidationIssue.model_validate(i) for i in rule.validate(components)]
            except Exception as exc:
                logger.exception("Rule %s failed", rule.name)
                issues.append(
                    ValidationIssue(
                        code=ValidationCode.INTERNAL_VALIDATION_ERROR,
                        severity=ValidationSeverity.WARNING,
                        message=f"Could not validate: {rule.name}",
                        details=str(exc) or type(exc).__name__,
                    )
                )
            else:
                issues.extend(rule_issues)

        estimated = estimate_wattage(components)
        status = determine_status(issues)
        logger.debug(
            "Analyzed %d parts with %d rules: status=%s wattage=%dW issues=%d",
            len(components),
            len(rules),
            status.value,
            estimated,
            len(issues),
        )
        return BuildAnalysis(
            status=status,
            estimated_wattage=estimated,
            issues=issues,
            analyzed_at=datetime.now(timezone.utc),
        )

    def add_rule(self, rule: BuildRule) -> None:
        with self._lock:
            self._rules = self._rules + (rule,)

    def remove_rule(self, rule_name: str) -> None:
        """Drop every rule called ``rule_name``; unknown names are ignored."""
        with self._lock:
            self._rules = tuple(r for r in self._rules if r.name != rule_name)

    def get_active_rules(self) -> List[str]:
        return [r.name for r in self._rules]
