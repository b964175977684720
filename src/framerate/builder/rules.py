"""Compatibility rules run by the engine.

Each rule looks at two slots of the components map and stays silent until both
are filled, so a half-built quote never gets blocked. Missing spec data on a
filled pair becomes a warning asking for manual verification.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from ..schemas import (
    ComponentCategory,
    ComponentsMap,
    ValidationCode,
    ValidationIssue,
    ValidationSeverity,
)
from .specs import (
    Number,
    normalize_form_factor,
    normalize_memory_type,
    normalize_socket,
    parse_watts,
    spec_value,
)

# chipset, fans and drives not covered by a TDP figure
BASELINE_WATTS = 50
HEADROOM_FACTOR = 1.2


class BuildRule(Protocol):
    name: str

    def validate(self, parts: ComponentsMap) -> Sequence[ValidationIssue]: ...


def _watts(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def recommended_wattage(required: Number) -> int:
    """PSU size that leaves the 20% margin over ``required``, rounded up."""
    # round() strips float noise such as 315 * 1.2 == 378.00000000000006
    return math.ceil(round(required * HEADROOM_FACTOR, 6))


def required_wattage(parts: ComponentsMap) -> Number:
    cpu = parts.get(ComponentCategory.CPU)
    gpu = parts.get(ComponentCategory.GPU)
    return parse_watts(spec_value(cpu, "tdp")) + parse_watts(spec_value(gpu, "tdp")) + BASELINE_WATTS


class SocketCompatibilityRule:
    name = "SocketCompatibility"

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        cpu = parts.get(ComponentCategory.CPU)
        motherboard = parts.get(ComponentCategory.MOTHERBOARD)
        if cpu is None or motherboard is None:
            return []

        cpu_socket = spec_value(cpu, "socket")
        board_socket = spec_value(motherboard, "socket")
        if not cpu_socket or not board_socket:
            return [
                ValidationIssue(
                    code=ValidationCode.UNKNOWN_SOCKET,
                    severity=ValidationSeverity.WARNING,
                    message="Could not verify socket compatibility",
                    details="Socket data is missing on the CPU or the motherboard. Verify manually.",
                    component_a=cpu.name,
                    component_b=motherboard.name,
                )
            ]

        if normalize_socket(cpu_socket) != normalize_socket(board_socket):
            return [
                ValidationIssue(
                    code=ValidationCode.SOCKET_MISMATCH,
                    severity=ValidationSeverity.ERROR,
                    message=f"Socket mismatch: CPU uses {cpu_socket} but the motherboard is {board_socket}",
                    details="The processor will not physically fit this motherboard.",
                    component_a=cpu.name,
                    component_b=motherboard.name,
                )
            ]
        return []


class WattageRule:
    name = "WattageCompatibility"

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        psu = parts.get(ComponentCategory.PSU)
        if psu is None:
            return []

        required = required_wattage(parts)
        psu_watts = parse_watts(spec_value(psu, "power_output", "watts", "wattage"))

        if not psu_watts:
            return [
                ValidationIssue(
                    code=ValidationCode.UNKNOWN_POWER,
                    severity=ValidationSeverity.WARNING,
                    message="Could not determine the power supply capacity",
                    details="Verify manually that the PSU has enough capacity for this build.",
                    component_a=psu.name,
                )
            ]

        recommended = recommended_wattage(required)
        if psu_watts < required:
            return [
                ValidationIssue(
                    code=ValidationCode.INSUFFICIENT_WATTAGE,
                    severity=ValidationSeverity.ERROR,
                    message=(
                        f"Insufficient power supply: {_watts(psu_watts)}W "
                        f"vs ~{_watts(required)}W estimated draw, {recommended}W recommended"
                    ),
                    details=f"A power supply of at least {recommended}W is recommended for this build.",
                    component_a=psu.name,
                )
            ]

        if psu_watts < round(required * HEADROOM_FACTOR, 6):
            return [
                ValidationIssue(
                    code=ValidationCode.LOW_WATTAGE_HEADROOM,
                    severity=ValidationSeverity.WARNING,
                    message=f"Low power headroom: {_watts(psu_watts)}W vs ~{recommended}W recommended",
                    details=(
                        "The power supply will work, but leaves little margin "
                        "for overclocking or future upgrades."
                    ),
                    component_a=psu.name,
                )
            ]
        return []


class MemoryTypeRule:
    name = "MemoryCompatibility"

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        ram = parts.get(ComponentCategory.RAM)
        motherboard = parts.get(ComponentCategory.MOTHERBOARD)
        if ram is None or motherboard is None:
            return []

        ram_type = spec_value(ram, "memory_type", "type")
        board_support = spec_value(motherboard, "memory_type", "memory_support")
        if not ram_type or not board_support:
            return [
                ValidationIssue(
                    code=ValidationCode.UNKNOWN_MEMORY_TYPE,
                    severity=ValidationSeverity.WARNING,
                    message="Could not verify RAM compatibility",
                    details="Memory type data is missing. Verify manually.",
                    component_a=ram.name,
                    component_b=motherboard.name,
                )
            ]

        # containment, so "DDR4/DDR5" boards accept either generation
        if normalize_memory_type(ram_type) not in normalize_memory_type(board_support):
            return [
                ValidationIssue(
                    code=ValidationCode.MEMORY_TYPE_MISMATCH,
                    severity=ValidationSeverity.ERROR,
                    message=f"Incompatible RAM type: {ram_type} is not supported by {board_support}",
                    details="The memory modules will not fit this motherboard.",
                    component_a=ram.name,
                    component_b=motherboard.name,
                )
            ]
        # TODO: compare RAM speed against the board's supported speeds once specs carry them
        return []


class GpuClearanceRule:
    name = "GpuClearance"

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        gpu = parts.get(ComponentCategory.GPU)
        pc_case = parts.get(ComponentCategory.CASE)
        if gpu is None or pc_case is None:
            return []

        gpu_length = parse_watts(spec_value(gpu, "length"))
        max_length = parse_watts(spec_value(pc_case, "max_gpu_length"))
        if not gpu_length or not max_length:
            return []

        if gpu_length > max_length:
            return [
                ValidationIssue(
                    code=ValidationCode.GPU_TOO_LONG,
                    severity=ValidationSeverity.ERROR,
                    message=f"GPU too long: {gpu_length}mm vs {max_length}mm case maximum",
                    details="The graphics card will not fit in this case.",
                    component_a=gpu.name,
                    component_b=pc_case.name,
                )
            ]
        return []


class CoolerClearanceRule:
    name = "CoolerClearance"

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        cooler = parts.get(ComponentCategory.CPU_COOLER)
        pc_case = parts.get(ComponentCategory.CASE)
        if cooler is None or pc_case is None:
            return []

        cooler_height = parse_watts(spec_value(cooler, "height"))
        max_height = parse_watts(spec_value(pc_case, "max_cooler_height"))
        if not cooler_height or not max_height:
            return []

        if cooler_height > max_height:
            return [
                ValidationIssue(
                    code=ValidationCode.COOLER_TOO_TALL,
                    severity=ValidationSeverity.ERROR,
                    message=f"Cooler too tall: {cooler_height}mm vs {max_height}mm case maximum",
                    details="The CPU cooler will not fit in this case.",
                    component_a=cooler.name,
                    component_b=pc_case.name,
                )
            ]
        return []


_BOARD_SIZES = {
    "MINIITX": 1,
    "ITX": 1,
    "MICROATX": 2,
    "MATX": 2,
    "UATX": 2,
    "ATX": 3,
    "EATX": 4,
}


def _board_size(value: object) -> Optional[int]:
    if not value:
        return None
    return _BOARD_SIZES.get(normalize_form_factor(value))


class FormFactorRule:
    """Motherboard size against the largest board the case accepts.

    Not part of ``ALL_RULES``; register it with ``CompatibilityEngine.add_rule``.
    Form factors outside ATX/E-ATX/Micro-ATX/Mini-ITX are skipped.
    """

    name = "FormFactorCompatibility"

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        motherboard = parts.get(ComponentCategory.MOTHERBOARD)
        pc_case = parts.get(ComponentCategory.CASE)
        if motherboard is None or pc_case is None:
            return []

        board_form = spec_value(motherboard, "form_factor")
        case_form = spec_value(pc_case, "max_motherboard_size", "form_factor")
        board_size = _board_size(board_form)
        case_size = _board_size(case_form)
        if board_size is None or case_size is None:
            return []

        if board_size > case_size:
            return [
                ValidationIssue(
                    code=ValidationCode.CASE_FORM_FACTOR_MISMATCH,
                    severity=ValidationSeverity.ERROR,
                    message=f"{board_form} motherboard does not fit a case limited to {case_form}",
                    details="Pick a case that supports this motherboard size, or a smaller board.",
                    component_a=motherboard.name,
                    component_b=pc_case.name,
                )
            ]
        return []


@dataclass(frozen=True)
class FunctionRule:
    """Adapts a plain function into a rule."""

    name: str
    func: Callable[[ComponentsMap], Iterable[ValidationIssue]]

    def validate(self, parts: ComponentsMap) -> List[ValidationIssue]:
        return list(self.func(parts))


def rule(name: str) -> Callable[[Callable[[ComponentsMap], Iterable[ValidationIssue]]], FunctionRule]:
    """Decorator form of :class:`FunctionRule`.

    ::

        @rule("NeedsGpu")
        def needs_gpu(parts):
            ...
    """

    def decorator(func: Callable[[ComponentsMap], Iterable[ValidationIssue]]) -> FunctionRule:
        return FunctionRule(name=name, func=func)

    return decorator


ALL_RULES: tuple[BuildRule, ...] = (
    SocketCompatibilityRule(),
    WattageRule(),
    MemoryTypeRule(),
    GpuClearanceRule(),
    CoolerClearanceRule(),
)


def default_rules() -> List[BuildRule]:
    return list(ALL_RULES)
