from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import InvalidCategoryError


class ComponentCategory(str, Enum):
    CPU = "cpu"
    GPU = "gpu"
    MOTHERBOARD = "motherboard"
    RAM = "ram"
    PSU = "psu"
    CASE = "case"
    CPU_COOLER = "cpu-cooler"
    SSD = "ssd"
    HDD = "hdd"
    CASE_FAN = "case-fan"

    @classmethod
    def parse(cls, value: Union["ComponentCategory", str]) -> "ComponentCategory":
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidCategoryError(str(value)) from exc


class ValidationSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class CompatibilityStatus(str, Enum):
    VALID = "valid"
    WARNING = "warning"
    INCOMPATIBLE = "incompatible"


class ValidationCode(str, Enum):
    """Baseline issue codes; rules may still emit codes outside this set."""

    # socket
    SOCKET_MISMATCH = "SOCKET_MISMATCH"
    UNKNOWN_SOCKET = "UNKNOWN_SOCKET"

    # power
    INSUFFICIENT_WATTAGE = "INSUFFICIENT_WATTAGE"
    LOW_WATTAGE_HEADROOM = "LOW_WATTAGE_HEADROOM"
    UNKNOWN_POWER = "UNKNOWN_POWER"

    # memory
    MEMORY_TYPE_MISMATCH = "MEMORY_TYPE_MISMATCH"
    MEMORY_SPEED_INCOMPATIBLE = "MEMORY_SPEED_INCOMPATIBLE"
    UNKNOWN_MEMORY_TYPE = "UNKNOWN_MEMORY_TYPE"

    # physical fit
    GPU_TOO_LONG = "GPU_TOO_LONG"
    COOLER_TOO_TALL = "COOLER_TOO_TALL"
    CASE_FORM_FACTOR_MISMATCH = "CASE_FORM_FACTOR_MISMATCH"

    # general
    MISSING_COMPONENT = "MISSING_COMPONENT"
    SPEC_DATA_INCOMPLETE = "SPEC_DATA_INCOMPLETE"
    INTERNAL_VALIDATION_ERROR = "INTERNAL_VALIDATION_ERROR"


class Product(BaseModel):
    """A purchasable part as the engine sees it: a display name and a loose specs bag."""

    name: str
    specs: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None

    @field_validator("specs", mode="before")
    @classmethod
    def _none_specs(cls, value: Any) -> Any:
        return {} if value is None else value


ComponentsMap = Mapping[ComponentCategory, Product]


def components_map(parts: Mapping[Union[ComponentCategory, str], Product]) -> Dict[ComponentCategory, Product]:
    """Key a mapping by ComponentCategory, rejecting slugs outside the closed set."""
    return {ComponentCategory.parse(key): product for key, product in parts.items()}


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    code: str
    severity: ValidationSeverity
    message: str
    details: Optional[str] = None
    component_a: Optional[str] = Field(default=None, alias="componentA")
    component_b: Optional[str] = Field(default=None, alias="componentB")

    @field_validator("code", mode="before")
    @classmethod
    def _code_text(cls, value: Any) -> Any:
        if isinstance(value, ValidationCode):
            return value.value
        return value


class BuildAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    status: CompatibilityStatus
    estimated_wattage: int = Field(alias="estimatedWattage")
    issues: Tuple[ValidationIssue, ...] = ()
    analyzed_at: datetime = Field(alias="analyzedAt")

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def has_code(self, code: Union[ValidationCode, str]) -> bool:
        wanted = code.value if isinstance(code, ValidationCode) else code
        return any(issue.code == wanted for issue in self.issues)
