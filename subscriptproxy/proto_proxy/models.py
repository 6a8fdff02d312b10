"""
Prototype Proxy Models

Pydantic and dataclass models describing how an interception layer
was configured and what it claims on each access.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)


class SourceKind(str, Enum):
    """Shapes a layer source can be classified as."""

    PAIRS = "pairs"
    """Sequence of (key, value) pairs, copied once."""

    WILDCARD = "wildcard"
    """Single callable answering every unmapped key."""

    ITERABLE = "iterable"
    """Re-iterable source of pairs, read fresh on every access."""

    MAPPING = "mapping"
    """Key/value mapping, copied once."""

    UNRECOGNIZED = "unrecognized"
    """Anything else; the layer registers nothing."""


class _Marker:
    """Reserved key in a normalized source. Never equal to a user key."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"<marker {self.name}>"


ALL = _Marker("*")
GENFN = _Marker("**")

MARKERS = (ALL, GENFN)


# Used when options are validated without settings-derived defaults
BUILTIN_DEFAULTS: dict[str, Any] = {
    "fallback": True,
    "evaluate_functions": True,
    "excluded_keys": (),
    "copy_parent_prototype": True,
}


def _default_for(info: ValidationInfo) -> Any:
    defaults = (info.context or {}).get("defaults") or BUILTIN_DEFAULTS
    value = defaults.get(info.field_name, BUILTIN_DEFAULTS[info.field_name])
    if info.field_name == "excluded_keys":
        return tuple(value)
    return value


class LayerOptions(BaseModel):
    """
    Resolved configuration for one interception layer.

    Options never fail validation: a missing or wrong-shaped value is
    replaced by the default passed in the validation context (see
    ``resolve_options``) or by the built-in default.
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        populate_by_name=True,
        extra="ignore",
    )

    fallback: bool = Field(
        default=None,
        description="Defer to inherited lookup when nothing else answers",
    )

    evaluate_functions: bool = Field(
        default=None,
        validation_alias=AliasChoices(
            "evaluate_functions", "eval_fns", "evalFns", "evaluateFunctions"
        ),
        description="Invoke callable values instead of returning them",
    )

    excluded_keys: tuple[Any, ...] = Field(
        default=None,
        validation_alias=AliasChoices(
            "excluded_keys", "except", "exclude", "excludedKeys"
        ),
        description="Keys the layer never claims from its literal source",
    )

    copy_parent_prototype: bool = Field(
        default=None,
        validation_alias=AliasChoices(
            "copy_parent_prototype", "copyParentProto", "copyParentPrototype"
        ),
        description="Insert a fresh class instead of patching the target's class",
    )

    @field_validator("fallback", "evaluate_functions", "copy_parent_prototype", mode="wrap")
    @classmethod
    def _coerce_flag(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> bool:
        if isinstance(value, bool):
            return value
        return _default_for(info)

    @field_validator("excluded_keys", mode="wrap")
    @classmethod
    def _coerce_keys(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> tuple[Any, ...]:
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(value)
        return _default_for(info)


@dataclass
class RelevantKeys:
    """
    Keys a layer claims for a single access.

    ``generated`` holds the generator snapshot taken while computing
    ``keys`` so the get trap does not iterate the source twice.
    """

    keys: list[Any] = field(default_factory=list)
    generated: dict[Any, Any] = field(default_factory=dict)

    def __contains__(self, key: Any) -> bool:
        return key in self.keys


@dataclass
class ClassifiedSource:
    """Outcome of classifying a layer source."""

    kind: SourceKind

    # Normalized mapping, markers included
    entries: dict[Any, Any] = field(default_factory=dict)
