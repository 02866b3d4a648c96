"""Base model for feed entities.

Every stop-related model inherits from :class:`StopBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase feed keys map onto the
  snake_case fields, while snake_case keys keep working.
* A ``model_validator(mode="before")`` that drops ``None`` values so
  the field default is used (missing collections become empty).
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from stoptiles.normalize import as_sequence, safe_int, safe_timestamp

EpochSeconds = Annotated[float | None, BeforeValidator(safe_timestamp)]
"""Annotated type that coerces epoch seconds or milliseconds to float seconds."""

OptionalInt = Annotated[int | None, BeforeValidator(safe_int)]


def _as_tuple(value: Any) -> tuple[Any, ...]:
    return tuple(as_sequence(value))


def collection_field() -> Any:
    return Field(default_factory=tuple)


SequenceOf = BeforeValidator(_as_tuple)
"""Validator for sub-state collections: ``None`` or junk becomes ``()``."""


class StopBaseModel(BaseModel):
    """Base for feed entity models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original feed dict."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop ``None`` values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep an explicitly supplied raw= (constructor use); otherwise stash the input.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
