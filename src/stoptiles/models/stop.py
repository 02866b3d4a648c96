"""Stop (point of interest) models as delivered by the feed."""

from __future__ import annotations

from typing import Annotated

from pydantic import AliasChoices, Field, field_validator

from stoptiles.models._base import (
    EpochSeconds,
    OptionalInt,
    SequenceOf,
    StopBaseModel,
    collection_field,
)
from stoptiles.normalize import safe_float, safe_str


class Lure(StopBaseModel):
    """An active or expired lure module on a stop."""

    id: OptionalInt = None
    expire_timestamp: EpochSeconds = None


class Invasion(StopBaseModel):
    """A team invasion (grunt) on a stop.

    Parameters
    ----------
    grunt_type : int or None
        Grunt/character type.  ``None`` and ``0`` mean "unknown" and never
        count as an active invasion.
    confirmed : bool
        Whether the lineup has been confirmed by a scanner.
    incident_expire_timestamp : float or None
        Epoch seconds at which the invasion ends.
    """

    grunt_type: OptionalInt = None
    confirmed: bool = False
    incident_expire_timestamp: EpochSeconds = None


class Quest(StopBaseModel):
    """A field research quest.  Quests do not expire within a map session."""

    key: str = ""
    with_ar: bool = False

    @field_validator("key", mode="before")
    @classmethod
    def _coerce_key(cls, value: object) -> str:
        return safe_str(value) or ""


class StopEvent(StopBaseModel):
    """A time-bound special event showcased on a stop."""

    display_type: OptionalInt = None
    event_expire_timestamp: EpochSeconds = None


class Stop(StopBaseModel):
    """A complete, self-consistent stop snapshot.

    Absent sub-state collections mean "none"; they are normalised to
    empty tuples rather than rejected.
    """

    id: str
    lat: float = 0.0
    lon: float = 0.0
    name: str | None = None
    lure_id: OptionalInt = None
    lure_expire_timestamp: EpochSeconds = None
    invasions: Annotated[tuple[Invasion, ...], SequenceOf] = collection_field()
    quests: Annotated[tuple[Quest, ...], SequenceOf] = collection_field()
    events: Annotated[tuple[StopEvent, ...], SequenceOf] = collection_field()
    ar_scan_eligible: bool = False
    updated: EpochSeconds = Field(
        default=None,
        validation_alias=AliasChoices("updated", "updatedAt", "updated_at"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        text = safe_str(value)
        return text if text is not None else value

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: object) -> float:
        parsed = safe_float(value)
        return parsed if parsed is not None else 0.0

    @property
    def position(self) -> tuple[float, float]:
        return (self.lat, self.lon)

    @property
    def lure(self) -> Lure | None:
        """The lure sub-state, or ``None`` when the stop carries none."""
        if self.lure_expire_timestamp is None:
            return None
        return Lure(id=self.lure_id, expire_timestamp=self.lure_expire_timestamp, raw={})
