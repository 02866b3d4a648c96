"""Library configuration for stoptiles."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from stoptiles._constants import (
    CUSTOM_RANGE_COLOR,
    DEFAULT_INTERACTION_RANGE_ZOOM,
    INTERACTION_RANGE_COLOR,
    INTERACTION_RANGE_M,
    LURE_RANGE_COLOR,
    LURE_RANGE_M,
    TIMER_LABEL_OFFSET,
)
from stoptiles.exceptions import StopTilesConfigError


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise StopTilesConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class StopTilesConfig:
    """Layer and feed configuration.

    Parameters
    ----------
    feed_url : str
        HTTP endpoint returning stop snapshots as JSON.
    request_timeout : float
        Total timeout in seconds for a single feed request.
    interaction_range_zoom : float
        Minimum map zoom at which range circles are drawn.  Seeds the
        default context of :class:`stoptiles.state.store.ContextStore`.
    interaction_range_m : float
        Radius of the interaction range circle in metres.
    interaction_range_color : str
        Stroke colour of the interaction range circle.
    interaction_range_weight : float
        Stroke weight of the interaction range circle.
    lure_range_m : float
        Radius of the lure range circle in metres.
    lure_range_color : str
        Stroke colour of the lure range circle.
    lure_range_weight : float
        Stroke weight of the lure range circle.
    custom_range_color : str
        Stroke colour of the user-defined range circle.
    custom_range_weight : float
        Stroke weight of the user-defined range circle.
    timer_offset : tuple of int
        Pixel offset of the timer label relative to the marker.
    """

    feed_url: str = "http://localhost:8080/api/v1/pokestops"
    request_timeout: float = 10.0
    interaction_range_zoom: float = DEFAULT_INTERACTION_RANGE_ZOOM
    interaction_range_m: float = INTERACTION_RANGE_M
    interaction_range_color: str = INTERACTION_RANGE_COLOR
    interaction_range_weight: float = 1.0
    lure_range_m: float = LURE_RANGE_M
    lure_range_color: str = LURE_RANGE_COLOR
    lure_range_weight: float = 1.0
    custom_range_color: str = CUSTOM_RANGE_COLOR
    custom_range_weight: float = 0.5
    timer_offset: tuple[int, int] = TIMER_LABEL_OFFSET

    @classmethod
    def from_env(cls, **overrides: Any) -> StopTilesConfig:
        """Create configuration from environment variables.

        Reads optional ``STOPTILES_*`` variables.  Explicit keyword
        arguments override environment values.

        Raises
        ------
        StopTilesConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "STOPTILES_FEED_URL": "feed_url",
            "STOPTILES_INTERACTION_RANGE_COLOR": "interaction_range_color",
            "STOPTILES_LURE_RANGE_COLOR": "lure_range_color",
            "STOPTILES_CUSTOM_RANGE_COLOR": "custom_range_color",
        }
        _ENV_FLOAT_MAP = {
            "STOPTILES_REQUEST_TIMEOUT": "request_timeout",
            "STOPTILES_INTERACTION_RANGE_ZOOM": "interaction_range_zoom",
            "STOPTILES_INTERACTION_RANGE_M": "interaction_range_m",
            "STOPTILES_LURE_RANGE_M": "lure_range_m",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
