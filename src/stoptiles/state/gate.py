"""Render gate.

A coarse, hand-written dirty check between two snapshots of the same
marker.  Only the fields that influence a stop's visual sub-state are
compared; anything else may change upstream without causing a render.
"""

from __future__ import annotations

from stoptiles.models.stop import Stop


def _quests_equal(prev: Stop, next_: Stop) -> bool:
    if len(prev.quests) != len(next_.quests):
        return False
    return all(a.with_ar == b.with_ar for a, b in zip(prev.quests, next_.quests, strict=True))


def _invasions_equal(prev: Stop, next_: Stop) -> bool:
    if len(prev.invasions) != len(next_.invasions):
        return False
    return all(
        a.confirmed == b.confirmed and a.grunt_type == b.grunt_type
        for a, b in zip(prev.invasions, next_.invasions, strict=True)
    )


def same_snapshot(prev: Stop, next_: Stop) -> bool:
    """Return True when *next_* would render exactly like *prev*."""
    return (
        prev.id == next_.id
        and prev.lure_expire_timestamp == next_.lure_expire_timestamp
        and prev.updated == next_.updated
        and _quests_equal(prev, next_)
        and _invasions_equal(prev, next_)
        and len(prev.events) == len(next_.events)
    )


def needs_render(prev: Stop | None, next_: Stop) -> bool:
    """Return True when the marker has to re-render for *next_*."""
    if prev is None:
        return True
    return not same_snapshot(prev, next_)
