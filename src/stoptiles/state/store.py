"""In-memory view context store.

Holds the current :class:`ViewContext` and notifies subscribers through
narrow selectors: a listener only runs when the value its selector
extracts actually changed, so unrelated context updates never trigger a
re-derivation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from stoptiles.config import StopTilesConfig
from stoptiles.models.context import ViewContext

_logger = logging.getLogger(__name__)

Selector = Callable[[ViewContext], Any]
Listener = Callable[[Any], None]
Equality = Callable[[Any, Any], bool]


def basic_equal(a: Any, b: Any) -> bool:
    """Shallow elementwise equality for selector tuples."""
    if isinstance(a, Sequence) and isinstance(b, Sequence) and not isinstance(a, str):
        return len(a) == len(b) and all(x == y for x, y in zip(a, b, strict=True))
    return bool(a == b)


@dataclass(slots=True, eq=False)
class Subscription:
    """Handle returned by :meth:`ContextStore.subscribe`.

    Calling the handle unsubscribes; calling it again is harmless.
    """

    store: ContextStore
    selector: Selector
    listener: Listener
    equality: Equality
    selected: Any

    def resync(self) -> None:
        """Re-read the selection from the current context without notifying.

        Subscribers whose selector closes over state of their own (e.g. the
        stop a marker currently shows) call this after that state changes,
        so the next context update is compared against a current baseline.
        """
        self.selected = self.selector(self.store.get())

    def __call__(self) -> None:
        self.store._remove(self)


class ContextStore:
    """Single source of truth for the read-only view context.

    When no context is given, a default one is built whose
    ``interaction_range_zoom`` comes from *config*.
    """

    def __init__(self, context: ViewContext | None = None, *, config: StopTilesConfig | None = None) -> None:
        if context is None:
            config = config or StopTilesConfig()
            context = ViewContext(interaction_range_zoom=config.interaction_range_zoom)
        self._context = context
        self._subscriptions: list[Subscription] = []

    def get(self) -> ViewContext:
        return self._context

    def set(self, context: ViewContext) -> None:
        """Replace the context and notify subscribers whose selection changed."""
        self._context = context
        # Snapshot: listeners may unsubscribe (or subscribe) while we iterate.
        for sub in list(self._subscriptions):
            if sub not in self._subscriptions:
                continue
            selected = sub.selector(context)
            if sub.equality(sub.selected, selected):
                continue
            sub.selected = selected
            sub.listener(selected)

    def update(self, **changes: Any) -> ViewContext:
        """Validate the current context with *changes* applied and store it.

        Nested values may be models or plain dicts; collections such as
        ``exclude_list`` go through the same coercion as construction.
        """
        context = ViewContext.model_validate({**self._context.model_dump(), **changes})
        self.set(context)
        return context

    def subscribe(
        self,
        selector: Selector,
        listener: Listener,
        *,
        equality: Equality = basic_equal,
    ) -> Subscription:
        """Register *listener* for changes of ``selector(context)``."""
        sub = Subscription(
            store=self,
            selector=selector,
            listener=listener,
            equality=equality,
            selected=selector(self._context),
        )
        self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            return

    def __len__(self) -> int:
        return len(self._subscriptions)
