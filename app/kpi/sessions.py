"""Per-user KPI contexts with an explicit login/logout lifecycle."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from app.kpi.aggregator import KpiAggregator

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns one KpiAggregator per signed-in user.

    `start` replaces any existing context for the user (a fresh login),
    `end` discards it. Lookups never create contexts implicitly.
    """

    def __init__(self, today: Callable[[], date] | None = None):
        self._today = today
        self._contexts: dict[str, KpiAggregator] = {}

    def start(self, user_id: str) -> KpiAggregator:
        context = KpiAggregator(user_id, today=self._today)
        self._contexts[user_id] = context
        logger.info("Started KPI session for user %s", user_id)
        return context

    def get(self, user_id: str) -> KpiAggregator | None:
        return self._contexts.get(user_id)

    def end(self, user_id: str) -> bool:
        context = self._contexts.pop(user_id, None)
        if context is None:
            return False
        logger.info("Ended KPI session for user %s", user_id)
        return True

    def anonymous(self) -> KpiAggregator:
        """Throwaway context for signed-out callers; every operation is a no-op."""
        return KpiAggregator(None, today=self._today)

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._contexts
