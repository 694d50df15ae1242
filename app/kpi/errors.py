"""KPI error taxonomy."""

from __future__ import annotations


class KpiError(Exception):
    """Base class for KPI service errors."""


class StoreError(KpiError):
    """The remote store rejected or failed a read/write."""


class ImportFormatError(KpiError):
    """An imported document is not valid JSON or not shaped like KpiData."""


class UnknownCategoryError(KpiError, LookupError):
    def __init__(self, time_frame: str, category: str):
        super().__init__(f"Unknown KPI category '{category}' for time frame '{time_frame}'")
        self.time_frame = time_frame
        self.category = category
