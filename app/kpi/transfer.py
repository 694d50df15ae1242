"""JSON export/import of a whole KpiData document."""

from __future__ import annotations

import json

from pydantic import ValidationError

from app.kpi.errors import ImportFormatError
from app.kpi.models import KpiData

INVALID_FORMAT_MESSAGE = "Invalid data format. Please upload a valid JSON file."


def export_kpi_data(data: KpiData) -> str:
    """Serialize every time frame plus history, camelCase keys, indented."""
    return data.model_dump_json(by_alias=True, indent=2)


def import_kpi_data(raw: str | bytes) -> KpiData:
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ImportFormatError(INVALID_FORMAT_MESSAGE) from exc
    try:
        return KpiData.model_validate(payload)
    except ValidationError as exc:
        raise ImportFormatError(INVALID_FORMAT_MESSAGE) from exc
