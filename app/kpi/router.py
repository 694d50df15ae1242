"""KPI HTTP router — session lifecycle, reads, mutations, import/export."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import current_user_id, verify_api_key
from app.config import settings
from app.db import get_session
from app.kpi.aggregator import KpiAggregator
from app.kpi.errors import ImportFormatError, UnknownCategoryError
from app.kpi.models import (
    DashboardState,
    HistoryEntry,
    KpiData,
    MutationResult,
    Notification,
    TargetUpdate,
    TimeFrame,
    TimeFrameProgress,
    ValueUpdate,
)
from app.kpi.sessions import SessionRegistry

router = APIRouter(prefix="/kpi", tags=["kpi"], dependencies=[Depends(verify_api_key)])


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.kpi_sessions


async def get_context(
    user_id: str | None = Depends(current_user_id),
    registry: SessionRegistry = Depends(get_registry),
) -> KpiAggregator:
    if user_id is None:
        return registry.anonymous()
    context = registry.get(user_id)
    if context is None:
        raise HTTPException(status_code=404, detail="No active KPI session; POST /kpi/session first")
    return context


# ---------------------------------------------------------------------------
# /kpi/session
# ---------------------------------------------------------------------------


@router.post("/session", response_model=DashboardState)
async def start_session(
    session: AsyncSession = Depends(get_session),
    user_id: str | None = Depends(current_user_id),
    registry: SessionRegistry = Depends(get_registry),
) -> DashboardState:
    if user_id is None:
        return registry.anonymous().snapshot()
    context = registry.start(user_id)
    await context.load(session)
    return context.snapshot(include_notifications=True)


@router.delete("/session", status_code=204)
async def end_session(
    user_id: str | None = Depends(current_user_id),
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    if user_id is not None:
        registry.end(user_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=DashboardState)
async def get_dashboard(context: KpiAggregator = Depends(get_context)) -> DashboardState:
    return context.snapshot()


@router.get("/data", response_model=KpiData)
async def get_data(context: KpiAggregator = Depends(get_context)) -> KpiData:
    return context.data


@router.get("/progress", response_model=list[TimeFrameProgress])
async def get_progress(context: KpiAggregator = Depends(get_context)) -> list[TimeFrameProgress]:
    return context.progress_summary()


@router.get("/notifications", response_model=list[Notification])
async def get_notifications(context: KpiAggregator = Depends(get_context)) -> list[Notification]:
    return context.drain_notifications()


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@router.put("/{time_frame}/{category}/value", response_model=MutationResult)
async def put_value(
    time_frame: TimeFrame,
    category: str,
    body: ValueUpdate,
    session: AsyncSession = Depends(get_session),
    context: KpiAggregator = Depends(get_context),
) -> MutationResult:
    try:
        persisted = await context.update_value(session, time_frame, category, body.value)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return MutationResult(persisted=persisted, data=context.data)


@router.put("/{time_frame}/{category}/target", response_model=MutationResult)
async def put_target(
    time_frame: TimeFrame,
    category: str,
    body: TargetUpdate,
    session: AsyncSession = Depends(get_session),
    context: KpiAggregator = Depends(get_context),
) -> MutationResult:
    try:
        persisted = await context.update_target(session, time_frame, category, body.min, body.max)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return MutationResult(persisted=persisted, data=context.data)


@router.post("/{time_frame}/reset", response_model=MutationResult)
async def post_reset(
    time_frame: TimeFrame,
    session: AsyncSession = Depends(get_session),
    context: KpiAggregator = Depends(get_context),
) -> MutationResult:
    persisted = await context.reset_values(session, time_frame)
    return MutationResult(persisted=persisted, data=context.data)


@router.post("/history", response_model=KpiData)
async def post_history(
    body: HistoryEntry,
    context: KpiAggregator = Depends(get_context),
) -> KpiData:
    context.add_history_entry(body.date, body.metrics)
    return context.data


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


@router.get("/export")
async def export_data(context: KpiAggregator = Depends(get_context)) -> Response:
    return Response(
        content=context.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{settings.export_filename}"'},
    )


@router.post("/import", response_model=KpiData)
async def import_data(request: Request, context: KpiAggregator = Depends(get_context)) -> KpiData:
    raw = await request.body()
    try:
        context.import_json(raw)
    except ImportFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return context.data
