from fastapi import FastAPI

from app.kpi.router import router as kpi_router
from app.kpi.sessions import SessionRegistry
from app.logging_config import configure_logging

configure_logging()

app = FastAPI(title="Sales KPI", version="0.1.0")
app.state.kpi_sessions = SessionRegistry()
app.include_router(kpi_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "kpi": {
            "session": "/kpi/session",
            "dashboard": "/kpi/dashboard",
            "data": "/kpi/data",
            "progress": "/kpi/progress",
            "value": "/kpi/{time_frame}/{category}/value",
            "target": "/kpi/{time_frame}/{category}/target",
            "reset": "/kpi/{time_frame}/reset",
            "history": "/kpi/history",
            "export": "/kpi/export",
            "import": "/kpi/import",
            "notifications": "/kpi/notifications",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
