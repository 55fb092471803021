"""FastAPI app for the physio triage engine."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from apps.api.routers import consult, health
from apps.api.state import app_state, init_app_state
from physio.errors import IntakeError


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app_state.doctor is None:
        init_app_state()
    yield


app = FastAPI(
    title="Physio Triage Engine",
    description="Differential diagnosis, red-flag screening and recovery estimates",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(IntakeError)
async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    return JSONResponse(status_code=422, content=exc.to_dict())


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(consult.router, prefix="/consult", tags=["consult"])
