"""Consult endpoints.

POST /consult/          → full consult over a structured intake
POST /consult/summary   → summary from a raw answer history (rule-based or AI)
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import BaseModel, Field

from apps.api.state import app_state
from physio.orchestration.graph import run_summary

router = APIRouter()


class SummaryRequest(BaseModel):
    history: list[dict] = Field(default_factory=list)
    mode: Literal["sim", "ai"] = "sim"


@router.post("/", summary="Run a consult over a structured intake")
def run_consult(intake: dict[str, Any] = Body(...)) -> dict:
    """Returns red flags, ranked candidates, prognosis, module outputs and SOAP note."""
    doctor = _require(app_state.doctor)
    return doctor.consult(intake).model_dump(mode="json")


@router.post("/summary", summary="Summarise a questionnaire history")
def summarize(body: SummaryRequest) -> dict:
    """Maps the history, runs the consult and returns the final summary.

    In ``ai`` mode the report writer is tried first; the rule-based summary
    is returned whenever it is unavailable or fails.
    """
    graph = _require(app_state.graph)
    return run_summary(graph, body.history, body.mode)


def _require(component: Any) -> Any:
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Engines are not initialised yet.",
        )
    return component
