"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from apps.api.state import app_state

router = APIRouter()


@router.get("/", summary="Service status and loaded components")
def check_health() -> dict:
    """Returns service status and the size of the loaded knowledge base."""
    doctor = app_state.doctor
    return {
        "status": "ok" if doctor is not None else "starting",
        "signatures": len(doctor.kb.signatures) if doctor else 0,
        "red_flag_conditions": len(doctor.kb.red_flag_criteria) if doctor else 0,
        "report_writer_available": app_state.report_writer_available,
    }
