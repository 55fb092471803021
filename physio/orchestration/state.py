"""State carried through the summary graph."""

from __future__ import annotations

from typing import TypedDict

from physio.schemas.consult import ConsultResult


class SummaryState(TypedDict, total=False):
    history: list[dict]
    mode: str  # "sim" (rule-based) or "ai"
    intake: dict
    quality_control: dict
    consult: ConsultResult
    ai_report: dict | None
    summary: dict
    current_step: str
