"""Node functions for the summary graph.

The doctor and report writer are injected per graph rather than held in a
module-level registry, so separate graphs never share mutable state.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

from physio.agents.report_writer import ReportWriterAgent
from physio.orchestration.doctor import DoctorEngine
from physio.orchestration.intake import map_history_to_intake
from physio.orchestration.state import SummaryState
from physio.safety.quality_control import review_history
from physio.schemas.consult import ConsultResult

logger = logging.getLogger(__name__)


def _readable(pathology_id: str) -> str:
    return pathology_id.replace("_", " ")


def _severity_label(consult: ConsultResult) -> str:
    return "Severe" if consult.modules["pain"]["score"] < 50 else "Moderate"


def _red_flag_labels(consult: ConsultResult) -> list[str]:
    return [f"{flag.condition_id.upper()} Risk" for flag in consult.safety.flags]


def build_rule_summary(consult: ConsultResult, quality_control: dict | None = None) -> dict:
    """Deterministic summary that is always computable without the LLM."""
    primary = consult.diagnosis.primary
    severity = _severity_label(consult)
    prognosis = consult.prognosis

    explanation = (
        f"Based on the clinical presentation, the primary hypothesis is {_readable(primary)}. "
        f"This is consistent with a {severity.lower()} presentation. Recovery is estimated at "
        f"{prognosis.weeks_min}-{prognosis.weeks_max} weeks with adherence to the plan."
    )
    if consult.safety.flags:
        explanation += " Some answers need medical review before any treatment starts."

    return {
        "diagnosis": _readable(primary).upper(),
        "severity": severity,
        "red_flags": _red_flag_labels(consult),
        "scores": dict(consult.scores),
        "soap": consult.soap_report.model_dump(),
        "explanation": explanation,
        "quality_control": quality_control,
        "is_ai": False,
    }


class SummaryNodes:
    """Bound node callables for one compiled summary graph."""

    def __init__(
        self,
        doctor: DoctorEngine,
        report_writer: ReportWriterAgent | None = None,
        report_timeout: float = 20.0,
    ) -> None:
        self.doctor = doctor
        self.report_writer = report_writer
        self.report_timeout = report_timeout

    def map_intake(self, state: SummaryState) -> dict:
        return {
            "intake": map_history_to_intake(state.get("history") or []),
            "current_step": "map_intake",
        }

    def quality_check(self, state: SummaryState) -> dict:
        return {
            "quality_control": review_history(state.get("history") or []),
            "current_step": "quality_check",
        }

    def run_consult(self, state: SummaryState) -> dict:
        return {"consult": self.doctor.consult(state["intake"]), "current_step": "consult"}

    def write_ai_report(self, state: SummaryState) -> dict:
        """Runs the report writer under a wall-clock limit.

        Returns ``summary`` only when a report was produced; otherwise the
        graph routes on to the rule-based summary.
        """
        consult = state["consult"]
        report = None
        if self.report_writer is not None:
            executor = ThreadPoolExecutor(max_workers=1)
            future = executor.submit(
                self.report_writer.generate_report, state.get("history") or [], consult
            )
            try:
                report = future.result(timeout=self.report_timeout)
            except FutureTimeout:
                logger.warning(
                    "Report writer exceeded %.1fs — using rule-based report.", self.report_timeout
                )
            except Exception:
                logger.exception("Report writer failed — using rule-based report.")
            finally:
                executor.shutdown(wait=False)

        if report is None:
            return {"ai_report": None, "current_step": "write_ai_report"}

        summary = {
            "diagnosis": report["diagnosis_title"],
            "severity": _severity_label(consult),
            "red_flags": _red_flag_labels(consult),
            "scores": dict(consult.scores),
            "soap": report["soap"],
            "explanation": report["explanation_for_patient"],
            "quality_control": state.get("quality_control"),
            "is_ai": True,
        }
        return {"ai_report": report, "summary": summary, "current_step": "write_ai_report"}

    def rule_summary(self, state: SummaryState) -> dict:
        return {
            "summary": build_rule_summary(state["consult"], state.get("quality_control")),
            "current_step": "rule_summary",
        }
