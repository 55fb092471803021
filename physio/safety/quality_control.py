"""Answer-reliability checks over a questionnaire history.

One instance per request: the engine accumulates signals step by step and
then reports a reliability score. It never alters the diagnosis.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

logger = logging.getLogger(__name__)

RELIABILITY_THRESHOLD = 60
STRAIGHT_LINE_RUN = 5

# Slider questions answered on a 0-10 scale
SLIDER_QUESTIONS = frozenset(
    {
        "p_int_rest",
        "p_int_move",
        "pain_level",
        "m_rate",
        "s_qual",
        "str_lvl",
        "c_rate",
        "st_rate",
        "n_rate",
        "e_risk",
    }
)

_BLANK_PENALTY = 5
_OUT_OF_RANGE_PENALTY = 10
_STRAIGHT_LINE_PENALTY = 20
_CONTRADICTION_PENALTY = 15


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class QualityControlEngine:
    """Accumulates reliability signals while answers are processed.

    Signals:
        - blank answers;
        - slider answers outside 0-10;
        - straight-lining: five or more consecutive identical slider answers;
        - pain level 0 alongside reported pain locations.
    """

    def __init__(self) -> None:
        self._penalty = 0
        self._warnings: list[str] = []
        self._flags: list[str] = []
        self._slider_run: list[float] = []
        self._steps = 0

    def analyze_step(self, step: Mapping[str, Any], history: Sequence[Mapping[str, Any]]) -> None:
        """Records the signals raised by *step* given the history so far."""
        self._steps += 1
        qid = str(step.get("id", ""))
        answer = step.get("answer")

        if answer is None or (isinstance(answer, str) and not answer.strip()):
            self._penalty += _BLANK_PENALTY
            self._warnings.append(f"Blank answer for '{qid}'.")
            return

        if qid in SLIDER_QUESTIONS:
            value = _as_number(answer)
            if value is None or not 0 <= value <= 10:
                self._penalty += _OUT_OF_RANGE_PENALTY
                self._warnings.append(f"Slider '{qid}' answered out of range: {answer!r}.")
            else:
                self._track_slider(value)

        if qid in {"p_int_rest", "p_int_move", "pain_level"} and _as_number(answer) == 0:
            reported_locations = any(
                h.get("id") in {"p_loc", "pain_location"} and h.get("answer") for h in history
            )
            if reported_locations and "pain_contradiction" not in self._flags:
                self._penalty += _CONTRADICTION_PENALTY
                self._flags.append("pain_contradiction")
                self._warnings.append("Pain level 0 reported alongside pain locations.")

    def _track_slider(self, value: float) -> None:
        if self._slider_run and self._slider_run[-1] != value:
            self._slider_run = []
        self._slider_run.append(value)
        if len(self._slider_run) == STRAIGHT_LINE_RUN:
            self._penalty += _STRAIGHT_LINE_PENALTY
            if "straight_lining" not in self._flags:
                self._flags.append("straight_lining")
            self._warnings.append(
                f"{STRAIGHT_LINE_RUN} consecutive identical slider answers ({value:g})."
            )

    def get_reliability_report(self) -> dict:
        """Returns ``{score, is_reliable, warnings, flags}``; score is 0-100."""
        score = max(0, 100 - self._penalty)
        if score < RELIABILITY_THRESHOLD:
            logger.info("Low answer reliability (%d) over %d steps.", score, self._steps)
        return {
            "score": score,
            "is_reliable": score >= RELIABILITY_THRESHOLD,
            "warnings": list(self._warnings),
            "flags": list(self._flags),
        }


def review_history(history: Sequence[Mapping[str, Any]]) -> dict:
    """Runs a fresh engine over a whole history and returns its report."""
    engine = QualityControlEngine()
    for index, step in enumerate(history):
        if isinstance(step, Mapping):
            engine.analyze_step(step, history[:index])
    return engine.get_reliability_report()
