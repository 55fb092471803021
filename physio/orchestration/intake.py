"""Maps a raw answer history onto the intake record the doctor consumes.

Yes/no answers are resolved here, once, into :class:`Answer` values; nothing
downstream compares answer strings.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from physio.errors import IntakeError
from physio.knowledge.tables import RED_FLAG_QUESTION_TAGS
from physio.schemas.intake import Answer, HistoryStep, normalize_tag, parse_age

logger = logging.getLogger(__name__)

TAG_LIST_QUESTIONS = {
    "p_loc": "locations",
    "pain_location": "locations",
    "p_qual": "quality",
    "pain_quality": "quality",
    "p_agg": "aggravators",
    "aggravators": "aggravators",
}

AGGRAVATOR_TRIGGERS = {
    "p_trig_sit": "sitting",
    "p_trig_stand": "standing",
    "p_trig_walk": "walking",
    "p_trig_bend": "bending_forward",
    "p_trig_cough": "coughing",
}

PAIN_LEVEL_QUESTIONS = frozenset({"p_int_rest", "p_int_move", "pain_level"})
AGE_QUESTIONS = frozenset({"age", "start_age"})

# Self-rating sliders (0-10) -> (section, inverted). Inverted sliders rate limitation.
SCORE_SLIDERS = {
    "m_rate": ("mobility", True),
    "s_qual": ("sleep", False),
    "c_rate": ("cardio", False),
    "st_rate": ("strength", False),
    "n_rate": ("nutrition", False),
    "e_risk": ("ergonomics", True),
}

FLAG_QUESTIONS = {
    "m_fear": ("stress", "fear_movement"),
    "ros_malaise": ("stress", "malaise"),
    "psy_dep": ("stress", "depression_screen"),
    "psy_anx": ("stress", "anxiety_screen"),
    "psy_anger": ("stress", "irritability"),
    "psy_withdraw": ("stress", "social_withdrawal"),
    "soc_isolated": ("social", "isolated"),
    "vis_strain": ("ergonomics", "eye_strain"),
    "gi_bloat": ("nutrition", "bloating"),
    "post_fwd_head": ("posture", "forward_head"),
    "post_round_sh": ("posture", "rounded_shoulders"),
    "post_apt": ("posture", "anterior_pelvic_tilt"),
}

CARDIO_RISK_QUESTIONS = {
    "ch_bp": "Hypertension",
    "ch_palp": "Palpitations",
    "hab_smoke": "Smoking",
}

PHYSIQUE_QUESTIONS = {"ph_height": "height_cm", "ph_weight": "weight_kg"}

SLEEP_DURATION_BANDS = (("< 5", 4.0), ("5-7", 6.0), ("7-9", 8.0), ("> 9", 10.0))


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _split_tags(value: Any) -> list[str]:
    items = value if isinstance(value, (list, tuple)) else str(value).split(",")
    return [tag for tag in (normalize_tag(item) for item in items) if tag]


def _empty_intake() -> dict:
    return {
        "pain": {
            "locations": [],
            "quality": [],
            "aggravators": [],
            "pain_level": 0.0,
            "red_flags_symptoms": [],
        },
        "mobility": {},
        "posture": {},
        "sleep": {"hours": 7.0, "consistency": "good"},
        "social": {},
        "stress": {"stress_level": 0.0, "fear_movement": False},
        "cardio": {},
        "strength": {},
        "nutrition": {},
        "history": {},
        "ergonomics": {},
        "physique": {},
        "ros": {},
        "profile": {"age": 30},
    }


def _parse_step(raw: Any, index: int) -> HistoryStep:
    if not isinstance(raw, Mapping):
        raise IntakeError(
            f"History step {index} must be a mapping, got {type(raw).__name__}.",
            details={"index": index},
        )
    try:
        return HistoryStep.model_validate(dict(raw))
    except ValidationError as exc:
        raise IntakeError(
            f"History step {index} is malformed.",
            details={"index": index, "errors": [e["msg"] for e in exc.errors()]},
        ) from exc


def map_history_to_intake(history: Sequence[Mapping[str, Any]] | None) -> dict:
    """Builds the intake record from an ordered list of answered questions.

    Args:
        history: ``[{"id": ..., "answer": ..., "text": ...}, ...]``. ``None``
            is treated as an empty history.

    Returns:
        The intake dict with every section present.

    Raises:
        IntakeError: If *history* is not a list of mappings with string ids.
    """
    if history is None:
        history = []
    if isinstance(history, (str, bytes)) or not isinstance(history, Sequence):
        raise IntakeError(
            f"History must be a list of steps, got {type(history).__name__}.",
            details={"type": type(history).__name__},
        )

    data = _empty_intake()
    pain = data["pain"]

    for index, raw in enumerate(history):
        step = _parse_step(raw, index)
        qid = step.id
        value = step.answer
        answer = Answer.parse(value)

        if qid in TAG_LIST_QUESTIONS:
            pain[TAG_LIST_QUESTIONS[qid]].extend(_split_tags(value))
        elif qid in AGGRAVATOR_TRIGGERS:
            if answer is Answer.YES:
                pain["aggravators"].append(AGGRAVATOR_TRIGGERS[qid])
        elif qid in PAIN_LEVEL_QUESTIONS:
            pain["pain_level"] = max(pain["pain_level"], _number(value))
        elif qid in AGE_QUESTIONS:
            age = parse_age(value)
            if age is not None:
                data["profile"]["age"] = age
        elif qid in SCORE_SLIDERS:
            section, inverted = SCORE_SLIDERS[qid]
            rating = _number(value)
            data[section]["score"] = (10 - rating) * 10 if inverted else rating * 10
        elif qid == "str_lvl":
            data["stress"]["stress_level"] = _number(value)
        elif qid == "s_dur":
            text = str(value)
            for band, hours in SLEEP_DURATION_BANDS:
                if band in text:
                    data["sleep"]["hours"] = hours
                    break
            else:
                if _number(value) > 0:
                    data["sleep"]["hours"] = _number(value)
        elif qid in PHYSIQUE_QUESTIONS:
            data["physique"][PHYSIQUE_QUESTIONS[qid]] = _number(value)
        elif qid in CARDIO_RISK_QUESTIONS:
            if answer is Answer.YES:
                data["cardio"].setdefault("risk_factors", []).append(CARDIO_RISK_QUESTIONS[qid])
        elif qid not in FLAG_QUESTIONS and qid not in RED_FLAG_QUESTION_TAGS:
            logger.debug("No intake mapping for question '%s'.", qid)

        # Not elif: ros_malaise feeds both the stress flags and the red-flag scan.
        if qid in FLAG_QUESTIONS and answer is Answer.YES:
            section, key = FLAG_QUESTIONS[qid]
            data[section][key] = True
        if qid in RED_FLAG_QUESTION_TAGS:
            if qid.startswith("ros_"):
                data["ros"][qid] = answer.value
            elif answer is Answer.YES:
                pain["red_flags_symptoms"].append(RED_FLAG_QUESTION_TAGS[qid])

    return data
