"""Per-domain specialist scorers.

Each specialist reduces one intake sub-record to a 0-100 score plus a few
domain fields the clinical note draws on. They are reference heuristics, not
calibrated instruments: when the intake mapper already supplies a ``score``
(from a self-rating slider) it is used as the starting point.

Every specialist must accept an empty record and return a valid default.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from physio.knowledge.base import KnowledgeBase
from physio.schemas.intake import Answer, PainRecord

NEUTRAL_SCORE = 50.0

NEUROPATHIC_QUALITIES = frozenset(
    {"shooting", "electric", "burning", "numbness", "tingling", "pins_and_needles"}
)


def _clamp(value: float) -> float:
    return round(min(100.0, max(0.0, float(value))), 1)


def _number(record: Mapping[str, Any], key: str, default: float) -> float:
    value = record.get(key)
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _flag(record: Mapping[str, Any], key: str) -> bool:
    return Answer.parse(record.get(key)) is Answer.YES


def _tags(record: Mapping[str, Any], key: str) -> list[str]:
    value = record.get(key) or []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class BaseSpecialist(ABC):
    """Common interface for all domain scorers."""

    domain: str = ""
    default_score: float = 70.0

    @abstractmethod
    def analyze(self, record: Mapping[str, Any]) -> dict:
        """Scores one sub-record.

        Returns:
            A dict with at least ``score`` in [0, 100].
        """

    def _base_score(self, record: Mapping[str, Any]) -> float:
        return _number(record, "score", self.default_score)


class PainSpecialist(BaseSpecialist):
    """Classifies pain mechanism and maps locations onto dermatomes."""

    domain = "pain"

    def __init__(self, knowledge_base: KnowledgeBase) -> None:
        self.kb = knowledge_base

    def analyze(self, record: Mapping[str, Any]) -> dict:
        pain = PainRecord.model_validate(dict(record))
        if pain.quality and NEUROPATHIC_QUALITIES.intersection(pain.quality):
            pain_type = "neuropathic"
        elif pain.quality or pain.locations:
            pain_type = "nociceptive"
        else:
            pain_type = "unspecified"

        dermatomes: list[str] = []
        for location in pain.locations:
            level = self.kb.get_dermatome(location)
            if level and level not in dermatomes:
                dermatomes.append(level)

        return {
            "score": _clamp(100.0 - pain.pain_level * 10.0),
            "type": pain_type,
            "pain_level": pain.pain_level,
            "dermatomes": dermatomes,
        }


class MobilitySpecialist(BaseSpecialist):
    domain = "mobility"
    default_score = 80.0

    def analyze(self, record: Mapping[str, Any]) -> dict:
        restricted = _tags(record, "restricted_joints")
        score = _clamp(self._base_score(record) - 10.0 * len(restricted))
        if score < 40:
            injury_risk = "High"
        elif score < 70:
            injury_risk = "Moderate"
        else:
            injury_risk = "Low"
        return {"score": score, "injury_risk": injury_risk, "restricted_joints": restricted}


class PostureSpecialist(BaseSpecialist):
    domain = "posture"
    default_score = 80.0

    _SYNDROMES = (
        ("upper_crossed_syndrome", ("forward_head", "rounded_shoulders")),
        ("lower_crossed_syndrome", ("anterior_pelvic_tilt",)),
        ("flat_back", ("posterior_pelvic_tilt",)),
    )

    def analyze(self, record: Mapping[str, Any]) -> dict:
        syndromes = [
            name for name, signs in self._SYNDROMES if any(_flag(record, s) for s in signs)
        ]
        score = _clamp(self._base_score(record) - 15.0 * len(syndromes))
        return {"score": score, "syndromes": syndromes}


class SleepSpecialist(BaseSpecialist):
    domain = "sleep"
    default_score = 80.0

    def analyze(self, record: Mapping[str, Any]) -> dict:
        hours = _number(record, "hours", 7.0)
        consistency = str(record.get("consistency") or "good").lower()

        protocol: list[str] = []
        penalty = 0.0
        if hours < 7:
            penalty += 15.0 * (7 - hours)
            protocol.append("Extend sleep opportunity to 7-9 hours")
        if consistency != "good":
            penalty += 15.0
            protocol.append("Fix wake time, including weekends")
        if _flag(record, "screen_before_bed"):
            penalty += 5.0
            protocol.append("No screens 60 minutes before bed")

        score = _clamp(self._base_score(record) - penalty)
        return {"score": score, "hours": hours, "hygiene_protocol": protocol}


class BiopsychosocialSpecialist(BaseSpecialist):
    """Combines the social and stress sub-records into an allostatic load."""

    domain = "psychosocial"

    _YELLOW_FLAGS = (
        "fear_movement",
        "depression_screen",
        "anxiety_screen",
        "irritability",
        "social_withdrawal",
        "malaise",
        "isolated",
        "work_dissatisfaction",
    )

    def analyze(self, social: Mapping[str, Any], stress: Mapping[str, Any] | None = None) -> dict:
        merged = {**(social or {}), **(stress or {})}
        stress_level = min(10.0, max(0.0, _number(merged, "stress_level", 0.0)))
        yellow_flags = [name for name in self._YELLOW_FLAGS if _flag(merged, name)]
        load = round(min(10.0, stress_level * 0.5 + 1.5 * len(yellow_flags)), 1)
        return {
            "score": _clamp(100.0 - load * 10.0),
            "allostatic_load": load,
            "yellow_flags": yellow_flags,
        }


class CardioSpecialist(BaseSpecialist):
    domain = "cardio"

    def analyze(self, record: Mapping[str, Any]) -> dict:
        risk_factors = _tags(record, "risk_factors")
        score = _clamp(self._base_score(record) - 10.0 * len(risk_factors))
        recommendation = (
            "Medical clearance before vigorous exercise"
            if len(risk_factors) >= 2
            else "Progressive aerobic conditioning"
        )
        return {"score": score, "risk_factors": risk_factors, "recommendation": recommendation}


class StrengthSpecialist(BaseSpecialist):
    domain = "strength"
    default_score = 60.0

    def analyze(self, record: Mapping[str, Any]) -> dict:
        weak_links = _tags(record, "weak_links")
        score = _clamp(self._base_score(record) - 5.0 * len(weak_links))
        if score < 40:
            priority = "Foundational motor control and isometric loading"
        elif score < 70:
            priority = "Progressive resistance for work capacity"
        else:
            priority = "Power and return-to-sport conditioning"
        return {"score": score, "training_priority": priority, "weak_links": weak_links}


class NutritionSpecialist(BaseSpecialist):
    domain = "nutrition"

    def analyze(self, record: Mapping[str, Any]) -> dict:
        notes: list[str] = []
        score = self._base_score(record)
        if _flag(record, "bloating"):
            score -= 10.0
            notes.append("Review gut tolerance and fibre intake")
        if _number(record, "water_litres", 2.0) < 1.5:
            score -= 10.0
            notes.append("Increase daily fluid intake")
        return {"score": _clamp(score), "notes": notes}


class HistorySpecialist(BaseSpecialist):
    domain = "history"
    default_score = 100.0

    def analyze(self, record: Mapping[str, Any]) -> dict:
        injuries = _tags(record, "previous_injuries")
        surgeries = _tags(record, "surgeries")
        duration = _number(record, "duration_weeks", 0.0)
        chronicity = "chronic" if duration > 12 else "subacute" if duration > 6 else "acute"
        score = _clamp(self._base_score(record) - 10.0 * len(injuries) - 15.0 * len(surgeries))
        return {
            "score": score,
            "chronicity": chronicity,
            "previous_injuries": injuries,
            "surgeries": surgeries,
        }


class ErgonomicsSpecialist(BaseSpecialist):
    domain = "ergonomics"

    def analyze(self, record: Mapping[str, Any]) -> dict:
        recommendations: list[str] = []
        score = self._base_score(record)
        if _flag(record, "eye_strain"):
            score -= 10.0
            recommendations.append("Raise screen to eye level and apply 20-20-20 breaks")
        if _number(record, "sitting_hours", 0.0) > 6:
            score -= 10.0
            recommendations.append("Break up sitting every 30 minutes")
        return {"score": _clamp(score), "recommendations": recommendations}


class PhysiqueSpecialist(BaseSpecialist):
    domain = "physique"

    def analyze(self, record: Mapping[str, Any]) -> dict:
        height_cm = _number(record, "height_cm", 0.0)
        weight_kg = _number(record, "weight_kg", 0.0)
        if height_cm <= 0 or weight_kg <= 0:
            return {"score": _clamp(self._base_score(record)), "bmi": None, "category": "unknown"}

        bmi = round(weight_kg / (height_cm / 100.0) ** 2, 1)
        if bmi < 18.5:
            category, score = "underweight", 70.0
        elif bmi < 25:
            category, score = "healthy", 90.0
        elif bmi < 30:
            category, score = "overweight", 70.0
        else:
            category, score = "obese", 50.0
        return {"score": score, "bmi": bmi, "category": category}
