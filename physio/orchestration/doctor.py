"""The consult orchestrator ("doctor").

Composes the specialists, red-flag scan, differential diagnosis and recovery
estimate into one :class:`ConsultResult` with a SOAP note. Holds no session
state: every call recomputes from the complete intake it is given, so one
instance can serve concurrent requests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from physio.engines.differential import DifferentialDiagnosisEngine
from physio.engines.recovery import RecoveryTrajectoryEngine
from physio.engines.specialists import (
    NEUTRAL_SCORE,
    BiopsychosocialSpecialist,
    CardioSpecialist,
    ErgonomicsSpecialist,
    HistorySpecialist,
    MobilitySpecialist,
    NutritionSpecialist,
    PainSpecialist,
    PhysiqueSpecialist,
    PostureSpecialist,
    SleepSpecialist,
    StrengthSpecialist,
)
from physio.errors import IntakeError
from physio.knowledge import get_knowledge_base
from physio.knowledge.base import KnowledgeBase
from physio.safety.red_flags import RedFlagEngine
from physio.schemas.consult import (
    ConsultResult,
    DiagnosisSummary,
    Prognosis,
    SafetyReport,
    SoapNote,
    SymptomSnapshot,
)
from physio.schemas.intake import PainRecord, parse_age

logger = logging.getLogger(__name__)

FALLBACK_PRIMARY = "undetermined_mechanical_pain"

INTAKE_SECTIONS = (
    "pain",
    "mobility",
    "posture",
    "sleep",
    "social",
    "stress",
    "cardio",
    "strength",
    "nutrition",
    "history",
    "ergonomics",
    "physique",
    "profile",
    "ros",
    "red_flags",
)
SECTION_ALIASES = {"ergo": "ergonomics"}

# Module name -> label used in the flat score summary
SCORE_LABELS = {
    "pain": "Pain",
    "mobility": "Mobility",
    "posture": "Posture",
    "sleep": "Sleep",
    "psychosocial": "Stress",
    "cardio": "Cardio",
    "strength": "Strength",
    "nutrition": "Nutrition",
    "history": "History",
    "ergonomics": "Ergo",
    "physique": "Physique",
}


class DoctorEngine:
    """Runs a full consult over one intake record."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase | None = None,
        default_severity: str = "moderate",
        default_age: int = 30,
    ) -> None:
        self.kb = knowledge_base or get_knowledge_base()
        self.default_severity = default_severity
        self.default_age = default_age

        self.ddx = DifferentialDiagnosisEngine(self.kb)
        self.red_flags = RedFlagEngine(self.kb)
        self.trajectory = RecoveryTrajectoryEngine()

        self.pain = PainSpecialist(self.kb)
        self.mobility = MobilitySpecialist()
        self.posture = PostureSpecialist()
        self.sleep = SleepSpecialist()
        self.psychosocial = BiopsychosocialSpecialist()
        self.cardio = CardioSpecialist()
        self.strength = StrengthSpecialist()
        self.nutrition = NutritionSpecialist()
        self.history = HistorySpecialist()
        self.ergonomics = ErgonomicsSpecialist()
        self.physique = PhysiqueSpecialist()

    def consult(self, intake: Mapping[str, Any]) -> ConsultResult:
        """Produces the consult result for *intake*.

        Missing sub-records default to empty ones. A failing specialist is
        logged, scored neutrally and listed in ``collaborator_errors``.

        Raises:
            IntakeError: If the intake or one of its sub-records is not a
                mapping, or the pain record has structurally wrong fields.
        """
        sections = self._split(intake)
        pain = self._pain_record(sections["pain"])

        modules, errors = self._run_specialists(sections)
        safety = self.red_flags.scan(intake)

        candidates = self.ddx.analyze(SymptomSnapshot.from_pain(pain))
        primary = candidates[0].pathology_id if candidates else FALLBACK_PRIMARY

        profile = dict(sections["profile"])
        age = parse_age(profile.get("age"))
        profile["age"] = self.default_age if age is None else age
        severity = self._severity(intake, pain)
        prognosis = self.trajectory.predict(primary, severity, profile)

        scores = {label: float(modules[name]["score"]) for name, label in SCORE_LABELS.items()}
        soap = self._build_soap(modules, pain, primary, prognosis, safety)

        logger.info(
            "Consult complete: primary=%s candidates=%d flags=%d failed_modules=%d",
            primary,
            len(candidates),
            len(safety.flags),
            len(errors),
        )
        return ConsultResult(
            safety=safety,
            diagnosis=DiagnosisSummary(top_candidates=candidates, primary=primary),
            prognosis=prognosis,
            modules=modules,
            scores=scores,
            soap_report=soap,
            collaborator_errors=errors,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _split(self, intake: Any) -> dict[str, Mapping[str, Any]]:
        if not isinstance(intake, Mapping):
            raise IntakeError(
                f"Intake must be a mapping, got {type(intake).__name__}.",
                details={"type": type(intake).__name__},
            )

        sections: dict[str, Mapping[str, Any]] = {name: {} for name in INTAKE_SECTIONS}
        for key, value in intake.items():
            name = SECTION_ALIASES.get(key, key)
            if name not in sections or value is None:
                continue
            if not isinstance(value, Mapping):
                raise IntakeError(
                    f"Sub-record '{key}' must be a mapping, got {type(value).__name__}.",
                    details={"section": key, "type": type(value).__name__},
                )
            sections[name] = value
        return sections

    @staticmethod
    def _pain_record(pain: Mapping[str, Any]) -> PainRecord:
        try:
            return PainRecord.model_validate(dict(pain))
        except ValidationError as exc:
            raise IntakeError(
                "Pain sub-record is malformed.",
                details={"errors": [e["msg"] for e in exc.errors()]},
            ) from exc

    def _run_specialists(
        self, sections: Mapping[str, Mapping[str, Any]]
    ) -> tuple[dict[str, dict], dict[str, str]]:
        calls: dict[str, Callable[[], Any]] = {
            "pain": lambda: self.pain.analyze(sections["pain"]),
            "mobility": lambda: self.mobility.analyze(sections["mobility"]),
            "posture": lambda: self.posture.analyze(sections["posture"]),
            "sleep": lambda: self.sleep.analyze(sections["sleep"]),
            "psychosocial": lambda: self.psychosocial.analyze(sections["social"], sections["stress"]),
            "cardio": lambda: self.cardio.analyze(sections["cardio"]),
            "strength": lambda: self.strength.analyze(sections["strength"]),
            "nutrition": lambda: self.nutrition.analyze(sections["nutrition"]),
            "history": lambda: self.history.analyze(sections["history"]),
            "ergonomics": lambda: self.ergonomics.analyze(sections["ergonomics"]),
            "physique": lambda: self.physique.analyze(sections["physique"]),
        }

        modules: dict[str, dict] = {}
        errors: dict[str, str] = {}
        for name, call in calls.items():
            try:
                output = call()
                if not isinstance(output, Mapping):
                    raise TypeError(f"expected a mapping, got {type(output).__name__}")
                score = float(output["score"])
                modules[name] = {**output, "score": score}
            except Exception as exc:
                logger.exception("Specialist '%s' failed — using neutral score.", name)
                modules[name] = {"score": NEUTRAL_SCORE, "error": str(exc)}
                errors[name] = str(exc) or type(exc).__name__
        return modules, errors

    def _severity(self, intake: Mapping[str, Any], pain: PainRecord) -> str:
        for candidate in (intake.get("severity"), pain.severity):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip().lower()
        return self.default_severity

    @staticmethod
    def _build_soap(
        modules: Mapping[str, Mapping[str, Any]],
        pain: PainRecord,
        primary: str,
        prognosis: Prognosis,
        safety: SafetyReport,
    ) -> SoapNote:
        pain_out = modules["pain"]
        psych = modules["psychosocial"]
        mobility = modules["mobility"]
        posture = modules["posture"]
        strength = modules["strength"]
        sleep = modules["sleep"]

        assessment = (
            f"Primary diagnosis: {primary}. "
            f"Injury risk: {mobility.get('injury_risk') or 'Unknown'}. "
            f"Prognosis: {prognosis.weeks_min}-{prognosis.weeks_max} weeks."
        )
        if safety.flags:
            conditions = ", ".join(cid.upper() for cid in safety.condition_ids)
            assessment += f" RED FLAGS: {conditions}; refer for medical review before treatment."

        return SoapNote(
            S=(
                f"Patient reports {pain_out.get('type') or 'unspecified'} pain "
                f"(level {pain.pain_level:g}/10). "
                f"Psychosocial load: {psych.get('allostatic_load', 'n/a')}/10."
            ),
            O=(
                f"Functional movement score: {mobility['score']:g}/100. "
                f"Posture: {', '.join(posture.get('syndromes') or []) or 'Neutral'}."
            ),
            A=assessment,
            P=(
                f"Focus: {strength.get('training_priority') or 'General reconditioning'}. "
                f"Interventions: {', '.join(sleep.get('hygiene_protocol') or []) or 'Monitor'}."
            ),
        )
