"""Pydantic models for consult output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from physio.schemas.intake import PainRecord


class SymptomSnapshot(BaseModel):
    """Per-request symptom profile matched against pathology signatures."""

    model_config = ConfigDict(frozen=True)

    locations: tuple[str, ...] = ()
    quality: tuple[str, ...] = ()
    aggravators: tuple[str, ...] = ()

    @classmethod
    def from_pain(cls, pain: PainRecord) -> SymptomSnapshot:
        return cls(
            locations=tuple(pain.locations),
            quality=tuple(pain.quality),
            aggravators=tuple(pain.aggravators),
        )

    def is_empty(self) -> bool:
        return not (self.locations or self.quality or self.aggravators)


class DiagnosisCandidate(BaseModel):
    pathology_id: str
    score: float = Field(..., ge=0.0, description="Match score, not a probability")


class SafetyFlag(BaseModel):
    condition_id: str
    matched_tags: list[str] = Field(default_factory=list)


class SafetyReport(BaseModel):
    flags: list[SafetyFlag] = Field(default_factory=list)

    @property
    def condition_ids(self) -> list[str]:
        return [f.condition_id for f in self.flags]


class Prognosis(BaseModel):
    weeks_min: int = Field(..., ge=1)
    weeks_max: int = Field(..., ge=1)
    tissue_category: str = "non_specific_mechanical"


class DiagnosisSummary(BaseModel):
    top_candidates: list[DiagnosisCandidate] = Field(default_factory=list)
    primary: str


class SoapNote(BaseModel):
    S: str
    O: str
    A: str
    P: str


class ConsultResult(BaseModel):
    """Complete output of one consult call."""

    safety: SafetyReport
    diagnosis: DiagnosisSummary
    prognosis: Prognosis
    modules: dict[str, dict] = Field(default_factory=dict)
    scores: dict[str, float] = Field(default_factory=dict)
    soap_report: SoapNote
    collaborator_errors: dict[str, str] = Field(
        default_factory=dict, description="Domain -> error message for failed specialists"
    )
