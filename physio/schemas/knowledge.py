"""Pydantic models for the reference tables held by the KnowledgeBase."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PathologySignature(BaseModel):
    """Reference symptom profile for one condition.

    Priors are scored independently per signature; they are not mutually
    exclusive hypotheses and need not sum to 1.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique pathology id")
    regions: frozenset[str] = Field(default_factory=frozenset)
    quality: frozenset[str] = Field(default_factory=frozenset)
    aggravators: frozenset[str] = Field(default_factory=frozenset)
    relievers: frozenset[str] = Field(default_factory=frozenset)
    risk_factors: frozenset[str] = Field(default_factory=frozenset)
    associated_signs: frozenset[str] = Field(default_factory=frozenset)
    red_flag: bool = Field(False, description="Condition itself warrants urgent referral")
    history_flag: str | None = Field(None, description="History tag typical of the condition")
    probability_base: float = Field(..., ge=0.0, le=1.0, description="Prior in [0, 1]")
