"""Intake-boundary models: tri-state answers, tag normalisation, pain record."""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_NON_TAG_CHARS = re.compile(r"[^a-z0-9]+")

_YES_WORDS = {"yes", "y", "true", "si", "sí", "1"}
_NO_WORDS = {"no", "n", "false", "0", "none"}


def normalize_tag(value: Any) -> str:
    """Folds free text into the tag vocabulary: ``"Night Sweats"`` -> ``"night_sweats"``."""
    return _NON_TAG_CHARS.sub("_", str(value).strip().lower()).strip("_")


class Answer(str, Enum):
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Answer:
        """Resolves a raw questionnaire answer into a tri-state value.

        Booleans and numbers map directly (any positive number is YES).
        Strings are matched case-insensitively against yes/no words; anything
        else, including ``None`` and blank strings, is UNKNOWN.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, bool):
            return cls.YES if value else cls.NO
        if isinstance(value, (int, float)):
            return cls.YES if value > 0 else cls.NO
        text = str(value).strip().lower()
        if text in _YES_WORDS:
            return cls.YES
        if text in _NO_WORDS:
            return cls.NO
        return cls.UNKNOWN


class PainRecord(BaseModel):
    """The pain sub-record of an intake.

    Tag lists accept a bare string as a single tag. Non-string tags are a
    structural error and surface as a ``ValidationError``.
    """

    model_config = ConfigDict(extra="allow")

    locations: list[str] = Field(default_factory=list)
    quality: list[str] = Field(default_factory=list)
    aggravators: list[str] = Field(default_factory=list)
    red_flags_symptoms: list[str] = Field(default_factory=list)
    pain_level: float = Field(0.0, description="0-10, clamped")
    severity: str | None = None

    @field_validator(
        "locations", "quality", "aggravators", "red_flags_symptoms", mode="before"
    )
    @classmethod
    def _wrap_scalar(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("locations", "quality", "aggravators", "red_flags_symptoms")
    @classmethod
    def _normalise_tags(cls, value: list[str]) -> list[str]:
        tags = [normalize_tag(v) for v in value]
        return [t for t in tags if t]

    @field_validator("pain_level", mode="before")
    @classmethod
    def _default_level(cls, value: Any) -> Any:
        return 0.0 if value is None or value == "" else value

    @field_validator("pain_level")
    @classmethod
    def _clamp_level(cls, value: float) -> float:
        if math.isnan(value):
            return 0.0
        return min(10.0, max(0.0, value))


class HistoryStep(BaseModel):
    """One answered question in the raw answer history."""

    model_config = ConfigDict(extra="allow")

    id: str
    answer: Any = None
    text: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


def parse_age(value: Any) -> int | None:
    """Returns an integer age, or ``None`` when the value is missing, not numeric or not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return int(number)
