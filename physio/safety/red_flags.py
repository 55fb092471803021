"""Red-flag screening: zero-tolerance, any-match over the full criteria table.

Each criterion tag is a single finding serious enough on its own, so one
matching tag flags the condition. Every condition is evaluated on every call
and missing intake sections simply contribute no tags. Ambiguous input is
resolved towards flagging.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from physio.errors import IntakeError
from physio.knowledge.base import KnowledgeBase
from physio.knowledge.tables import RED_FLAG_QUESTION_TAGS
from physio.schemas.consult import SafetyFlag, SafetyReport
from physio.schemas.intake import Answer, normalize_tag, parse_age

logger = logging.getLogger(__name__)

# Sections whose keys are question ids or tags answered yes/no.
_ANSWER_SECTIONS = ("ros", "red_flags")

_AGE_TAG_THRESHOLDS = {"age_gt_70": 70}


def _resolve(tag: Any) -> str:
    normalised = normalize_tag(tag)
    return RED_FLAG_QUESTION_TAGS.get(normalised, normalised)


def _tags_from_sequence(values: Any) -> set[str]:
    if not values:
        return set()
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, Iterable):
        return set()
    return {_resolve(v) for v in values if normalize_tag(v)}


def _tags_from_answers(answers: Any) -> set[str]:
    """Yes-answered keys of a mapping; a bare list or string counts as tags asserted present."""
    if not isinstance(answers, Mapping):
        return _tags_from_sequence(answers)
    return {
        _resolve(key)
        for key, value in answers.items()
        if Answer.parse(value) is Answer.YES
    }


def collect_intake_tags(intake: Mapping[str, Any]) -> set[str]:
    """Gathers every tag the intake asserts as present.

    Sources: ``pain.red_flags_symptoms``, the ``ros`` / ``red_flags`` answer
    sections, ``history.flags`` plus yes-answered history keys, and age tags
    derived from ``profile.age``. Answer sections given as lists are read as
    tags that are present, so a mis-shaped section over-flags rather than
    vanishing.
    """
    tags: set[str] = set()

    pain = intake.get("pain") or {}
    if isinstance(pain, Mapping):
        tags |= _tags_from_sequence(pain.get("red_flags_symptoms"))

    for section in _ANSWER_SECTIONS:
        tags |= _tags_from_answers(intake.get(section))

    history = intake.get("history") or {}
    if isinstance(history, Mapping):
        tags |= _tags_from_sequence(history.get("flags"))
        tags |= _tags_from_answers({k: v for k, v in history.items() if k != "flags"})
    else:
        tags |= _tags_from_sequence(history)

    profile = intake.get("profile") or {}
    if isinstance(profile, Mapping):
        age = parse_age(profile.get("age"))
        if age is not None:
            tags |= {tag for tag, limit in _AGE_TAG_THRESHOLDS.items() if age > limit}

    return tags


class RedFlagEngine:
    """Scans an intake for danger signs independently of diagnosis ranking."""

    def __init__(self, knowledge_base: KnowledgeBase) -> None:
        self.kb = knowledge_base

    def scan(self, intake: Mapping[str, Any]) -> SafetyReport:
        """Returns one flag per condition with at least one matching tag.

        Flags follow the criteria table order; matched tags are sorted.

        Raises:
            IntakeError: If *intake* is not a mapping.
        """
        if not isinstance(intake, Mapping):
            raise IntakeError(
                f"Intake must be a mapping, got {type(intake).__name__}.",
                details={"type": type(intake).__name__},
            )

        present = collect_intake_tags(intake)
        flags: list[SafetyFlag] = []
        for condition_id, criteria in self.kb.red_flag_criteria.items():
            matched = criteria & present
            if matched:
                flags.append(SafetyFlag(condition_id=condition_id, matched_tags=sorted(matched)))

        if flags:
            logger.warning(
                "Red flags raised: %s",
                ", ".join(f"{f.condition_id}({'/'.join(f.matched_tags)})" for f in flags),
            )
        return SafetyReport(flags=flags)
