"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from physio.knowledge import get_knowledge_base
from physio.knowledge.base import KnowledgeBase
from physio.orchestration.doctor import DoctorEngine


@pytest.fixture
def kb() -> KnowledgeBase:
    return get_knowledge_base()


@pytest.fixture
def doctor(kb: KnowledgeBase) -> DoctorEngine:
    return DoctorEngine(knowledge_base=kb)


@pytest.fixture
def sciatica_intake() -> dict:
    """A classic lumbar disc presentation with no danger signs."""
    return {
        "pain": {
            "locations": ["low_back", "leg", "foot"],
            "quality": ["shooting", "electric"],
            "aggravators": ["sitting", "bending_forward"],
            "pain_level": 7,
        },
        "mobility": {"score": 60},
        "posture": {"forward_head": "yes"},
        "sleep": {"hours": 6, "consistency": "poor"},
        "stress": {"stress_level": 6, "fear_movement": True},
        "strength": {"score": 45},
        "profile": {"age": 45},
    }


@pytest.fixture
def sciatica_history() -> list[dict]:
    """The same presentation as a raw questionnaire history."""
    return [
        {"id": "age", "answer": 45, "text": "45"},
        {"id": "p_loc", "answer": "Low Back, Leg, Foot", "text": "Low back, leg and foot"},
        {"id": "p_qual", "answer": "Shooting, Electric", "text": "Shooting / electric"},
        {"id": "p_trig_sit", "answer": "yes", "text": "Worse sitting?"},
        {"id": "p_trig_bend", "answer": "Yes", "text": "Worse bending forward?"},
        {"id": "p_int_rest", "answer": 4},
        {"id": "p_int_move", "answer": 8},
        {"id": "ros_fever", "answer": "no"},
    ]
