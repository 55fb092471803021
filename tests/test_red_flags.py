"""Tests for the red-flag screening engine."""

from __future__ import annotations

import json

import pytest

from physio.errors import IntakeError
from physio.knowledge.base import KnowledgeBase
from physio.safety.red_flags import RedFlagEngine, collect_intake_tags


@pytest.fixture
def engine(kb: KnowledgeBase) -> RedFlagEngine:
    return RedFlagEngine(kb)


class TestCollectIntakeTags:
    def test_symptom_list_is_normalised(self) -> None:
        tags = collect_intake_tags({"pain": {"red_flags_symptoms": ["Night Sweats", " FEVER "]}})
        assert tags == {"night_sweats", "fever"}

    def test_question_ids_resolve_to_tags(self) -> None:
        tags = collect_intake_tags({"ros": {"ros_weight": "yes", "ros_fever": "no"}})
        assert tags == {"unexplained_weight_loss"}

    def test_unknown_answers_contribute_nothing(self) -> None:
        assert collect_intake_tags({"ros": {"ros_fever": "unknown", "ros_chills": None}}) == set()

    def test_history_flags_and_answers(self) -> None:
        tags = collect_intake_tags(
            {"history": {"flags": ["history_cancer"], "hx_trauma": True, "hx_steroids": False}}
        )
        assert tags == {"history_cancer", "trauma_history"}

    @pytest.mark.parametrize(
        "age, expected",
        [
            (75, {"age_gt_70"}),
            (70, set()),
            ("abc", set()),
            ("inf", set()),
            (float("inf"), set()),
            ("nan", set()),
        ],
    )
    def test_age_derived_tag(self, age, expected: set) -> None:
        assert collect_intake_tags({"profile": {"age": age}}) == expected

    def test_missing_sections_are_ignored(self) -> None:
        assert collect_intake_tags({"pain": None, "ros": None, "history": None}) == set()

    def test_list_shaped_answer_sections_count_as_present(self) -> None:
        tags = collect_intake_tags(
            {"ros": ["fever", "ros_sweat"], "red_flags": "neuro_saddle", "history": ["hx_trauma"]}
        )
        assert tags == {"fever", "night_sweats", "saddle_anesthesia", "trauma_history"}


class TestScan:
    def test_empty_intake_raises_no_flags(self, engine: RedFlagEngine) -> None:
        assert engine.scan({}).flags == []

    @pytest.mark.parametrize(
        "tag",
        ["saddle_anesthesia", "bladder_retention", "bowel_incontinence", "bilateral_leg_weakness"],
    )
    def test_any_single_cauda_equina_tag_flags(self, engine: RedFlagEngine, tag: str) -> None:
        report = engine.scan({"pain": {"red_flags_symptoms": [tag]}})
        assert report.condition_ids == ["cauda_equina"]
        assert report.flags[0].matched_tags == [tag]

    def test_systemic_answers_flag_malignancy(self, engine: RedFlagEngine) -> None:
        intake = {
            "ros": {"ros_fever": "yes", "ros_weight": "yes"},
            "pain": {"red_flags_symptoms": ["night_sweats"]},
        }
        report = engine.scan(intake)
        assert "malignancy" in report.condition_ids
        malignancy = next(f for f in report.flags if f.condition_id == "malignancy")
        assert malignancy.matched_tags == ["night_sweats", "unexplained_weight_loss"]
        assert "infection" in report.condition_ids

    def test_every_condition_is_evaluated_in_table_order(self, engine: RedFlagEngine) -> None:
        intake = {
            "pain": {
                "red_flags_symptoms": [
                    "calf_swelling",
                    "jaw_pain",
                    "chills",
                    "history_cancer",
                    "osteoporosis",
                    "saddle_anesthesia",
                ]
            }
        }
        assert engine.scan(intake).condition_ids == [
            "cauda_equina",
            "fracture",
            "malignancy",
            "infection",
            "myocardial_infarction",
            "dvt",
        ]

    def test_elderly_profile_flags_fracture(self, engine: RedFlagEngine) -> None:
        report = engine.scan({"profile": {"age": 82}})
        assert report.condition_ids == ["fracture"]
        assert report.flags[0].matched_tags == ["age_gt_70"]

    def test_ignores_pain_pattern(self, engine: RedFlagEngine) -> None:
        intake = {"pain": {"locations": ["low_back"], "quality": ["electric"], "pain_level": 10}}
        assert engine.scan(intake).flags == []

    def test_non_mapping_intake_rejected(self, engine: RedFlagEngine) -> None:
        with pytest.raises(IntakeError):
            engine.scan(["saddle_anesthesia"])  # type: ignore[arg-type]

    def test_list_shaped_review_of_systems_flags(self, engine: RedFlagEngine) -> None:
        report = engine.scan({"ros": ["fever", "night_sweats"]})
        assert report.condition_ids == ["malignancy", "infection"]

    @pytest.mark.parametrize("age", ["inf", "-inf", "nan", float("inf")])
    def test_non_finite_age_does_not_abort_scan(self, engine: RedFlagEngine, age) -> None:
        intake = {"profile": {"age": age}, "pain": {"red_flags_symptoms": ["saddle_anesthesia"]}}
        assert engine.scan(intake).condition_ids == ["cauda_equina"]

    def test_overflowing_json_age(self, engine: RedFlagEngine) -> None:
        intake = json.loads(
            '{"profile": {"age": 1e400}, "pain": {"red_flags_symptoms": ["bowel_incontinence"]}}'
        )
        assert engine.scan(intake).condition_ids == ["cauda_equina"]
