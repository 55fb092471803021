"""Tests for the summary graph and its nodes."""

from __future__ import annotations

import json
import threading
from unittest.mock import MagicMock

import pytest

from physio.agents.prompts import REPORT_WRITER_PROMPT
from physio.agents.report_writer import ReportWriterAgent
from physio.errors import IntakeError
from physio.orchestration.doctor import DoctorEngine
from physio.orchestration.graph import build_graph, run_summary
from physio.orchestration.nodes import SummaryNodes, build_rule_summary

AI_REPORT = {
    "diagnosis_title": "Lumbar disc herniation (L5/S1)",
    "soap": {"S": "s", "O": "o", "A": "a", "P": "p"},
    "explanation_for_patient": "A disc is pressing on a nerve.",
}


def _writer(return_value=None, side_effect=None) -> MagicMock:
    writer = MagicMock(spec=ReportWriterAgent)
    writer.generate_report.return_value = return_value
    writer.generate_report.side_effect = side_effect
    return writer


class TestBuildRuleSummary:
    def test_rule_summary_fields(self, doctor: DoctorEngine, sciatica_intake: dict) -> None:
        summary = build_rule_summary(doctor.consult(sciatica_intake), {"score": 100})
        assert summary["diagnosis"] == "LUMBAR DISC HERNIATION"
        assert summary["severity"] == "Severe"
        assert summary["red_flags"] == []
        assert summary["is_ai"] is False
        assert summary["quality_control"] == {"score": 100}
        assert set(summary["soap"]) == {"S", "O", "A", "P"}

    def test_red_flags_labelled(self, doctor: DoctorEngine) -> None:
        consult = doctor.consult({"history": {"flags": ["history_cancer"]}, "pain": {"pain_level": 2}})
        summary = build_rule_summary(consult)
        assert summary["red_flags"] == ["MALIGNANCY Risk"]
        assert summary["severity"] == "Moderate"
        assert "medical review" in summary["explanation"]


class TestSummaryGraph:
    def test_sim_mode_is_rule_based(self, doctor: DoctorEngine, sciatica_history: list) -> None:
        writer = _writer(AI_REPORT)
        graph = build_graph(doctor, writer)
        summary = run_summary(graph, sciatica_history, "sim")
        assert summary["is_ai"] is False
        assert summary["diagnosis"] == "LUMBAR DISC HERNIATION"
        assert summary["quality_control"]["is_reliable"] is True
        writer.generate_report.assert_not_called()

    def test_ai_mode_uses_report(self, doctor: DoctorEngine, sciatica_history: list) -> None:
        graph = build_graph(doctor, _writer(AI_REPORT))
        summary = run_summary(graph, sciatica_history, "ai")
        assert summary["is_ai"] is True
        assert summary["diagnosis"] == AI_REPORT["diagnosis_title"]
        assert summary["soap"] == AI_REPORT["soap"]
        assert summary["explanation"] == AI_REPORT["explanation_for_patient"]

    def test_ai_mode_with_real_agent_and_mock_llm(
        self, doctor: DoctorEngine, sciatica_history: list
    ) -> None:
        mock_llm = MagicMock()
        mock_llm.create_chat_completion.return_value = {
            "choices": [{"message": {"content": json.dumps(AI_REPORT)}}]
        }
        agent = ReportWriterAgent(llm=mock_llm, system_prompt=REPORT_WRITER_PROMPT)
        summary = run_summary(build_graph(doctor, agent), sciatica_history, "ai")
        assert summary["is_ai"] is True

    def test_ai_mode_without_writer_falls_back(
        self, doctor: DoctorEngine, sciatica_history: list
    ) -> None:
        summary = run_summary(build_graph(doctor, None), sciatica_history, "ai")
        assert summary["is_ai"] is False

    @pytest.mark.parametrize(
        "writer_kwargs",
        [{"return_value": None}, {"side_effect": RuntimeError("model crashed")}],
    )
    def test_ai_mode_writer_failure_falls_back(
        self, doctor: DoctorEngine, sciatica_history: list, writer_kwargs: dict
    ) -> None:
        summary = run_summary(build_graph(doctor, _writer(**writer_kwargs)), sciatica_history, "ai")
        assert summary["is_ai"] is False
        assert summary["diagnosis"] == "LUMBAR DISC HERNIATION"

    def test_slow_writer_falls_back_after_timeout(
        self, doctor: DoctorEngine, sciatica_history: list
    ) -> None:
        release = threading.Event()

        def _slow(*_args):
            release.wait(5)
            return AI_REPORT

        writer = _writer(side_effect=_slow)
        try:
            summary = run_summary(
                build_graph(doctor, writer, report_timeout=0.05), sciatica_history, "ai"
            )
        finally:
            release.set()
        assert summary["is_ai"] is False

    def test_red_flags_survive_both_paths(self, doctor: DoctorEngine) -> None:
        history = [{"id": "neuro_bladder", "answer": "yes"}]
        for mode, writer in (("sim", None), ("ai", _writer(AI_REPORT))):
            summary = run_summary(build_graph(doctor, writer), history, mode)
            assert summary["red_flags"] == ["CAUDA_EQUINA Risk"]

    def test_malformed_history_raises(self, doctor: DoctorEngine) -> None:
        with pytest.raises(IntakeError):
            run_summary(build_graph(doctor), [{"id": "age", "answer": 40}, 7], "sim")


class TestSummaryNodes:
    def test_nodes_return_partial_updates(self, doctor: DoctorEngine, sciatica_history: list) -> None:
        nodes = SummaryNodes(doctor)
        state: dict = {"history": sciatica_history, "mode": "sim"}
        state.update(nodes.map_intake(state))
        state.update(nodes.quality_check(state))
        update = nodes.run_consult(state)
        assert set(update) == {"consult", "current_step"}
        assert update["consult"].diagnosis.primary == "lumbar_disc_herniation"

    def test_write_ai_report_without_writer(self, doctor: DoctorEngine, sciatica_intake: dict) -> None:
        update = SummaryNodes(doctor).write_ai_report({"consult": doctor.consult(sciatica_intake)})
        assert update["ai_report"] is None
        assert "summary" not in update
