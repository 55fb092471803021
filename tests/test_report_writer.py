"""Tests for ReportWriterAgent with a mocked LLM."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from physio.agents import create_llm
from physio.agents.prompts import REPORT_WRITER_PROMPT
from physio.agents.report_writer import ReportWriterAgent
from physio.orchestration.doctor import DoctorEngine
from physio.schemas.consult import ConsultResult

VALID_REPORT = {
    "diagnosis_title": "Lumbar disc herniation",
    "soap": {"S": "Shooting leg pain.", "O": "Movement 60/100.", "A": "Likely L5/S1.", "P": "Load."},
    "explanation_for_patient": "Your nerve is irritated but this usually settles.",
}


def _make_writer(content: str | Exception) -> ReportWriterAgent:
    mock_llm = MagicMock()
    if isinstance(content, Exception):
        mock_llm.create_chat_completion.side_effect = content
    else:
        mock_llm.create_chat_completion.return_value = {
            "choices": [{"message": {"content": content}}]
        }
    return ReportWriterAgent(llm=mock_llm, system_prompt=REPORT_WRITER_PROMPT)


@pytest.fixture
def consult(doctor: DoctorEngine, sciatica_intake: dict) -> ConsultResult:
    return doctor.consult(sciatica_intake)


class TestGenerateReport:
    def test_parses_fenced_json(self, consult: ConsultResult, sciatica_history: list) -> None:
        writer = _make_writer(f"Here you go:\n```json\n{json.dumps(VALID_REPORT)}\n```")
        assert writer.generate_report(sciatica_history, consult) == VALID_REPORT

    def test_parses_raw_json_with_trailing_commas(self, consult: ConsultResult) -> None:
        raw = json.dumps(VALID_REPORT)[:-1] + ",}"
        assert _make_writer(raw).generate_report([], consult) == VALID_REPORT

    def test_prompt_carries_answers_and_engine_output(
        self, consult: ConsultResult, sciatica_history: list
    ) -> None:
        writer = _make_writer(json.dumps(VALID_REPORT))
        writer.generate_report(sciatica_history, consult)

        messages = writer.llm.create_chat_completion.call_args.kwargs["messages"]
        assert messages[0]["content"] == REPORT_WRITER_PROMPT
        assert "Worse sitting?: yes" in messages[1]["content"]
        assert "lumbar_disc_herniation" in messages[1]["content"]

    def test_no_model_returns_none(self, consult: ConsultResult) -> None:
        writer = ReportWriterAgent(llm=None, system_prompt=REPORT_WRITER_PROMPT)
        assert writer.generate_report([], consult) is None

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "I cannot produce JSON today.",
            json.dumps({"diagnosis_title": "x"}),
            json.dumps({**VALID_REPORT, "soap": {"S": "only subjective"}}),
            json.dumps(["not", "an", "object"]),
        ],
    )
    def test_unusable_output_returns_none(self, consult: ConsultResult, content: str) -> None:
        assert _make_writer(content).generate_report([], consult) is None

    def test_llm_failure_returns_none(self, consult: ConsultResult) -> None:
        assert _make_writer(RuntimeError("gpu on fire")).generate_report([], consult) is None


class TestModelCalls:
    def test_transient_failure_is_retried(self, consult: ConsultResult) -> None:
        mock_llm = MagicMock()
        mock_llm.create_chat_completion.side_effect = [
            RuntimeError("context overflow"),
            {"choices": [{"message": {"content": json.dumps(VALID_REPORT)}}]},
        ]
        writer = ReportWriterAgent(llm=mock_llm)
        assert writer.generate_report([], consult) == VALID_REPORT
        assert mock_llm.create_chat_completion.call_count == 2

    def test_gives_up_after_configured_retries(self, consult: ConsultResult) -> None:
        writer = _make_writer(RuntimeError("always fails"))
        writer.retries = 2
        assert writer.generate_report([], consult) is None
        assert writer.llm.create_chat_completion.call_count == 3

    def test_sampling_parameters_forwarded(self, consult: ConsultResult) -> None:
        mock_llm = MagicMock()
        mock_llm.create_chat_completion.return_value = {
            "choices": [{"message": {"content": json.dumps(VALID_REPORT)}}]
        }
        ReportWriterAgent(llm=mock_llm, temperature=0.7, max_tokens=256).generate_report(
            [], consult
        )
        kwargs = mock_llm.create_chat_completion.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 256

    def test_null_content_returns_none(self, consult: ConsultResult) -> None:
        mock_llm = MagicMock()
        mock_llm.create_chat_completion.return_value = {"choices": [{"message": {"content": None}}]}
        assert ReportWriterAgent(llm=mock_llm).generate_report([], consult) is None


class TestCreateLlm:
    def test_missing_model_file_returns_none(self, tmp_path) -> None:
        assert create_llm(str(tmp_path / "absent.gguf")) is None

    def test_blank_path_returns_none(self) -> None:
        assert create_llm("") is None

    def test_directory_is_not_a_model(self, tmp_path) -> None:
        assert create_llm(str(tmp_path)) is None
