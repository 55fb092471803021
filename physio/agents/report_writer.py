"""Report writer agent: optional LLM narrative over a finished consult."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from physio.agents.prompts import REPORT_WRITER_PROMPT
from physio.schemas.consult import ConsultResult

logger = logging.getLogger(__name__)

# Trailing commas before ] or }, a common LLM JSON defect.
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_SOAP_KEYS = ("S", "O", "A", "P")


def _sanitise_json(raw: str) -> str:
    """Strips trailing commas before closing brackets/braces."""
    return _TRAILING_COMMA_RE.sub(r"\1", raw)


def _extract_json_block(response: str) -> str:
    """Extracts the JSON payload from a model response.

    Handles fenced ```json blocks, plain ``` blocks and raw JSON.
    """
    if "```json" in response:
        return response.split("```json")[1].split("```")[0].strip()
    if "```" in response:
        return response.split("```")[1].split("```")[0].strip()
    return response.strip()


def _validate_report(parsed: Any) -> dict | None:
    if not isinstance(parsed, Mapping):
        return None
    title = parsed.get("diagnosis_title")
    soap = parsed.get("soap")
    explanation = parsed.get("explanation_for_patient")
    if not isinstance(title, str) or not title.strip():
        return None
    if not isinstance(explanation, str):
        return None
    if not isinstance(soap, Mapping) or not all(isinstance(soap.get(k), str) for k in _SOAP_KEYS):
        return None
    return {
        "diagnosis_title": title.strip(),
        "soap": {k: soap[k] for k in _SOAP_KEYS},
        "explanation_for_patient": explanation.strip(),
    }


class ReportWriterAgent:
    """Turns a consult into a narrative report, or ``None``.

    ``generate_report`` never raises: no model, an empty completion, invalid
    JSON or missing keys all yield ``None`` so the caller falls back to the
    rule-based summary. A failed completion is retried ``retries`` times.

    Attributes:
        llm: A loaded ``llama_cpp.Llama`` instance, or ``None`` when no model
            is available.
        system_prompt: The system message sent with every report request.
    """

    def __init__(
        self,
        llm: object | None,
        system_prompt: str = REPORT_WRITER_PROMPT,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        retries: int = 1,
    ) -> None:
        self.llm = llm
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retries = retries

    def generate_report(
        self, raw_history: Sequence[Mapping[str, Any]], consult: ConsultResult
    ) -> dict | None:
        if self.llm is None:
            return None
        response = self._complete(self._build_prompt(raw_history, consult))
        if not response:
            return None
        try:
            parsed = json.loads(_sanitise_json(_extract_json_block(response)))
        except json.JSONDecodeError as exc:
            logger.warning("Report writer returned invalid JSON (%s); using rule-based report.", exc)
            return None

        report = _validate_report(parsed)
        if report is None:
            logger.warning("Report writer JSON missing required keys; using rule-based report.")
        return report

    def _complete(self, prompt: str) -> str:
        """Returns the model's reply, or ``""`` once every attempt has failed."""
        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self.llm.create_chat_completion(  # type: ignore[union-attr]
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
                return response["choices"][0]["message"]["content"] or ""  # type: ignore[index]
            except Exception as exc:
                logger.warning("Report completion attempt %d/%d failed: %s", attempt, attempts, exc)
        logger.error("Report writer gave up after %d attempt(s).", attempts)
        return ""

    @staticmethod
    def _build_prompt(raw_history: Sequence[Mapping[str, Any]], consult: ConsultResult) -> str:
        answers = "\n".join(
            f"- {step.get('text') or step.get('id')}: {step.get('answer')}"
            for step in raw_history
            if isinstance(step, Mapping)
        )
        engine_output = json.dumps(consult.model_dump(mode="json"), indent=2)
        return (
            f"QUESTIONNAIRE ANSWERS:\n{answers or 'None recorded.'}\n\n"
            f"TRIAGE ENGINE OUTPUT:\n{engine_output}\n\n"
            f"Write the consult report as instructed. Output ONLY the JSON object."
        )
