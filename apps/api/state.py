"""Shared in-process application state for the FastAPI server.

Holds the doctor and the compiled summary graph. Both are immutable after
start-up, so one instance serves all requests without locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from physio.agents import create_llm
from physio.agents.prompts import REPORT_WRITER_PROMPT
from physio.agents.report_writer import ReportWriterAgent
from physio.config import load_config
from physio.orchestration.doctor import DoctorEngine
from physio.orchestration.graph import build_graph

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Container for server-wide engines."""

    doctor: DoctorEngine | None = None
    graph: Any = None
    report_writer_available: bool = False


# Singleton imported by routers
app_state = AppState()


def init_app_state(config: dict | None = None) -> AppState:
    """Builds the engines from *config* (``configs/app.yaml`` by default)."""
    cfg = config or load_config()
    consult_cfg = cfg["consult"]
    llm_cfg = cfg["llm"]

    doctor = DoctorEngine(
        default_severity=consult_cfg["default_severity"],
        default_age=consult_cfg["default_age"],
    )
    llm = create_llm(
        model_path=llm_cfg["model_path"],
        n_ctx=llm_cfg["n_ctx"],
        n_gpu_layers=llm_cfg["n_gpu_layers"],
        chat_format=llm_cfg["chat_format"],
    )
    writer = (
        ReportWriterAgent(
            llm=llm,
            system_prompt=REPORT_WRITER_PROMPT,
            temperature=llm_cfg["temperature"],
            max_tokens=llm_cfg["max_tokens"],
        )
        if llm is not None
        else None
    )

    app_state.doctor = doctor
    app_state.graph = build_graph(doctor, writer, report_timeout=llm_cfg["timeout_seconds"])
    app_state.report_writer_available = writer is not None
    logger.info("API state ready (report writer available: %s).", writer is not None)
    return app_state
