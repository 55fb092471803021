"""LangGraph pipeline turning an answer history into a final summary."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from langgraph.graph import END, StateGraph

from physio.agents.report_writer import ReportWriterAgent
from physio.orchestration.doctor import DoctorEngine
from physio.orchestration.nodes import SummaryNodes
from physio.orchestration.state import SummaryState


def build_graph(
    doctor: DoctorEngine | None = None,
    report_writer: ReportWriterAgent | None = None,
    report_timeout: float = 20.0,
):
    """Builds the summary graph.

    Flow:
    map_intake -> quality_check -> run_consult
        |- (sim) -> rule_summary -> END
        |- (ai)  -> write_ai_report
                      |- (report)  -> END
                      |- (none)    -> rule_summary -> END

    The rule-based branch is always reachable, so a missing, slow or failing
    report writer never prevents a summary.
    """
    nodes = SummaryNodes(doctor or DoctorEngine(), report_writer, report_timeout)

    graph = StateGraph(SummaryState)

    graph.add_node("map_intake", nodes.map_intake)
    graph.add_node("quality_check", nodes.quality_check)
    graph.add_node("run_consult", nodes.run_consult)
    graph.add_node("write_ai_report", nodes.write_ai_report)
    graph.add_node("rule_summary", nodes.rule_summary)

    graph.set_entry_point("map_intake")
    graph.add_edge("map_intake", "quality_check")
    graph.add_edge("quality_check", "run_consult")
    graph.add_conditional_edges("run_consult", _route_mode, {
        "ai": "write_ai_report",
        "sim": "rule_summary",
    })
    graph.add_conditional_edges("write_ai_report", _route_report, {
        "done": END,
        "fallback": "rule_summary",
    })
    graph.add_edge("rule_summary", END)

    return graph.compile()


def _route_mode(state: SummaryState) -> str:
    return "ai" if state.get("mode") == "ai" else "sim"


def _route_report(state: SummaryState) -> str:
    return "done" if state.get("summary") else "fallback"


def run_summary(
    graph: Any, history: Sequence[Mapping[str, Any]] | None, mode: str = "sim"
) -> dict:
    """Invokes a compiled summary graph and returns the summary dict."""
    final_state = graph.invoke({"history": list(history or []), "mode": mode})
    return final_state["summary"]
