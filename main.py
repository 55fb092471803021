"""Entry point CLI for the physio triage engine.

Usage examples::

    python main.py consult --intake intake.json
    python main.py summarize --history history.json --mode sim
    python main.py check-kb
    python main.py serve
"""

from __future__ import annotations

import json
import logging
import sys

import click

from physio.config import load_config


def _configure_logging(cfg: dict) -> None:
    logging.basicConfig(
        level=getattr(logging, str(cfg["logging"]["level"]).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _read_json(path: str) -> object:
    with open(path) as fh:
        return json.load(fh)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option("--config", default="configs/app.yaml", show_default=True, help="Config file.")
@click.pass_context
def cli(ctx: click.Context, config: str) -> None:
    """Physio triage engine: differential diagnosis, red flags and prognosis."""
    cfg = load_config(config)
    _configure_logging(cfg)
    ctx.obj = cfg


# ---------------------------------------------------------------------------
# consult
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--intake", required=True, type=click.Path(exists=True), help="Intake JSON.")
@click.pass_obj
def consult(cfg: dict, intake: str) -> None:
    """Runs one consult over a structured intake and prints the result as JSON."""
    from physio.errors import IntakeError
    from physio.orchestration.doctor import DoctorEngine

    doctor = DoctorEngine(
        default_severity=cfg["consult"]["default_severity"],
        default_age=cfg["consult"]["default_age"],
    )
    try:
        result = doctor.consult(_read_json(intake))
    except IntakeError as exc:
        raise click.ClickException(exc.message) from exc

    if result.safety.flags:
        click.echo(
            "⚠ RED FLAGS: " + ", ".join(f.condition_id for f in result.safety.flags),
            err=True,
        )
    click.echo(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--history", required=True, type=click.Path(exists=True), help="Answer history JSON.")
@click.option(
    "--mode",
    type=click.Choice(["sim", "ai"]),
    default="sim",
    show_default=True,
    help="'ai' tries the LLM report writer first.",
)
@click.pass_obj
def summarize(cfg: dict, history: str, mode: str) -> None:
    """Maps an answer history through the summary graph and prints the summary."""
    from physio.errors import IntakeError
    from physio.orchestration.graph import run_summary
    from apps.api.state import init_app_state

    if mode == "sim":
        cfg = {**cfg, "llm": {**cfg["llm"], "model_path": ""}}
    state = init_app_state(cfg)
    try:
        summary = run_summary(state.graph, _read_json(history), mode)
    except IntakeError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(json.dumps(summary, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# check-kb
# ---------------------------------------------------------------------------


@cli.command("check-kb")
def check_kb() -> None:
    """Validates the knowledge base tables; exits non-zero on failure."""
    from physio.errors import KnowledgeBaseError
    from physio.knowledge.base import KnowledgeBase

    try:
        kb = KnowledgeBase()
    except KnowledgeBaseError as exc:
        click.echo(f"✗ {exc.message}", err=True)
        sys.exit(1)

    click.echo(f"✓ {len(kb.signatures)} pathology signatures")
    click.echo(f"✓ {len(kb.red_flag_criteria)} red-flag conditions")
    click.echo(f"✓ {len(kb.dermatomes)} dermatome levels")


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", default=None, help="API host (overrides config).")
@click.option("--port", default=None, type=int, help="API port (overrides config).")
@click.pass_obj
def serve(cfg: dict, host: str | None, port: int | None) -> None:
    """Launches the FastAPI REST API."""
    import uvicorn

    api_host = host or cfg["api"]["host"]
    api_port = port or cfg["api"]["port"]

    click.echo(f"Starting API on http://{api_host}:{api_port}")
    uvicorn.run("apps.api.main:app", host=api_host, port=api_port, reload=cfg["api"]["reload"])


if __name__ == "__main__":
    cli()
