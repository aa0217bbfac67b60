"""Entry point for the site replicator: crawl a web app and generate a React clone."""

import argparse
import asyncio
import logging
import sys
import time
import uuid

from dotenv import load_dotenv

load_dotenv()

from config import Settings
from errors import ConfigError, ReplicatorError
from generation_client import GenerationClient
from graph import build_graph
from observability.metrics import COST_PER_RUN, RUN_DURATION, start_metrics_server
from persistence.run_store import create_run, init_db, list_runs, update_run
from stages.materializer import FileVerdict, validate_project


def _print_artifact_table(rows: list[FileVerdict]) -> None:
    """Print one line per file with its verdict and outstanding violations."""
    print(f"\n  {'File':<40} {'Verdict':<22} {'Tries':>5}  Violations")
    print(f"  {'-'*88}")
    for row in sorted(rows, key=lambda r: r.relative_path):
        violations = ", ".join(row.violations) or "-"
        print(f"  {row.relative_path:<40} {row.verdict:<22} {row.attempts:>5}  {violations}")
    print(f"  {'-'*88}")
    failed = sum(1 for r in rows if not r.ok)
    print(f"  {len(rows)} file(s), {len(rows) - failed} passed, {failed} with defects")


def _print_run_history(limit: int) -> None:
    """Print recent run history as a table."""
    runs = list_runs(limit=limit)
    if not runs:
        print("No runs found.")
        return

    print(f"\n{'='*96}")
    print(
        f"  {'Run ID':<10} {'Mode':<11} {'Status':<10} {'Pages':>5} {'Files':>5} "
        f"{'Defects':>7} {'Tokens':>10} {'Cost':>10} {'Created':<17}"
    )
    print(f"  {'-'*92}")
    for run in runs:
        created = run.created_at.strftime("%Y-%m-%d %H:%M") if run.created_at else "-"
        print(
            f"  {run.id:<10} {run.mode:<11} {run.status:<10} {run.pages:>5} {run.artifacts:>5} "
            f"{run.defects + run.placeholders:>7} {run.total_tokens:>10,} ${run.cost_usd:>9.6f} {created:<17}"
        )
    print(f"{'='*96}")
    print(f"  {len(runs)} run(s) shown\n")


async def _stream(app, initial_state: dict) -> dict:
    final_state = initial_state
    step = 0
    async for event in app.astream(initial_state):
        for node_name, state_update in event.items():
            step += 1
            print(f"  Step {step}: [{node_name}] done")
            final_state = {**final_state, **state_update}
    return final_state


def run_pipeline(settings: Settings, mode: str) -> int:
    """Run the graph for ``run`` or ``regenerate``; return the process exit code."""
    run_id = str(uuid.uuid4())[:8]

    print(f"\n{'='*60}")
    print("Site Replicator")
    print(f"{'='*60}")
    print(f"Mode:   {mode}")
    print(f"Target: {settings.target_url or '(saved crawl output)'}")
    print(f"Run ID: {run_id}\n")

    start_metrics_server(settings.metrics_port)
    init_db(settings.database_url)
    create_run(run_id, mode, settings.target_url)

    client = GenerationClient(settings, run_id=run_id)
    app = build_graph(settings, client)
    initial_state = {"run_id": run_id, "mode": mode, "total_tokens": 0, "cost_usd": 0.0}

    start = time.time()
    try:
        final_state = asyncio.run(_stream(app, initial_state))
    except ReplicatorError as exc:
        update_run(run_id, {}, error=str(exc))
        print(f"\n[error] {exc}", file=sys.stderr)
        return 1
    elapsed = time.time() - start

    COST_PER_RUN.observe(final_state.get("cost_usd", 0.0))
    RUN_DURATION.observe(elapsed)
    update_run(run_id, final_state)

    artifacts = final_state.get("artifacts", [])
    print(f"\n{'='*60}")
    print(f"Completed in {elapsed:.1f}s")
    print(f"Pages:        {len(final_state.get('snapshots', []))}")
    print(f"Components:   {len(final_state.get('components', []))} tagged")
    print(f"Total tokens: {final_state.get('total_tokens', 0):,}")
    print(f"Total cost:   ${final_state.get('cost_usd', 0.0):.6f}")
    _print_artifact_table(final_state.get("report", []))
    print(f"\n  App written to {settings.app_dir.resolve()}")
    print(f"{'='*60}\n")

    defective = [a for a in artifacts if a.defective]
    if defective and settings.fail_on_defects:
        return 2
    return 0


def run_validate(settings: Settings) -> int:
    """Re-run the checklists over an existing generated app without calling the service."""
    if not (settings.app_dir / "src").is_dir():
        print(f"\n[error] No generated app at {settings.app_dir}", file=sys.stderr)
        return 1
    rows = validate_project(settings.app_dir)
    print(f"\nValidating {settings.app_dir}")
    _print_artifact_table(rows)
    if any(not r.ok for r in rows) and settings.fail_on_defects:
        return 2
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Crawl a web app and generate a React + Tailwind clone")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--env-file", default=None, help="Load settings from this .env file")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="Crawl, extract, generate and write the app")
    sub.add_parser("regenerate", help="Regenerate the app from saved crawl output")
    sub.add_parser("validate", help="Check generated files against the checklists")
    history = sub.add_parser("history", help="List recent runs")
    history.add_argument("--limit", type=int, default=20)
    args = parser.parse_args(argv)
    command = args.command or "run"

    if args.env_file:
        load_dotenv(args.env_file, override=True)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
        settings.require_for(command)
    except ConfigError as exc:
        print(f"\n[error] {exc}", file=sys.stderr)
        return 1

    if command == "history":
        init_db(settings.database_url)
        _print_run_history(args.limit)
        return 0
    if command == "validate":
        return run_validate(settings)
    return run_pipeline(settings, command)


if __name__ == "__main__":
    sys.exit(main())
