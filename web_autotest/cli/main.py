"""
CLI entrypoint.

doctor / actions: environment and registry inspection.
validate: offline check of a plan/suite file against the action registry.
run: execute a plan or suite in a real browser and print the results.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterator, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..core.action import Plan, Step, Suite
from ..core.controller.plan import PlanExecutor
from ..core.controller.runner import StepRunner
from ..core.controller.suite import SuiteExecutor, cleanup
from ..core.errors import DescriptionError, UnknownActionError
from ..core.loader import Description, load_description
from ..core.logs import setup_logging
from ..core.registry import default_registry
from ..core.session import BrowserSession
from ..core.settings import settings
from ..reporting.schemas import PlanStepResult, StepResult, SuiteResult
from ..reporting.writer import write_summary

app = typer.Typer(help="web-autotest CLI")
console = Console()


def _load_actions(cmd: str) -> None:
    try:
        import web_autotest.actions.impl  # noqa: F401
    except Exception as e:  # noqa: BLE001
        typer.secho(f"[{cmd}] failed to import actions: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)


def _load(cmd: str, path: Path) -> Description:
    if not path.exists():
        typer.secho(f"[{cmd}] file not found: {path}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    try:
        return load_description(path)
    except DescriptionError as e:
        typer.secho(f"[{cmd}] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)


def _all_steps(desc: Description) -> Iterator[tuple[str, Step]]:
    if isinstance(desc, Plan):
        for step in desc.steps:
            yield "plan", step
        return
    for step in desc.setup:
        yield "setup", step
    for test in desc.tests:
        for step in test.steps:
            yield test.name, step
    for step in desc.teardown:
        yield "teardown", step


def _result_table(title: str, rows: list[StepResult] | list[PlanStepResult]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")
    for i, r in enumerate(rows, start=1):
        result = "[green]OK[/]" if r.ok else "[red]FAIL[/]"
        detail = r.message if not r.ok or not r.output else r.output
        if detail and len(detail) > 120:
            detail = detail[:120] + "…"
        table.add_row(str(i), r.name, result, detail or "-")
    return table


def _suite_table(result: SuiteResult) -> Table:
    table = Table(title="Tests", show_header=True, header_style="bold")
    table.add_column("test")
    table.add_column("result")
    table.add_column("attempts", justify="right")
    table.add_column("detail")
    for t in result.tests:
        detail = t.error or "-"
        if t.artifacts:
            detail = f"{detail} (artifacts: {', '.join(t.artifacts)})"
        table.add_row(
            t.name, "[green]PASS[/]" if t.ok else "[red]FAIL[/]", str(t.attempts), detail
        )
    return table


@app.callback()
def main_options(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
) -> None:
    setup_logging(log_level)


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm CLI is usable."""
    console.print("[bold green]web-autotest[/] environment")
    console.print(f"- headless:       {settings.headless}")
    console.print(f"- slow motion:    {settings.slow_mo_ms}ms")
    console.print(f"- timeout:        {settings.default_timeout_ms}ms")
    console.print(f"- artifacts root: {settings.artifacts_root or Path.cwd()}")
    console.print(f"- suite name:     {settings.suite_name}")


@app.command("actions")
def actions() -> None:
    """List registered actions and their argument models."""
    _load_actions("actions")
    table = Table(title="Actions", show_header=True, header_style="bold")
    table.add_column("name")
    table.add_column("arguments")
    table.add_column("description")
    for name, meta in sorted(default_registry.list_actions().items()):
        fields = ", ".join(meta.params_model.model_fields) if meta.params_model else "-"
        table.add_row(name, fields or "-", meta.description)
    console.print(table)


@app.command("validate")
def validate(file: Path = typer.Argument(..., help="Plan or suite JSON file")) -> None:
    """
    Offline validation: load the plan/suite and check every step against the
    params model bound in the registry. Exit non-zero on any failure.
    """
    desc = _load("validate", file)
    _load_actions("validate")

    table = Table(title="Validation Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("where")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")

    failures = 0
    for i, (where, step) in enumerate(_all_steps(desc), start=1):
        try:
            default_registry.validate_step(step)
            table.add_row(str(i), where, step.name, "[green]OK[/]", "-")
        except UnknownActionError as ke:
            failures += 1
            table.add_row(str(i), where, step.name, "[red]Not Registered[/]", str(ke))
        except ValidationError as ve:
            failures += 1
            msg = ve.errors()[0].get("msg", "invalid args")
            table.add_row(str(i), where, step.name, "[red]Invalid Args[/]", msg)

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[validate] all steps passed", fg=typer.colors.GREEN)


@app.command("run")
def run(
    file: Path = typer.Argument(..., help="Plan or suite JSON file"),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Override headless for auto-opened browsers"
    ),
    junit_path: Optional[Path] = typer.Option(None, "--junit-path", help="Write JUnit XML here"),
    artifacts_dir: Optional[Path] = typer.Option(
        None, "--artifacts-dir", help="Where to save failure screenshots/traces"
    ),
    summary_dir: Optional[Path] = typer.Option(
        None, "--summary-dir", help="Write report.json for suites here"
    ),
) -> None:
    """
    Execute a plan or suite: read JSON -> structure check -> run in browser.
    Prints result tables; returns non-zero on any failure.
    """
    desc = _load("run", file)
    _load_actions("run")

    if isinstance(desc, Suite):
        overrides = {
            k: v
            for k, v in {
                "headless": headless,
                "junit_path": str(junit_path) if junit_path else None,
                "artifacts_dir": str(artifacts_dir) if artifacts_dir else None,
            }.items()
            if v is not None
        }
        desc = desc.model_copy(update=overrides)

    async def _run() -> int:
        session = BrowserSession()
        runner = StepRunner(default_registry, session)
        try:
            if isinstance(desc, Plan):
                rows = await PlanExecutor(runner).run_plan(desc)
                console.print(_result_table("Plan Results", rows))
                ok = len(rows) == len(desc.steps) and all(r.ok for r in rows)
                return 0 if ok else 1

            result = await SuiteExecutor(runner).run_suite(desc)
            for title, rows in (("Setup", result.setup), ("Teardown", result.teardown)):
                if rows:
                    console.print(_result_table(title, rows))
            console.print(_suite_table(result))
            if result.error:
                typer.secho(f"[run] {result.error}", fg=typer.colors.RED)
            if desc.junit_path and Path(desc.junit_path).is_file():
                console.print(f"[bold]JUnit report[/]: {desc.junit_path}")
            if summary_dir:
                console.print(f"[bold]Summary[/]: {write_summary(result, summary_dir)}")
            return 0 if result.ok else 1
        finally:
            # plans open the browser through steps; don't leave it running
            await cleanup("closing browser", session.close())

    code = asyncio.run(_run())
    if code != 0:
        raise typer.Exit(code=code)
    typer.secho("[run] completed successfully", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
