from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from estimate_rollup.core.errors import EstimateError, EstimateLoadError, ShapeError, error_sort_key
from estimate_rollup.core.io.dump_estimates import dump_estimates, format_estimates
from estimate_rollup.core.io.load_estimates import load_estimates
from estimate_rollup.core.lint.lint_estimates import lint_estimates
from estimate_rollup.core.model import EstimatePlan
from estimate_rollup.core.render.report import render_report
from estimate_rollup.core.render.report_config import ReportConfigError, load_and_merge
from estimate_rollup.core.rollup.rollup_estimates import rollup_plan
from estimate_rollup.core.validate.validate_estimates import summarize_estimates, validate_estimates

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    """Estimate roll-up CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to an estimates file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate the shape of an estimates file."""
    if format not in ("text", "json"):
        err = ShapeError(
            code="E_VALIDATE_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)

    def _emit_json(
        ok: bool,
        *,
        exit_code: int,
        errors: list[EstimateError],
        summary: dict | None,
    ) -> None:
        payload = {
            "tool": "estimates",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        doc = load_estimates(path)
    except EstimateLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    validated, errors = validate_estimates(doc)
    if errors:
        if format == "json":
            _emit_json(False, exit_code=2, errors=list(errors), summary=None)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    assert validated is not None

    if format == "text":
        typer.echo(summarize_estimates(validated))
        return

    plan = rollup_plan(validated)
    summary = {
        "category_count": len(plan.estimates),
        "major_task_count": sum(len(c.tasks) for c in plan.estimates),
        "minor_task_count": sum(len(m.tasks) for c in plan.estimates for m in c.tasks),
        "lowerEstimate": plan.lower_estimate,
        "higherEstimate": plan.higher_estimate,
        "complexity": plan.complexity,
        "confidence": plan.confidence,
    }
    _emit_json(True, exit_code=0, errors=[], summary=summary)


@app.command("lint")
def lint(
    path: str = typer.Argument(..., help="Path to an estimates file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Lint an estimates file (rules beyond shape validation)."""
    if format not in ("text", "json"):
        err = ShapeError(
            code="E_LINT_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)

    def _emit_json(ok: bool, errors: list[EstimateError], exit_code: int) -> None:
        payload = {
            "tool": "estimates",
            "command": "lint",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        doc = load_estimates(path)
    except EstimateLoadError as e:
        if format == "json":
            _emit_json(False, [e], 1)
        _print_errors([e])
        raise typer.Exit(code=1)

    lint_errors = lint_estimates(doc)
    _, validation_errors = validate_estimates(doc)
    errors: list[EstimateError] = [*lint_errors, *validation_errors]

    if format == "text":
        if errors:
            _print_errors(errors)
            raise typer.Exit(code=2)
        typer.echo("OK: lint passed")
        return

    if errors:
        _emit_json(False, errors, 2)
    _emit_json(True, [], 0)


@app.command("rollup")
def rollup(
    path: str = typer.Argument(..., help="Path to an estimates file (.yaml/.yml/.json)"),
    out: str | None = typer.Option(
        None, "--out", help="Write the rolled-up document here (.json/.yaml/.yml)"
    ),
    format: str = typer.Option("json", "--format", help="Stdout format when --out is not given: json|yaml"),
) -> None:
    """Roll totals up the hierarchy and emit the aggregated document."""
    if format not in ("json", "yaml"):
        _print_errors(
            [
                ShapeError(
                    code="E_ROLLUP_UNKNOWN_FORMAT",
                    message=f"unknown format: {format} (choose one of: json, yaml)",
                    file=None,
                    path="format",
                )
            ]
        )
        raise typer.Exit(code=2)

    plan = _load_and_rollup(path)

    if out is None:
        typer.echo(format_estimates(plan, format), nl=False)
        return

    dump_estimates(plan, out)
    typer.echo(f"OK: wrote rolled-up estimates to {out}")


@app.command("report")
def report(
    path: str = typer.Argument(..., help="Path to an estimates file (.yaml/.yml/.json)"),
    out: str | None = typer.Option(None, "--out", help="Write the markdown report to this file"),
    locale: str = typer.Option("en", "--locale", help="Label preset: en|sv"),
    labels_file: str | None = typer.Option(
        None,
        "--labels",
        help="Optional YAML file to override report labels",
    ),
    gantt: bool = typer.Option(True, "--gantt/--no-gantt", help="Append the mermaid gantt chart"),
) -> None:
    """Render a markdown report (tables + gantt chart) from an estimates file."""
    try:
        labels = load_and_merge(locale, labels_file)
    except FileNotFoundError:
        _print_errors(
            [
                EstimateLoadError(
                    code="E_LABEL_FILE_NOT_FOUND",
                    message=f"label file not found: {labels_file}",
                    file=None,
                    path="labels",
                )
            ]
        )
        raise typer.Exit(code=1)
    except ReportConfigError as e:
        _print_errors(
            [
                ShapeError(
                    code="E_LABEL_CONFIG_INVALID",
                    message=str(e),
                    file=labels_file,
                    path="labels",
                )
            ]
        )
        raise typer.Exit(code=2)

    plan = _load_and_rollup(path)
    text = render_report(plan, labels, include_gantt=gantt)

    if out is None:
        typer.echo(text, nl=False)
        return

    p = Path(out)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    typer.echo(f"OK: wrote report to {out}")


def _load_and_rollup(path: str) -> EstimatePlan:
    try:
        doc = load_estimates(path)
    except EstimateLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    validated, errors = validate_estimates(doc)
    if errors or validated is None:
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    return rollup_plan(validated)


def _to_item(e: EstimateError) -> dict:
    code = e.code
    source = (
        "load"
        if isinstance(e, EstimateLoadError)
        else "lint"
        if code.startswith("L_")
        else "validate"
    )
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": "error",
        "source": source,
    }


def _print_errors(errors: list[EstimateError]) -> None:
    errors_sorted = sorted(errors, key=error_sort_key)
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="estimates")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
