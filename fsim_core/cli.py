from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fsim_core.domain.models import AppData, Scenario
from fsim_core.domain.months import format_month_long, is_month
from fsim_core.io import state as state_io
from fsim_core.services import breakdown as breakdown_service
from fsim_core.services import gesture as gesture_service
from fsim_core.services import painting
from fsim_core.services import samples
from fsim_core.services import simulator
from fsim_core.services import summary as summary_service

app = typer.Typer(help="Scenario cash-flow simulator CLI.")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _load_data(path: Path) -> AppData:
    try:
        return state_io.load_state(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"State file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _get_scenario(data: AppData, scenario_id: str) -> Scenario:
    scenario = data.scenario(scenario_id)
    if scenario is None:
        known = ", ".join(s.id for s in data.scenarios) or "none"
        raise typer.BadParameter(f"Unknown scenario '{scenario_id}' (known: {known})")
    return scenario


def _check_month(value: str, name: str) -> str:
    if not is_month(value):
        raise typer.BadParameter(f"{name} must look like YYYY-MM, got '{value}'")
    return value


def _money(value: float) -> str:
    return f"{value:,.2f}"


@app.command()
def init(
    out: Path = typer.Option(..., help="Where to write the sample state JSON"),
    start: Optional[str] = typer.Option(None, help="First month of the sample scenarios (YYYY-MM)"),
):
    """Write a sample data set to start from."""
    if start is not None:
        _check_month(start, "--start")
    data = samples.build_sample_data(start)
    state_io.save_state(out, data)
    typer.echo(f"Sample state written to {out}")


@app.command()
def validate(data: Path = typer.Option(..., help="State JSON with situations and scenarios")):
    """Check a state file before using it."""
    state = _load_data(data)
    typer.echo(f"OK: {len(state.situations)} situation(s), {len(state.scenarios)} scenario(s)")


@app.command()
def simulate(
    data: Path = typer.Option(..., help="State JSON with situations and scenarios"),
    scenario: str = typer.Option(..., help="Scenario id"),
    format: str = typer.Option("table", help="Output format: table|json|csv"),
    out: Optional[Path] = typer.Option(None, help="Output path for json/csv"),
):
    """Monthly balance ledger of one scenario."""
    state = _load_data(data)
    sc = _get_scenario(state, scenario)
    rows = simulator.simulate_scenario(sc, state.situations)

    if format == "json":
        payload = summary_service.ledger_frame(rows).to_dict(orient="records")
        if out:
            _save_json(out, payload)
            typer.echo(f"Ledger written to {out}")
        else:
            typer.echo(json.dumps(payload, indent=2))
        return
    if format == "csv":
        frame = summary_service.ledger_frame(rows)
        if out:
            out.parent.mkdir(parents=True, exist_ok=True)
            frame.to_csv(out, index=False)
            typer.echo(f"Ledger written to {out}")
        else:
            typer.echo(frame.to_csv(index=False))
        return
    if format != "table":
        raise typer.BadParameter("--format must be one of table|json|csv")

    table = Table(title=f"{sc.name} ({sc.start_month} to {sc.end_month})")
    for column in ("Month", "Income", "Expenses", "Net", "Balance", "Range"):
        table.add_column(column, justify="left" if column == "Month" else "right")
    for row in rows:
        style = "red" if row.balance < 0 else None
        band = "" if row.balance_min == row.balance_max else f"{_money(row.balance_min)} .. {_money(row.balance_max)}"
        table.add_row(
            row.month,
            _money(row.income),
            _money(row.expenses),
            _money(row.net),
            _money(row.balance),
            band,
            style=style,
        )
    console.print(table)


@app.command()
def compare(
    data: Path = typer.Option(..., help="State JSON with situations and scenarios"),
    out: Optional[Path] = typer.Option(None, help="Output path for the comparison JSON"),
):
    """Summaries of every scenario side by side."""
    state = _load_data(data)
    results = simulator.simulate_all(state.scenarios, state.situations)
    summaries = [summary_service.summarize_scenario(sc, results[sc.id]) for sc in state.scenarios]

    if out:
        _save_json(out, [vars(s) for s in summaries])
        typer.echo(f"Comparison written to {out}")
        return

    table = Table(title="Scenario comparison")
    for column in ("Scenario", "Start", "Months", "Final", "Lowest", "Goal reached", "Negative months"):
        table.add_column(column)
    for sc, s in zip(state.scenarios, summaries):
        goal = "-" if s.goal_balance is None else (s.goal_reached_month or "never")
        table.add_row(
            s.name,
            s.start_month,
            str(sc.duration_months),
            _money(s.final_balance),
            _money(s.min_balance),
            goal,
            str(s.negative_months),
        )
    console.print(table)


@app.command()
def breakdown(
    data: Path = typer.Option(..., help="State JSON with situations and scenarios"),
    scenario: str = typer.Option(..., help="Scenario id"),
    month: str = typer.Option(..., help="Month to inspect (YYYY-MM)"),
):
    """Income and expenses of one month, per situation."""
    _check_month(month, "--month")
    state = _load_data(data)
    sc = _get_scenario(state, scenario)
    result = breakdown_service.get_month_breakdown(sc, state.situations, month)

    console.print(f"[bold cyan]{format_month_long(month)}[/bold cyan]")
    if not result.situations:
        console.print("[yellow]No active situations in this month.[/yellow]")
        return
    for title, lines, side, color in (
        ("Income", result.income_lines(), "income", "green"),
        ("Expenses", result.expense_lines(), "expense", "red"),
    ):
        console.print(f"[bold {color}]{title}[/bold {color}]")
        for line in lines:
            console.print(f"  {line.name}")
            for effect in line.effects:
                if effect.category != side:
                    continue
                tag = " (one-time)" if effect.is_one_time else ""
                console.print(f"    {effect.label}{tag}: {_money(effect.amount)}")
    console.print(f"Net: [bold]{_money(result.net)}[/bold]")


@app.command()
def paint(
    data: Path = typer.Option(..., help="State JSON with situations and scenarios"),
    scenario: str = typer.Option(..., help="Scenario id"),
    situation: str = typer.Option(..., help="Situation id"),
    effect: Optional[str] = typer.Option(None, help="Effect id; paints the effect row instead of the situation"),
    anchor: str = typer.Option(..., help="Month where the gesture starts (YYYY-MM)"),
    current: Optional[str] = typer.Option(None, help="Month where the gesture is released (defaults to anchor)"),
    mode: str = typer.Option("auto", help="auto|add|remove; auto toggles based on the anchor month"),
    out: Optional[Path] = typer.Option(None, help="Write the result here instead of updating --data"),
):
    """Paint a month range onto the timeline and save the result."""
    _check_month(anchor, "--anchor")
    current = _check_month(current, "--current") if current else anchor
    state = _load_data(data)
    sc = _get_scenario(state, scenario)
    sit = state.situation(situation)
    if sit is None:
        raise typer.BadParameter(f"Unknown situation '{situation}'")
    if effect is not None and sit.effect(effect) is None:
        raise typer.BadParameter(f"Situation '{situation}' has no effect '{effect}'")

    target = gesture_service.PaintTarget(situation_id=situation, effect_id=effect)
    if mode == "auto":
        gesture = gesture_service.PaintGesture()
        if gesture.press(sc, target, anchor) is None:
            raise typer.BadParameter(f"'{sit.name}' is not active in {anchor}; effect rows follow their situation")
        gesture.hover(target, current)
        applied_mode = gesture.state.mode
        updated = gesture.release(sc)
    elif mode in painting.PAINT_MODES:
        applied_mode = mode
        span = gesture_service.Painting(target=target, anchor=anchor, current=current, mode=mode).span()
        if effect is None:
            updated = painting.paint_situation(sc, situation, span, mode)
        else:
            updated = painting.paint_effect(sc, situation, effect, span, mode)
    else:
        raise typer.BadParameter("--mode must be one of auto|add|remove")

    destination = out or data
    state_io.save_state(destination, state.replace_scenario(updated))
    active = sorted(gesture_service.committed_months(updated, target))
    typer.echo(f"{applied_mode}: {len(active)} active month(s) for {target.effect_id or target.situation_id}")
    typer.echo(f"State written to {destination}")


if __name__ == "__main__":
    app()
