"""CLI for the Decision Scoring Engine.

Provides command-line interface for ranking decision options, testing
weight changes and checking robustness.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import find_config_file, load_config, save_default_config
from .engine import (
    DecisionEngine,
    load_decision,
    load_score_ranges,
    validate_decision_file,
)
from .monte_carlo import run_simulation
from .schema import (
    DecisionReport,
    MonteCarloResult,
    RankingResult,
    SensitivityResult,
    TippingDirection,
)
from .sensitivity import compare_scenario, find_tipping_point, what_if_analysis
from .templates import (
    apply_template,
    get_all_templates,
    get_categories,
    get_templates_by_category,
)

console = Console()


def _setup(verbose: bool, config: Optional[str]) -> None:
    """Configure logging and load configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    path = Path(config) if config else find_config_file()
    if path:
        load_config(path)


def output_json(model, out: Optional[str]) -> None:
    """Write a result model as JSON to a file or stdout."""
    data = model.model_dump_json(indent=2)
    if out:
        Path(out).write_text(data, encoding="utf-8")
    else:
        click.echo(data)


decision_option = click.option(
    "--decision", "-d",
    required=True,
    type=click.Path(exists=True),
    help="Path to decision JSON file"
)
config_option = click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to decision-config.yaml"
)
verbose_option = click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show detailed output"
)
json_option = click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)


@click.group()
@click.version_option(version="1.0.0", prog_name="decision-scorer")
def main():
    """Decision Scoring and Recommendation Engine.

    Ranks options against weighted criteria and explains the result
    with confidence, rationale, tipping points and simulations.
    """
    pass


@main.command("rank")
@decision_option
@click.option(
    "--ranges", "-r",
    type=click.Path(exists=True),
    help="Score ranges JSON for Monte Carlo simulation"
)
@click.option(
    "--simulations", "-n",
    type=int,
    help="Number of Monte Carlo trials (default from config)"
)
@click.option("--seed", type=int, help="Seed for reproducible simulation")
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results (default: stdout)"
)
@config_option
@verbose_option
@json_option
def rank_cmd(
    decision: str,
    ranges: Optional[str],
    simulations: Optional[int],
    seed: Optional[int],
    out: Optional[str],
    config: Optional[str],
    verbose: bool,
    json_output: bool,
):
    """Rank the options of a decision.

    Examples:
        decision-scorer rank -d decision.json
        decision-scorer rank -d decision.json -r ranges.json -n 5000 --seed 7
        decision-scorer rank -d decision.json -j -o report.json
    """
    try:
        _setup(verbose, config)
        engine = DecisionEngine()
        report = engine.evaluate_file(
            decision,
            ranges_path=ranges,
            simulations=simulations,
            seed=seed,
        )

        if json_output:
            output_json(report, out)
        else:
            display_report(report, verbose)
            if out:
                output_json(report, out)
                console.print(f"\n[green]Results saved to {out}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("sensitivity")
@decision_option
@click.option(
    "--apply-constraints/--ignore-constraints",
    default=None,
    help="Apply constraint penalties while re-ranking (default from config)"
)
@config_option
@verbose_option
@json_option
def sensitivity_cmd(
    decision: str,
    apply_constraints: Optional[bool],
    config: Optional[str],
    verbose: bool,
    json_output: bool,
):
    """Show tipping points and robustness of the current winner."""
    try:
        _setup(verbose, config)
        dec = load_decision(decision)
        result = DecisionEngine().evaluate(dec, apply_constraints=apply_constraints).sensitivity

        if result is None:
            console.print("[yellow]Sensitivity analysis needs at least 2 options.[/yellow]")
            return

        if json_output:
            output_json(result, None)
        else:
            display_sensitivity(result)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("simulate")
@decision_option
@click.option(
    "--ranges", "-r",
    required=True,
    type=click.Path(exists=True),
    help="Score ranges JSON (option id -> criterion id -> {min, max})"
)
@click.option("--simulations", "-n", type=int, help="Number of trials (default from config)")
@click.option("--seed", type=int, help="Seed for reproducible simulation")
@config_option
@verbose_option
@json_option
def simulate_cmd(
    decision: str,
    ranges: str,
    simulations: Optional[int],
    seed: Optional[int],
    config: Optional[str],
    verbose: bool,
    json_output: bool,
):
    """Estimate win probabilities when scores are uncertain."""
    try:
        _setup(verbose, config)
        dec = load_decision(decision)
        result = run_simulation(
            dec.options,
            dec.criteria,
            load_score_ranges(ranges),
            simulations=simulations,
            seed=seed,
        )

        if json_output:
            output_json(result, None)
        else:
            display_simulation(result)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("what-if")
@decision_option
@click.option("--criterion", "-c", "criterion_id", required=True, help="Criterion ID to change")
@click.option(
    "--weight", "-w",
    type=click.IntRange(1, 10),
    help="New weight to try; omit to search for the tipping point"
)
@click.option(
    "--apply-constraints/--ignore-constraints",
    default=None,
    help="Apply constraint penalties while re-ranking (default from config)"
)
@config_option
@verbose_option
def what_if_cmd(
    decision: str,
    criterion_id: str,
    weight: Optional[int],
    apply_constraints: Optional[bool],
    config: Optional[str],
    verbose: bool,
):
    """Test how a criterion weight change affects the winner.

    Examples:
        decision-scorer what-if -d decision.json -c price -w 3
        decision-scorer what-if -d decision.json -c price
    """
    try:
        _setup(verbose, config)
        dec = load_decision(decision)

        if not any(c.id == criterion_id for c in dec.criteria):
            console.print(f"[red]Criterion not found: {criterion_id}[/red]")
            sys.exit(1)

        if weight is None:
            tipping = find_tipping_point(
                dec.options, dec.criteria, criterion_id,
                constraints=dec.constraints,
                apply_constraints=apply_constraints,
            )
            if tipping is None:
                console.print("[green]No weight of this criterion changes the winner.[/green]")
            else:
                console.print(
                    f"At weight [bold]{tipping.tipping_weight}[/bold], "
                    f"[bold cyan]{tipping.criterion_name}[/bold cyan] makes "
                    f"[bold]{tipping.new_winner}[/bold] the winner."
                )
            return

        result = what_if_analysis(
            dec.options, dec.criteria, criterion_id, weight,
            constraints=dec.constraints,
            apply_constraints=apply_constraints,
        )
        if result.changed:
            console.print(
                f"[yellow]Winner changed![/yellow] {result.original_winner} → "
                f"[bold cyan]{result.new_winner}[/bold cyan]"
            )
        else:
            console.print(f"[green]{result.new_winner} still leads.[/green]")
        display_rankings(RankingResult(rankings=result.new_rankings))

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _parse_weights(values: tuple) -> dict[str, int]:
    weights = {}
    for value in values:
        criterion_id, sep, weight = value.partition("=")
        if not sep or not criterion_id.strip():
            raise click.BadParameter(f"expected CRITERION=WEIGHT, got {value!r}")
        try:
            weights[criterion_id.strip()] = int(weight)
        except ValueError:
            raise click.BadParameter(f"weight must be an integer, got {weight!r}")
        if not 1 <= weights[criterion_id.strip()] <= 10:
            raise click.BadParameter(f"weight must be between 1 and 10, got {weight}")
    return weights


@main.command("scenario")
@decision_option
@click.option(
    "--set", "-s", "settings",
    multiple=True,
    required=True,
    help="New weight as CRITERION=WEIGHT (repeatable)"
)
@click.option(
    "--apply-constraints/--ignore-constraints",
    default=None,
    help="Apply constraint penalties while re-ranking (default from config)"
)
@config_option
@verbose_option
def scenario_cmd(
    decision: str,
    settings: tuple,
    apply_constraints: Optional[bool],
    config: Optional[str],
    verbose: bool,
):
    """Compare the winner after changing several weights at once.

    Examples:
        decision-scorer scenario -d decision.json -s price=3 -s quality=9
    """
    weights = _parse_weights(settings)
    try:
        _setup(verbose, config)
        dec = load_decision(decision)

        unknown = sorted(set(weights) - {c.id for c in dec.criteria})
        if unknown:
            console.print(f"[red]Criterion not found: {', '.join(unknown)}[/red]")
            sys.exit(1)

        result = compare_scenario(
            dec.options, dec.criteria, weights,
            constraints=dec.constraints,
            apply_constraints=apply_constraints,
        )
        if result.changed:
            console.print(
                f"[yellow]Winner changed![/yellow] {result.original_winner} → "
                f"[bold cyan]{result.new_winner}[/bold cyan]"
            )
        else:
            console.print(f"[green]{result.new_winner} still leads.[/green]")
        display_rankings(RankingResult(rankings=result.new_rankings))

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("validate")
@click.argument("paths", nargs=-1, type=click.Path())
def validate_cmd(paths: tuple):
    """Validate decision files.

    Examples:
        decision-scorer validate decision.json
        decision-scorer validate a.json b.json
    """
    if not paths:
        console.print("[yellow]Please specify decision files to validate[/yellow]")
        return

    all_valid = True
    for path in paths:
        is_valid, issues = validate_decision_file(path)
        if is_valid:
            console.print(f"[green]✓ Decision valid: {path}[/green]")
        else:
            console.print(f"[red]✗ Decision invalid: {path}[/red]")
            for issue in issues:
                console.print(f"  - {issue}")
            all_valid = False

    sys.exit(0 if all_valid else 1)


@main.command("templates")
@click.option("--category", help="Only show templates in this category")
@click.option("--use", "template_id", help="Write a new decision from this template")
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for the new decision (default: stdout)"
)
def templates_cmd(category: Optional[str], template_id: Optional[str], out: Optional[str]):
    """List decision templates or start a decision from one."""
    if template_id:
        dec = apply_template(template_id)
        if dec is None:
            console.print(f"[red]Template not found: {template_id}[/red]")
            sys.exit(1)
        output_json(dec, out)
        if out:
            console.print(f"[green]Decision written to {out}[/green]")
        return

    templates = get_templates_by_category(category) if category else get_all_templates()

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Criteria")

    for t in templates:
        table.add_row(t.id, t.name, t.category, ", ".join(c.name for c in t.criteria))

    console.print(table)
    console.print(f"\n[dim]Categories: {', '.join(get_categories())}[/dim]")


@main.command("init-config")
@click.option(
    "--out", "-o",
    default="decision-config.yaml",
    type=click.Path(),
    help="Where to write the default configuration"
)
def init_config_cmd(out: str):
    """Write the default configuration to a YAML file."""
    save_default_config(Path(out))
    console.print(f"[green]Default configuration written to {out}[/green]")


def display_report(report: DecisionReport, verbose: bool) -> None:
    """Display a complete decision report."""
    ranking = report.ranking
    if not ranking.rankings:
        console.print("[yellow]Nothing to rank: add options and criteria.[/yellow]")
        return

    confidence = ranking.confidence
    confidence_color = {
        "high": "green",
        "medium": "yellow",
        "low": "red",
    }.get(confidence.level.value, "white")

    deadline = ""
    if report.days_until_deadline is not None:
        deadline = f"\nDeadline: {report.days_until_deadline} day(s) away"

    console.print(Panel(
        f"[bold]{report.decision_title or 'Decision'}[/bold]\n\n"
        f"Recommendation: [bold cyan]{ranking.winner.name}[/bold cyan]\n"
        f"Confidence: [{confidence_color}]{confidence.label}[/{confidence_color}]"
        f"{' - ' + confidence.message if confidence.message else ''}"
        f"{deadline}",
        title="Decision Summary",
    ))

    display_rankings(ranking)

    analysis = ranking.analysis
    if analysis:
        console.print(f"\n[bold]Why:[/bold] {analysis.rationale}")
        for warning in analysis.constraint_warnings:
            console.print(f"  [yellow]⚠ {warning}[/yellow]")

        if verbose:
            console.print("\n[bold]Trade-offs:[/bold]")
            for t in analysis.tradeoffs:
                pros = ", ".join(t.pros) or "-"
                cons = ", ".join(t.cons) or "-"
                console.print(f"  • {t.option_name}: [green]+ {pros}[/green]  [red]- {cons}[/red]")

    if report.sensitivity:
        console.print()
        display_sensitivity(report.sensitivity)

    if report.simulation:
        console.print()
        display_simulation(report.simulation)

    for warning in report.processing_warnings:
        console.print(f"[dim]Warning: {warning}[/dim]")


def display_rankings(ranking: RankingResult) -> None:
    """Display ranked options as a table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Option")
    table.add_column("Score", justify="right")
    table.add_column("Penalty", justify="right")

    for r in ranking.rankings:
        penalty = f"-{(1 - r.constraint_penalty) * 100:.0f}%" if r.constraint_penalty < 1 else ""
        table.add_row(str(r.rank), r.name, f"{r.normalized_score:.1f}/10", penalty)

    console.print(table)


def display_sensitivity(result: SensitivityResult) -> None:
    """Display tipping points and robustness."""
    color = "green" if result.is_robust else "red"
    console.print(
        f"[bold]Robustness:[/bold] [{color}]{result.robustness:.0f}%[/{color}] - "
        f"{result.winner.name} leads {result.runner_up.name} by "
        f"{result.gap_to_runner_up:.2f} points"
    )

    tipping = [tp for tp in result.tipping_points if tp.tipping_weight is not None]
    if not tipping:
        console.print("[green]No single weight change would change the winner.[/green]")
        return

    table = Table(show_header=True, header_style="bold", title="Tipping Points")
    table.add_column("Criterion")
    table.add_column("Weight change")
    table.add_column("Sensitive")
    for tp in tipping:
        arrow = "↓" if tp.direction == TippingDirection.DECREASE else "↑"
        table.add_row(
            tp.criterion_name,
            f"{arrow} {tp.current_weight} → {tp.tipping_weight}",
            "[red]yes[/red]" if tp.is_sensitive else "no",
        )
    console.print(table)


def display_simulation(result: MonteCarloResult) -> None:
    """Display Monte Carlo win percentages."""
    if result.most_likely:
        console.print(
            f"[bold]Simulation ({result.simulations:,} runs):[/bold] "
            f"{result.most_likely.name} wins {result.most_likely.percentage}% of scenarios"
        )
    for r in result.results:
        console.print(f"  {r.name:<30} {r.percentage:>6}%  ({r.wins} wins)")


if __name__ == "__main__":
    main()
