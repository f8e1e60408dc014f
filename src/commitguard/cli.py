"""
commitguard CLI - inspect policy and check outputs by hand.

Commands:
    commitguard profiles                 Show the loaded rule table
    commitguard check PROFILE OUTPUT     Evaluate one output and print the report
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .enforcement import CommitmentEnforcer, EnforcerConfig, RuntimeMetadata

app = typer.Typer(help="Response-policy enforcement for generated text")
console = Console()


def _build_enforcer(policy: Path | None) -> CommitmentEnforcer:
    config = EnforcerConfig.from_env()
    if policy is not None:
        config.policy_path = policy
    return CommitmentEnforcer.from_config(config)


# =============================================================================
# PROFILES
# =============================================================================


@app.command()
def profiles(
    policy: Path = typer.Option(None, help="JSON policy file (default: built-in table)"),
):
    """Show every profile and its ordered commitments."""
    enforcer = _build_enforcer(policy)

    table = Table(title="Commitments")
    table.add_column("Profile", style="bold")
    table.add_column("#")
    table.add_column("Type")
    table.add_column("Target")
    table.add_column("Level")
    table.add_column("Fallback")

    for name in enforcer.registry.profiles:
        for index, rule in enumerate(enforcer.registry.rules_for(name), start=1):
            level_style = "red" if rule.enforcement_level.value == "MANDATORY" else "yellow"
            table.add_row(
                name if index == 1 else "",
                str(index),
                rule.type.value,
                f"{rule.target:g}",
                f"[{level_style}]{rule.enforcement_level.value}[/{level_style}]",
                rule.fallback_action,
            )

    console.print(table)


# =============================================================================
# CHECK
# =============================================================================


@app.command()
def check(
    profile: str = typer.Argument(..., help="Profile name"),
    output: str = typer.Argument(..., help="Candidate output text"),
    input_text: str = typer.Option("", "--input", help="Original user message"),
    latency_ms: float = typer.Option(0.0, help="Measured generation latency"),
    policy: Path = typer.Option(None, help="JSON policy file (default: built-in table)"),
    as_json: bool = typer.Option(False, "--json", help="Print the flat report as JSON"),
):
    """Evaluate one candidate output against a profile."""
    enforcer = _build_enforcer(policy)
    metadata = RuntimeMetadata(latency_ms=latency_ms, profile=profile)
    report = enforcer.evaluate_sync(profile, input_text, output, metadata)

    if as_json:
        console.print_json(json.dumps(report.to_flat_dict(), ensure_ascii=False))
    else:
        if profile not in enforcer.registry:
            console.print(f"[yellow]Unknown profile '{profile}', passed through unchanged[/yellow]")

        table = Table(title=f"Enforcement: {profile}")
        table.add_column("Type", style="bold")
        table.add_column("Score")
        table.add_column("Target")
        table.add_column("Status")
        table.add_column("Diagnostic")
        for outcome in list(report.violations) + list(report.skipped):
            color = "yellow" if outcome.status == "skipped" else "red"
            table.add_row(
                outcome.type.value,
                f"{outcome.score:.1f}",
                f"{outcome.target:g}",
                f"[{color}]{outcome.status.upper()}[/{color}]",
                outcome.diagnostic,
            )
        if report.violations or report.skipped:
            console.print(table)

        for adjustment in report.adjustments:
            mark = "[green]ok[/green]" if adjustment.success else "[red]failed[/red]"
            console.print(f"  {adjustment.fallback_action}: {mark}")

        console.print("\n[bold]Final output:[/bold]")
        console.print(report.final_output)

    if not report.overall_passed:
        raise typer.Exit(1)
    if not as_json:
        console.print("\n[bold green]All commitments satisfied[/bold green]")


if __name__ == "__main__":
    app()
