# -*- coding: utf-8 -*-
"""
PlanShift CLI
====================

Runs the recommendation engine against a facts document (YAML or JSON)
shaped like what the usage data provider and the legacy plan store return:

    organization_id: org-42
    record:
      created_at: 2026-01-01T00:00:00Z
      custom_plan:
        monthly_price: 150
        features: '{"gantt_charts": true}'
    usage:
      total_users: 8
      active_users: 6

Examples:
    planshift recommend facts.yaml --as-of 2026-03-01T00:00:00Z
    planshift analyze facts.yaml --tier BUSINESS_SMALL --json
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import typer
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from planshift import __version__
from planshift.determinism import as_utc
from planshift.exceptions import InvalidFactsError, PlanShiftException
from planshift.recommendation.models import (
    DetailedMigrationCostBenefit,
    OrganizationRecord,
    PlanRecommendationResponse,
    UsageFacts,
)
from planshift.recommendation.service import get_service

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="planshift",
    help="PlanShift: plan recommendations and migration cost-benefit analysis",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


# ---------------------------------------------------------------------------
# Facts loading
# ---------------------------------------------------------------------------


def _read_document(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise InvalidFactsError(
            f"Facts file not found: {path}", context={"path": str(path)},
        )
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".json":
            document = json.loads(text)
        elif path.suffix in (".yaml", ".yml"):
            document = yaml.safe_load(text)
        else:
            raise InvalidFactsError(
                f"Unsupported facts format: {path.suffix}",
                context={"path": str(path), "supported": [".json", ".yaml", ".yml"]},
            )
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidFactsError(
            f"Could not parse facts file {path}: {exc}", context={"path": str(path)},
        ) from exc

    if not isinstance(document, dict):
        raise InvalidFactsError(
            "Facts document must be a mapping",
            context={"path": str(path), "document_type": type(document).__name__},
        )
    return document


def load_facts(path: Path) -> Tuple[str, Optional[OrganizationRecord], UsageFacts]:
    """Read ``(organization_id, record, usage facts)`` from a facts file.

    Naive timestamps are read as UTC. A missing ``record`` section yields
    ``None``, which the engine reports as an unknown organization.

    Raises:
        InvalidFactsError: If the file is missing, unparsable or invalid.
    """
    document = _read_document(path)
    organization_id = document.get("organization_id")
    if not organization_id:
        raise InvalidFactsError(
            "Facts document has no organization_id", context={"path": str(path)},
        )

    raw_record = document.get("record")
    if raw_record is not None and not isinstance(raw_record, dict):
        raise InvalidFactsError(
            "Facts record section must be a mapping", context={"path": str(path)},
        )

    try:
        record = None
        if raw_record is not None:
            record = OrganizationRecord.model_validate(
                {"organization_id": organization_id, **raw_record}
            )
        facts = UsageFacts.model_validate(document.get("usage") or {})
    except ValidationError as exc:
        raise InvalidFactsError(
            f"Facts document failed validation: {exc.error_count()} error(s)",
            context={
                "path": str(path),
                "errors": [
                    f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()
                ],
            },
        ) from exc

    return str(organization_id), record, facts


def _parse_as_of(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise typer.BadParameter(f"Not an ISO-8601 timestamp: {value}") from None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_recommendations(response: PlanRecommendationResponse) -> None:
    analytics = response.user_analytics
    usage = analytics.usage_metrics
    console.print(Panel(
        f"Organization: [bold]{analytics.organization_id}[/bold]\n"
        f"Category: {analytics.user_category.value}\n"
        f"Users: {usage.active_users}/{usage.total_users} active, "
        f"projects: {usage.total_projects}, storage: {usage.storage_used_gb:.2f} GB",
        title="Usage Profile",
        box=box.ROUNDED,
    ))

    table = Table(title="Recommended Plans", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Plan", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Monthly", justify="right")
    table.add_column("With Discount", justify="right")
    table.add_column("Feature Match", justify="right")
    table.add_column("Complexity")
    for rank, rec in enumerate(response.recommendations, start=1):
        table.add_row(
            str(rank),
            rec.plan_name,
            str(rec.recommendation_score),
            f"{rec.confidence_level}%",
            f"${rec.cost_analysis.new_monthly_cost:,}",
            f"${rec.cost_analysis.with_discount_cost:,}",
            f"{rec.feature_comparison.feature_match_percent}%",
            rec.migration_complexity.value,
        )
    console.print(table)

    for action in response.urgent_actions:
        console.print(
            f"[red]![/red] ({action.severity.value}) {action.message} "
            f"- {action.action_required}"
        )
    for offer in response.special_offers:
        console.print(f"[green]*[/green] {offer.title} (until {offer.valid_until:%Y-%m-%d})")

    summary = response.migration_summary
    console.print(Panel(
        f"Action: [bold]{summary.recommended_action.value}[/bold]\n"
        f"Timeline: {summary.timeline}\n"
        f"Estimated annual savings: ${summary.estimated_savings:,}\n"
        f"Risk factors: {', '.join(summary.risk_factors) or 'none'}",
        title="Migration Summary",
        box=box.ROUNDED,
    ))
    console.print(f"[dim]provenance {response.provenance_hash}[/dim]")


def _render_analysis(result: DetailedMigrationCostBenefit) -> None:
    cost = result.cost_analysis
    table = Table(title=f"Migration to {result.target_tier.value}", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white", justify="right")
    table.add_row("Current monthly", f"${cost.current_monthly_cost:,}")
    table.add_row("New monthly", f"${cost.new_monthly_cost:,}")
    table.add_row("Applied discount", cost.applied_discount_code or "-")
    table.add_row("First-year cost", f"${cost.first_year_cost:,}")
    table.add_row("Migration cost", f"${cost.migration_cost:,}")
    table.add_row("Annual benefit", f"${result.benefit_analysis.quantified_annual_value:,}")
    table.add_row("Net benefit", f"${result.net_benefit:,}")
    table.add_row(
        "Payback",
        "-" if cost.payback_period_months is None else f"{cost.payback_period_months} months",
    )
    table.add_row("Risk score", str(result.risk_assessment.overall_risk_score))
    table.add_row("Timeline", f"{result.timeline.total_duration_days} days")
    console.print(table)

    console.print(f"Decision: [bold]{result.decision.value}[/bold]")
    for rec in result.recommendations:
        console.print(f"  - ({rec.priority.value}) {rec.reasoning}: {rec.action}")

    scenarios = Table(title="Scenarios", box=box.ROUNDED)
    scenarios.add_column("Scenario", style="cyan")
    scenarios.add_column("First-year cost", justify="right")
    scenarios.add_column("Annual benefit", justify="right")
    scenarios.add_column("Risk", justify="right")
    scenarios.add_column("Score", justify="right")
    for scenario in result.scenarios:
        scenarios.add_row(
            scenario.name,
            f"${scenario.cost_analysis.first_year_cost:,}",
            f"${scenario.annual_benefit:,}",
            str(scenario.risk_score),
            str(scenario.recommendation_score),
        )
    console.print(scenarios)
    console.print(f"[dim]provenance {result.provenance_hash}[/dim]")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def recommend(
    facts_file: Path = typer.Argument(..., help="Facts document (.yaml, .yml or .json)"),
    as_of: Optional[str] = typer.Option(
        None, "--as-of", help="Reference time (ISO-8601, default: now)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Rank the eligible plans for one organization"""
    _configure_logging(verbose)
    now = _parse_as_of(as_of)
    try:
        organization_id, record, facts = load_facts(facts_file)
        response = get_service().generate_recommendations(organization_id, record, facts, now)
    except PlanShiftException as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(response.model_dump_json(indent=2))
    else:
        _render_recommendations(response)


@app.command()
def analyze(
    facts_file: Path = typer.Argument(..., help="Facts document (.yaml, .yml or .json)"),
    tier: str = typer.Option(..., "--tier", "-t", help="Target plan tier, e.g. BUSINESS_SMALL"),
    as_of: Optional[str] = typer.Option(
        None, "--as-of", help="Reference time (ISO-8601, default: now)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Cost-benefit analysis of migrating one organization to TIER"""
    _configure_logging(verbose)
    when = _parse_as_of(as_of)
    try:
        organization_id, record, facts = load_facts(facts_file)
        result = get_service().analyze_migration(organization_id, record, facts, tier, when)
    except PlanShiftException as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _render_analysis(result)


@app.command()
def version():
    """Show PlanShift version"""
    console.print(f"[bold green]PlanShift v{__version__}[/bold green]")


def main() -> None:
    app()


__all__ = [
    "app",
    "load_facts",
    "main",
]
