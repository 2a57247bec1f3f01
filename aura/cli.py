"""CLI entry-point: run audits and render the catalog feed from the terminal."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from aura.audit import AuditClient, AuditOrchestrator
from aura.catalog import build_catalog, render_catalog
from aura.catalog.projector import platforms_for, sort_versions
from aura.config import get_settings
from aura.schemas.audit import AuditStatus
from aura.schemas.models import Platform, SafetyState
from aura.store import get_store

app = typer.Typer(help="Aura Store security audit and catalog tools")

_BADGE_STYLE = {
    "safe": "green",
    "caution": "yellow",
    "warning": "red",
    "pending": "dim",
}


@app.command()
def audit(
    app_id: str = typer.Argument(..., help="App to audit (its latest version receives the verdict)"),
    provider: str = typer.Option(None, help="LLM provider: openai | anthropic (default from env)"),
):
    """Run the security audit for one app and persist the verdict."""
    console = Console()
    settings = get_settings()
    client = AuditClient.from_settings(settings, provider)
    orchestrator = AuditOrchestrator(get_store(), client, max_flags=settings.aura_audit_max_flags)

    console.print(f"Auditing {app_id} with {client.provider_name} {client.model}...")
    outcome = orchestrator.run(app_id)
    if outcome.status is AuditStatus.SUCCESS:
        badge = SafetyState.scored(outcome.verdict).badge.value
        console.print(f"[{_BADGE_STYLE[badge]}]Score {outcome.verdict.score}/100 ({badge})[/{_BADGE_STYLE[badge]}]")
        console.print(outcome.verdict.summary)
        for flag in outcome.verdict.flags:
            console.print(f"  - {flag}")
        return
    reason = outcome.reason.value if outcome.reason else outcome.status.value
    console.print(f"[red]Audit {outcome.status.value}: {reason}[/red]")
    if outcome.detail:
        console.print(outcome.detail)
    if outcome.raw_reply:
        console.print("[yellow]Raw model reply:[/yellow]")
        console.print(outcome.raw_reply[:2000], markup=False)
    raise typer.Exit(1)


@app.command()
def catalog(
    platform: Optional[Platform] = typer.Option(Platform.IOS, help="IOS | ANDROID | BOTH"),
    output: Optional[str] = typer.Option(None, help="Write the feed to this file instead of stdout"),
):
    """Render the AltStore source feed from current store state."""
    settings = get_settings()
    body = render_catalog(build_catalog(get_store(), settings, platform))
    if output:
        Path(output).write_text(body, encoding="utf-8")
        Console(stderr=True).print(f"Wrote {output}")
    else:
        typer.echo(body)


@app.command("apps")
def list_apps(
    platform: Optional[Platform] = typer.Option(None, help="IOS | ANDROID | BOTH"),
):
    """List apps with their latest version and safety badge."""
    console = Console()
    entries = get_store().list_apps(set(platforms_for(platform)) if platform else None)
    table = Table("App", "Title", "Platform", "Latest", "Downloads", "Safety")
    for entry in sorted(entries, key=lambda e: e.app.title.lower()):
        versions = sort_versions(entry.versions)
        latest = versions[0] if versions else None
        state = SafetyState.for_version(latest)
        badge = state.badge.value
        safety = f"{state.verdict.score}/100 {badge}" if state.verdict else badge
        table.add_row(
            entry.app.app_id,
            entry.app.title,
            entry.app.platform.value,
            (latest.version_string or "-") if latest else "-",
            str(sum(v.download_count for v in versions)),
            f"[{_BADGE_STYLE[badge]}]{safety}[/{_BADGE_STYLE[badge]}]",
        )
    console.print(table)


if __name__ == "__main__":
    app()
