"""
Messaging Router CLI

Command-line interface for tenant message delivery.

Commands:
- send: Send one message through the tenant's provider
- broadcast: Send the same message to several recipients
- status: Show the health of the tenant's provider
- pending: List the tenant's pending Desktop Agent queue
- provider: Show which provider a tenant resolves to
"""

import asyncio
from dataclasses import replace
from typing import Optional
from uuid import UUID

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from basecore.db import session_scope
from basecore.logging import setup_logging
from messaging_router.config import DeliveryConfig
from messaging_router.contracts.types import Recipient, TenantProfile
from messaging_router.persistence.repo import DeliveryRepository
from messaging_router.providers.base import DeliveryError
from messaging_router.service.delivery_engine import DeliveryEngine

app = typer.Typer(
    name="messaging-router",
    help="Tenant-aware WhatsApp delivery CLI",
)

console = Console()


def parse_tenant_id(tenant_id: str) -> UUID:
    try:
        return UUID(tenant_id)
    except ValueError:
        rprint(f"[red]Invalid tenant ID: {tenant_id}[/red]")
        raise typer.Exit(1)


def load_tenant(repo: DeliveryRepository, tenant_id: str) -> TenantProfile:
    """Load a tenant profile or exit."""
    tenant = repo.get_tenant(parse_tenant_id(tenant_id))
    if tenant is None:
        rprint(f"[red]Tenant not found: {tenant_id}[/red]")
        raise typer.Exit(1)
    return TenantProfile.from_model(tenant)


def parse_recipient(entry: str) -> Recipient:
    """Parse "phone" or "phone:Name"."""
    phone, _, name = entry.partition(":")
    return Recipient(phone=phone.strip(), name=name.strip() or None)


@app.callback()
def main():
    setup_logging()


@app.command()
def send(
    tenant_id: str = typer.Argument(..., help="Tenant UUID"),
    phone: str = typer.Argument(..., help="Recipient phone (e.g., 5511999999999)"),
    message: str = typer.Argument(..., help="Message text"),
    media_url: Optional[str] = typer.Option(None, help="Media URL to attach"),
    name: Optional[str] = typer.Option(None, help="Recipient display name"),
):
    """
    Send one message through the tenant's provider.

    Falls back to Maytapi when the primary provider fails and Maytapi
    credentials are configured.
    """
    with session_scope() as db:
        repo = DeliveryRepository(db)
        engine = DeliveryEngine(load_tenant(repo, tenant_id), DeliveryConfig.from_settings(), repo)

        async def run():
            try:
                return await engine.send_message(phone, message, media_url, {"recipient_name": name})
            finally:
                await engine.close()

        try:
            result = asyncio.run(run())
        except DeliveryError as e:
            rprint("[red]Failed to send message[/red]")
            rprint(f"  Error: {e}")
            rprint(f"  Code: {e.code}")
            raise typer.Exit(1)

        rprint(f"[green]Message {result.status.value} via {result.provider}[/green]")
        rprint(f"  Message ID: {result.message_id}")
        if result.note:
            rprint(f"  Note: {result.note}")


@app.command()
def broadcast(
    tenant_id: str = typer.Argument(..., help="Tenant UUID"),
    message: str = typer.Argument(..., help="Message text"),
    recipients: list[str] = typer.Argument(..., help='Recipients as "phone" or "phone:Name"'),
    media_url: Optional[str] = typer.Option(None, help="Media URL to attach"),
    delay: Optional[float] = typer.Option(None, help="Seconds between recipients"),
):
    """
    Send the same message to several recipients, one at a time.

    Individual failures are reported and do not stop the broadcast.
    """
    with session_scope() as db:
        repo = DeliveryRepository(db)
        config = DeliveryConfig.from_settings()
        if delay is not None:
            config = replace(config, broadcast_delay=delay)

        engine = DeliveryEngine(load_tenant(repo, tenant_id), config, repo)

        async def run():
            try:
                return await engine.send_broadcast(
                    [parse_recipient(r) for r in recipients],
                    message,
                    media_url,
                )
            finally:
                await engine.close()

        result = asyncio.run(run())

        color = "green" if result.failed == 0 else "yellow"
        rprint(f"[{color}]Broadcast finished: {result.sent}/{result.total} sent[/{color}]")

        if result.errors:
            table = Table(title="Failed recipients")
            table.add_column("Recipient")
            table.add_column("Error")
            for failure in result.errors:
                table.add_row(failure.recipient, failure.error)
            console.print(table)


@app.command()
def status(
    tenant_id: str = typer.Argument(..., help="Tenant UUID"),
):
    """Show the health of the tenant's provider."""
    with session_scope() as db:
        repo = DeliveryRepository(db)
        engine = DeliveryEngine(load_tenant(repo, tenant_id), DeliveryConfig.from_settings(), repo)

        async def run():
            try:
                return await engine.check_status()
            finally:
                await engine.close()

        health = asyncio.run(run())

        color = "green" if health.ok else "red"
        rprint(f"\n[cyan]Provider: {health.provider}[/cyan]")
        rprint(f"  Status: [{color}]{health.status}[/{color}]")
        if health.error:
            rprint(f"  Error: {health.error}")
        if health.note:
            rprint(f"  Note: {health.note}")


@app.command()
def pending(
    tenant_id: str = typer.Argument(..., help="Tenant UUID"),
    limit: int = typer.Option(20, help="Maximum entries to show"),
):
    """List pending Desktop Agent queue entries, oldest first."""
    with session_scope() as db:
        repo = DeliveryRepository(db)
        entries = repo.list_pending(parse_tenant_id(tenant_id), limit=limit)

        if not entries:
            rprint("[yellow]No pending messages[/yellow]")
            return

        table = Table(title=f"Pending messages for tenant {tenant_id[:8]}...")
        table.add_column("ID", style="dim")
        table.add_column("Phone")
        table.add_column("Name")
        table.add_column("Message")
        table.add_column("Created")

        for entry in entries:
            table.add_row(
                str(entry.id)[:8],
                entry.phone,
                entry.name or "-",
                entry.message[:40] + ("..." if len(entry.message) > 40 else ""),
                entry.created_at.strftime("%Y-%m-%d %H:%M") if entry.created_at else "-",
            )

        console.print(table)


@app.command()
def provider(
    tenant_id: str = typer.Argument(..., help="Tenant UUID"),
):
    """Show the provider a tenant resolves to."""
    with session_scope() as db:
        repo = DeliveryRepository(db)
        tenant = load_tenant(repo, tenant_id)
        engine = DeliveryEngine(tenant, DeliveryConfig.from_settings(), repo)

        rprint(f"\n[cyan]Tenant: {tenant.id}[/cyan]")
        rprint(f"  Plan: {tenant.plan or '-'}")
        rprint(f"  Override: {tenant.whatsapp_provider or '-'}")
        rprint(f"  Provider: {engine.provider}")
        rprint(f"  Maytapi fallback: {'yes' if engine.can_fall_back() else 'no'}")


if __name__ == "__main__":
    app()
