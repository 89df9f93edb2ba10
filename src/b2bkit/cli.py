"""b2bkit CLI - Main entry point."""

import asyncio
import json
import logging
from typing import Any, List, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

load_dotenv()

app = typer.Typer(
    name="b2bkit",
    help="b2bkit - Shopify B2B portal backend tools",
    no_args_is_help=True,
)
console = Console()

# Sub-command groups
db_app = typer.Typer(help="Database management")
roles_app = typer.Typer(help="Role catalog management")
sessions_app = typer.Typer(help="Shop session (access token) management")
customers_app = typer.Typer(help="B2B customer lookups")
contacts_app = typer.Typer(help="Company contact role administration")

app.add_typer(db_app, name="db")
app.add_typer(roles_app, name="roles")
app.add_typer(sessions_app, name="sessions")
app.add_typer(customers_app, name="customers")
app.add_typer(contacts_app, name="contacts")


@app.callback()
def main():
    """Shopify B2B portal backend tools."""
    from portal.config import settings

    logging.basicConfig(level=settings.log_level)


def _output_result(result: dict[str, Any]) -> None:
    console.print_json(json.dumps(result, default=str))


def _session_scope():
    """Open a portal database session."""
    from portal.database import async_session_factory

    return async_session_factory()


async def _create_tables():
    from portal.database import engine
    from portal.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ============================================================================
# Database Commands
# ============================================================================


@db_app.command("init")
def db_init():
    """Create portal tables (local SQLite; use Alembic for PostgreSQL)."""
    asyncio.run(_create_tables())
    console.print("[green]Database tables created[/green]")


# ============================================================================
# Role Commands
# ============================================================================


@roles_app.command("seed")
def roles_seed():
    """Insert the default Admin / Ordering only roles if missing."""
    from portal.services import role_svc

    async def _seed():
        async with _session_scope() as db:
            return await role_svc.seed_default_roles(db)

    created = asyncio.run(_seed())
    if created:
        for role in created:
            console.print(f"[green]Created role {role.id}: {role.name}[/green]")
    else:
        console.print("[dim]Default roles already present[/dim]")


@roles_app.command("list")
def roles_list(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List the role catalog."""
    from portal.services import role_svc

    async def _list():
        async with _session_scope() as db:
            return await role_svc.list_roles(db)

    roles = asyncio.run(_list())

    if json_output:
        _output_result({"roles": [{"id": r.id, "name": r.name, "note": r.note} for r in roles]})
        return

    table = Table(title="Company Contact Roles")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Note")
    for role in roles:
        table.add_row(role.id, role.name, role.note or "")
    console.print(table)


# ============================================================================
# Session Commands
# ============================================================================


@sessions_app.command("add")
def sessions_add(
    store: str = typer.Argument(..., help="Store domain, e.g. acme.myshopify.com"),
    token: str = typer.Argument(..., help="Admin API access token"),
    scope: str = typer.Option(None, "--scope", help="Granted access scopes"),
):
    """Store an offline Admin API access token for a shop."""
    from portal.services import session_svc

    async def _add():
        async with _session_scope() as db:
            return await session_svc.save_session(db, store, token, scope=scope)

    session = asyncio.run(_add())
    console.print(f"[green]Session saved for {session.shop}[/green]")


# ============================================================================
# Customer Commands
# ============================================================================


@customers_app.command("details")
def customers_details(
    store: str = typer.Argument(..., help="Store domain"),
    customer_id: str = typer.Argument(..., help="Shopify customer GID"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Resolve a B2B customer and sync their cached roles."""
    from portal.errors import PortalError
    from portal.schemas.customer import CustomerDetailsRequest
    from portal.services import customer_svc

    async def _details():
        async with _session_scope() as db:
            return await customer_svc.get_customer_details(
                db, CustomerDetailsRequest(store_name=store, customer_id=customer_id)
            )

    try:
        result = asyncio.run(_details())
    except PortalError as e:
        console.print(f"[red]Error ({e.error_code}): {e.message}[/red]")
        raise typer.Exit(1)

    payload = result.to_payload()
    if json_output:
        _output_result(payload.model_dump(by_alias=True))
        return

    customer = payload.customer
    name = " ".join(p for p in [customer.first_name, customer.last_name] if p) or "N/A"
    console.print(
        Panel(
            f"[bold]{name}[/bold] ({customer.email or 'no email'})\n"
            f"Company: {payload.company.name} [dim]{payload.company.id}[/dim]\n"
            f"Contact: [dim]{customer.company_contact_id}[/dim]",
            title="Customer",
        )
    )

    table = Table(title="Roles")
    table.add_column("Role", style="green")
    table.add_column("Scope")
    table.add_column("ID", style="dim")
    for role in payload.roles:
        if role.kind == "location":
            scope = role.company_location_name or role.company_location_id
        else:
            scope = "Company-wide"
        table.add_row(role.name, scope, role.id)
    console.print(table)

    for warning in payload.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")


# ============================================================================
# Contact Commands
# ============================================================================


def _parse_location_roles(values: list[str]) -> list[dict[str, str]]:
    assignments = []
    for value in values:
        location_id, sep, role_id = value.rpartition("=")
        if not sep or not location_id or not role_id:
            raise typer.BadParameter(f"Expected LOCATION_ID=ROLE_ID, got {value!r}", param_hint="--location")
        assignments.append({"company_location_id": location_id, "role_id": role_id})
    return assignments


@contacts_app.command("assign")
def contacts_assign(
    store: str = typer.Argument(..., help="Store domain"),
    company_id: str = typer.Argument(..., help="Shopify company GID"),
    contact_id: str = typer.Argument(..., help="Shopify company contact GID"),
    acting_customer: str = typer.Option(..., "--by", help="GID of the customer making the change"),
    locations: Optional[List[str]] = typer.Option(
        None, "--location", "-l", help="LOCATION_ID=ROLE_ID, repeatable"
    ),
    company_admin: bool = typer.Option(False, "--company-admin", help="Grant the company-wide admin role"),
    revoke_all: bool = typer.Option(False, "--revoke-all", help="Allow an empty set (removes every role)"),
):
    """Replace a contact's roles in a company with the given set."""
    from portal.config import settings
    from portal.errors import PortalError
    from portal.schemas.role import RoleAssignmentRequest
    from portal.services import contact_role_svc
    from .api import ShopifyGraphQLError

    assignments = _parse_location_roles(locations or [])
    if company_admin:
        assignments.append({"company_id": company_id, "role_id": settings.admin_role_id})
    if not assignments and not revoke_all:
        console.print("[red]No roles given; pass --revoke-all to remove every role[/red]")
        raise typer.Exit(1)

    try:
        request = RoleAssignmentRequest(
            store_name=store,
            customer_id=acting_customer,
            company_id=company_id,
            company_contact_id=contact_id,
            role_assignments=assignments,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid role assignments: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    async def _assign():
        async with _session_scope() as db:
            return await contact_role_svc.apply_role_assignments(db, request)

    try:
        result = asyncio.run(_assign())
    except PortalError as e:
        console.print(f"[red]Error ({e.error_code}): {e.message}[/red]")
        raise typer.Exit(1)
    except ShopifyGraphQLError as e:
        console.print(f"[red]Shopify {e.operation_name} failed: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]Roles updated[/green]: {result.created} created, {result.updated} updated, "
        f"{result.deleted} deleted, {result.unchanged} unchanged"
    )


@contacts_app.command("delete")
def contacts_delete(
    store: str = typer.Argument(..., help="Store domain"),
    company_id: str = typer.Argument(..., help="Shopify company GID"),
    contact_id: str = typer.Argument(..., help="Shopify company contact GID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a company contact in Shopify along with its roles."""
    from portal.errors import PortalError
    from portal.services import contact_role_svc

    if not yes:
        confirm = typer.confirm(f"Delete company contact {contact_id}?")
        if not confirm:
            console.print("[yellow]Aborted.[/yellow]")
            raise typer.Exit(0)

    async def _delete():
        async with _session_scope() as db:
            return await contact_role_svc.delete_contact(
                db, store_name=store, company_id=company_id, company_contact_id=contact_id
            )

    try:
        deleted = asyncio.run(_delete())
    except PortalError as e:
        console.print(f"[red]Error ({e.error_code}): {e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Contact deleted[/green] ({deleted} cached roles removed)")


@app.command("serve")
def serve(
    port: int = typer.Option(8030, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
):
    """Launch the portal API."""
    import uvicorn

    console.print(f"[bold cyan]Starting B2B portal at http://{host}:{port}[/bold cyan]")
    uvicorn.run("portal.app:app", host=host, port=port, reload=True)


if __name__ == "__main__":
    app()
