#!/usr/bin/env python3
"""``reel-wheel`` admin command line."""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from reel_wheel.api import ReelWheelClient, ReelWheelError, SessionExpiredError
from reel_wheel.api import memorabilia as memorabilia_api
from reel_wheel.api import merchandise as merchandise_api
from reel_wheel.api import products as products_api
from reel_wheel.api import uploads as uploads_api
from reel_wheel.api.session import AdminSession
from reel_wheel.logging_helpers import configure_logging
from reel_wheel.models import ListResponse

app = typer.Typer(help="Manage the Reel Wheel rental catalog.")
console = Console()

client_options: dict = {}


def get_client() -> ReelWheelClient:
    return ReelWheelClient(**client_options)


def run(action: Callable[[ReelWheelClient], Awaitable[Any]]) -> Any:
    """Run *action* against a fresh client and map errors to exit codes."""

    async def runner():
        async with get_client() as client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except SessionExpiredError as exc:
        rprint(f"[bold red]{exc}[/bold red] Run [cyan]reel-wheel login[/cyan] to sign in again.")
        raise typer.Exit(code=1)
    except ReelWheelError as exc:
        rprint(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)


def print_page(page: ListResponse, title: str, columns: List[str]) -> None:
    if page.error:
        rprint(f"[bold yellow]Could not load {title.lower()}:[/bold yellow] {page.error}")
    if not page.rows:
        rprint(f"[bold red]No {title.lower()} found.[/bold red]")
        return
    table = Table(title=f"{title} ({len(page.rows)} of {page.total})")
    table.add_column("ID", style="cyan", no_wrap=True)
    for column in columns:
        table.add_column(column.replace("_", " ").title())
    for row in page.rows:
        values = []
        for column in columns:
            value = getattr(row, column, "")
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value)
            values.append("" if value is None else str(value))
        table.add_row(row.id, *values)
    console.print(table)


@app.callback()
def main(
    base_url: Optional[str] = typer.Option(None, "--base-url", "-u", help="API base URL"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    configure_logging(debug)
    client_options.clear()
    client_options["base_url"] = base_url


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@app.command()
def login(
    email: str = typer.Option(..., prompt=True, help="Administrator email"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Sign in and store the tokens locally."""

    async def action(client: ReelWheelClient):
        return await AdminSession(client).login(email, password)

    user = run(action)
    rprint(f"[bold green]Signed in as {user.email}[/bold green]")


@app.command()
def logout():
    """Forget the stored tokens."""

    async def action(client: ReelWheelClient):
        AdminSession(client).logout()

    run(action)
    rprint("[bold green]Signed out.[/bold green]")


@app.command()
def status():
    """Show whether stored tokens are available."""

    async def action(client: ReelWheelClient):
        return client.base_url, client.is_authenticated

    base_url, authenticated = run(action)
    state = "[green]signed in[/green]" if authenticated else "[red]signed out[/red]"
    rprint(Panel.fit(f"[cyan]API:[/] {base_url}\n[cyan]Session:[/] {state}", title="Reel Wheel"))


# ---------------------------------------------------------------------------
# Catalog listings
# ---------------------------------------------------------------------------


@app.command()
def products(
    q: Optional[str] = typer.Option(None, "--search", "-q", help="Search text"),
    limit: int = typer.Option(20, help="Page size"),
    offset: int = typer.Option(0, help="Page offset"),
    sort: Optional[str] = typer.Option(None, help="Sort expression"),
    genre: Optional[List[str]] = typer.Option(None, help="Filter by genre (repeatable)"),
    product_type: Optional[List[str]] = typer.Option(None, help="Filter by product type (repeatable)"),
    trending: Optional[bool] = typer.Option(None, help="Only trending models"),
):
    """List products."""

    async def action(client: ReelWheelClient):
        return await products_api.get_products(
            client,
            limit=limit,
            offset=offset,
            q=q,
            sort=sort,
            genres=genre or None,
            product_types=product_type or None,
            is_trending_model=trending,
        )

    print_page(run(action), "Products", ["title", "product_types", "slug"])


@app.command()
def product(id_or_slug: str):
    """Show a single product."""

    async def action(client: ReelWheelClient):
        return await products_api.get_product(client, id_or_slug)

    item = run(action)
    prices = ", ".join(
        f"{period}: {getattr(item, f'rental_price_{period}')}"
        for period in item.available_rental_periods
        if getattr(item, f"rental_price_{period}", None)
    )
    panel_text = (
        f"[bold magenta]{item.title}[/bold magenta]\n"
        f"[white]{item.subtitle or ''}[/white]\n"
        f"[cyan]Slug:[/] {item.slug}\n"
        f"[green]Types:[/] {', '.join(item.product_types)}\n"
        f"[green]Movies:[/] {', '.join(item.movies)}\n"
        f"[blue]Genres:[/] {', '.join(item.genres)}\n"
        f"[yellow]Rental:[/] {prices or 'n/a'}\n"
        f"[yellow]Sale price:[/] {item.sale_price or 'n/a'}\n"
    )
    rprint(Panel.fit(panel_text, title="[bold green]Product[/bold green]", subtitle=f"[bold cyan]{item.id}[/bold cyan]"))


@app.command()
def memorabilia(
    q: Optional[str] = typer.Option(None, "--search", "-q", help="Search text"),
    limit: int = typer.Option(20, help="Page size"),
    offset: int = typer.Option(0, help="Page offset"),
):
    """List memorabilia."""

    async def action(client: ReelWheelClient):
        return await memorabilia_api.get_memorabilia(client, limit=limit, offset=offset, q=q)

    print_page(run(action), "Memorabilia", ["title", "slug"])


@app.command()
def merchandise(
    q: Optional[str] = typer.Option(None, "--search", "-q", help="Search text"),
    limit: int = typer.Option(20, help="Page size"),
    offset: int = typer.Option(0, help="Page offset"),
):
    """List merchandise."""

    async def action(client: ReelWheelClient):
        return await merchandise_api.get_merchandise(client, limit=limit, offset=offset, q=q)

    print_page(run(action), "Merchandise", ["title", "price", "slug"])


# ---------------------------------------------------------------------------
# Deletes and uploads
# ---------------------------------------------------------------------------


def _confirm_delete(kind: str, item_id: str, yes: bool) -> bool:
    if yes or Confirm.ask(f"Are you sure you want to delete {kind} '{item_id}'?", default=False):
        return True
    typer.echo("Deletion cancelled.")
    return False


@app.command()
def delete_product(item_id: str, yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Delete a product by its ID."""
    if not _confirm_delete("product", item_id, yes):
        return
    run(lambda client: products_api.delete_product(client, item_id))
    rprint(f"[bold red]Deleted product {item_id}[/bold red]")


@app.command()
def delete_memorabilia(item_id: str, yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Delete a memorabilia item by its ID."""
    if not _confirm_delete("memorabilia", item_id, yes):
        return
    run(lambda client: memorabilia_api.delete_memorabilia(client, item_id))
    rprint(f"[bold red]Deleted memorabilia {item_id}[/bold red]")


@app.command()
def delete_merchandise(item_id: str, yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Delete a merchandise item by its ID."""
    if not _confirm_delete("merchandise", item_id, yes):
        return
    run(lambda client: merchandise_api.delete_merchandise(client, item_id))
    rprint(f"[bold red]Deleted merchandise {item_id}[/bold red]")


@app.command()
def upload(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file to upload")):
    """Upload an image and print its public URL."""
    result = run(lambda client: uploads_api.upload_file(client, path))
    rprint(f"[bold green]Uploaded:[/bold green] {result.url}")


@app.command()
def delete_upload(url: str):
    """Delete an uploaded file by its URL."""
    run(lambda client: uploads_api.delete_file(client, url))
    rprint(f"[bold green]Deleted {url}[/bold green]")


if __name__ == "__main__":
    app()
