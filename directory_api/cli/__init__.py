"""
Command Line Interface for Directory API.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncEngine

from ..config import get_settings
from ..db.base import create_engine
from ..db.services import DirectoryService, ObjectService
from ..errors import DirectoryAPIError
from ..logging_config import configure_logging
from ..schemas.directory_v1 import PropertySpec

app = typer.Typer(help="Directory API - schema-agnostic CRUD over PostgreSQL tables")
console = Console()


def _run(operation: Callable[[AsyncEngine], Awaitable[Any]]) -> Any:
    """Run ``operation`` against a fresh engine and dispose of it afterwards."""
    settings = get_settings()
    configure_logging(settings.log_level, "console")

    async def runner():
        engine = create_engine(settings)
        try:
            return await operation(engine)
        finally:
            await engine.dispose()

    try:
        return asyncio.run(runner())
    except DirectoryAPIError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(code=1)


def parse_property(raw: str) -> PropertySpec:
    """
    Parse a ``name:type[:constraint]`` property definition.

    Examples:
        "id:serial:PRIMARY KEY" -> id serial PRIMARY KEY
        "label:text" -> label text
        "price:numeric(10, 2):NOT NULL" -> price numeric(10, 2) NOT NULL
    """
    parts = raw.split(":", 2)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise typer.BadParameter(f"Expected name:type[:constraint], got '{raw}'")

    constraint = parts[2] if len(parts) == 3 and parts[2] else None
    return PropertySpec(name=parts[0], type=parts[1], constraint=constraint)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Start the Directory API server."""
    from ..main import run

    settings = get_settings()
    rprint(
        Panel.fit(
            f"Starting Directory API on http://{host or settings.api_host}:{port or settings.api_port}",
            style="bold blue",
        )
    )
    run(host=host, port=port, reload=reload)


@app.command()
def directories():
    """List the directories in the public schema."""
    names: List[str] = _run(lambda engine: DirectoryService(engine).list_directories())

    if not names:
        console.print("No directories found")
        return

    table = Table(title="Directories", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="yellow")
    for name in names:
        table.add_row(name)

    console.print(table)


@app.command()
def objects(
    directory: str = typer.Argument(..., help="Directory to read"),
    cursor: int = typer.Option(0, min=0, help="Row offset of the page"),
):
    """Show one page of objects from a directory."""
    page = _run(lambda engine: ObjectService(engine).list_objects(directory, cursor))

    table = Table(
        title=f"{directory} ({len(page.objects)} of {page.count})",
        show_header=True,
        header_style="bold magenta",
    )
    for name in page.property_names:
        label = f"{name} 🔑" if name == page.primary_key else name
        table.add_column(label)

    for obj in page.objects:
        obj = obj or {}
        table.add_row(*("" if obj.get(n) is None else str(obj.get(n)) for n in page.property_names))

    console.print(table)


@app.command("create-directory")
def create_directory(
    directory: str = typer.Argument(..., help="Name of the new directory"),
    properties: List[str] = typer.Option(
        [], "--property", "-p", help="Property as name:type[:constraint]; repeatable"
    ),
):
    """Create a directory."""
    specs = [parse_property(raw) for raw in properties]
    _run(lambda engine: DirectoryService(engine).create_directory(directory, specs))
    console.print(f"✅ Created directory {directory}")


@app.command("drop-directory")
def drop_directory(
    directory: str = typer.Argument(..., help="Directory to drop"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Drop a directory and all of its objects."""
    if not yes:
        typer.confirm(f"Drop directory {directory} and all of its objects?", abort=True)

    _run(lambda engine: DirectoryService(engine).delete_directory(directory))
    console.print(f"🗑️ Dropped directory {directory}")


@app.command()
def seed():
    """Create the sample authors and jokes directories."""
    _run(lambda engine: DirectoryService(engine).generate_dummy())
    console.print("✅ Created sample directories: authors, jokes")


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    rprint(Panel.fit(f"Directory API v{__version__}", style="bold green"))


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
