"""CLI interface for fscache."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from fscache.consts import DEFAULT_CACHE_DIR
from fscache.exceptions import CacheError
from fscache.models.model_settings import CacheFormat, ExpirationStrategy, ShardLayout
from fscache.storage.cache.file_caching import FileSystemCache

app = typer.Typer(
    name="fscache",
    help="fscache - Inspect and maintain a sharded filesystem cache",
)

console = Console()


def _format_size(num_bytes: int) -> str:
    """Human-readable byte count."""
    size = float(num_bytes)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


def _cache(ctx: typer.Context) -> FileSystemCache:
    return ctx.obj["cache"]


@app.callback()
def main(
    ctx: typer.Context,
    base_path: Path = typer.Option(DEFAULT_CACHE_DIR, "--base-path", "-b", help="Cache root directory"),
    cache_format: CacheFormat = typer.Option(CacheFormat.NONE, "--format", "-f", help="Artifact file extension"),
    expiration: ExpirationStrategy = typer.Option(
        ExpirationStrategy.SIDECAR, "--expiration", help="Where entry expiry is recorded"
    ),
    layout: ShardLayout = typer.Option(ShardLayout.HASHED, "--layout", help="Key to path mapping"),
    default_ttl: float = typer.Option(None, "--default-ttl", help="Store-wide TTL in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Open the cache shared by all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        cache = FileSystemCache(
            base_path=base_path,
            default_ttl=default_ttl,
            cache_format=cache_format,
            expiration=expiration,
            layout=layout,
        )
    except CacheError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    ctx.obj = {"cache": cache}


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key"),
) -> None:
    """Print a cached value."""
    try:
        data = _cache(ctx).get(key)
    except CacheError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if data is None:
        console.print(f"[yellow]Miss:[/yellow] {key}")
        raise typer.Exit(1)
    typer.echo(data.decode("utf-8", errors="replace"))


@app.command("set")
def set_value(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key"),
    value: str = typer.Argument(..., help="Value to store"),
    ttl: float = typer.Option(None, "--ttl", "-t", help="TTL in seconds for this entry"),
) -> None:
    """Store a value."""
    try:
        stored = _cache(ctx).set(key, value, ttl=ttl)
    except CacheError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not stored:
        console.print(f"[red]Error:[/red] Could not store {key}")
        raise typer.Exit(1)
    console.print(f"[green]Stored[/green] {key}")


@app.command()
def delete(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key"),
) -> None:
    """Delete a cached value."""
    try:
        deleted = _cache(ctx).delete(key)
    except CacheError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not deleted:
        console.print(f"[red]Error:[/red] Could not delete {key}")
        raise typer.Exit(1)
    console.print(f"[green]Deleted[/green] {key}")


@app.command()
def has(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key"),
) -> None:
    """Check whether an artifact exists for a key."""
    try:
        present = _cache(ctx).has(key)
    except CacheError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print("yes" if present else "no")
    if not present:
        raise typer.Exit(1)


@app.command()
def path(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key"),
) -> None:
    """Show where a key is stored."""
    try:
        artifact = _cache(ctx).path_for(key)
    except CacheError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    typer.echo(str(artifact))


@app.command()
def clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every cached value."""
    cache = _cache(ctx)
    if not yes:
        typer.confirm(f"Remove everything under {cache.base_path}?", abort=True)

    if not cache.clear():
        console.print("[red]Error:[/red] Cache was only partially cleared")
        raise typer.Exit(1)
    console.print(f"[green]Cleared[/green] {cache.base_path}")


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show cache statistics."""
    cache = _cache(ctx)
    cache_stats = cache.get_stats()

    table = Table(title=f"Cache Statistics ({cache_stats.base_path})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="magenta")

    table.add_row("Entries", str(cache_stats.total_entries))
    table.add_row("Valid", f"[green]{cache_stats.valid_entries}[/green]")
    table.add_row("Expired", f"[yellow]{cache_stats.expired_entries}[/yellow]")
    table.add_row("Size", _format_size(cache_stats.total_bytes))
    table.add_row("Format", cache.format.value)
    table.add_row("Expiration", cache.settings.expiration.value)
    table.add_row("Default TTL", "none" if cache.default_ttl is None else f"{cache.default_ttl:g}s")

    console.print(table)


if __name__ == "__main__":
    app()
