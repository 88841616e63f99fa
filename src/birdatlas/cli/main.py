"""birdatlas command line interface.

Reads bird records from the remote service and writes exports or prints
statistics.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from dependency_injector import providers

from birdatlas.birds.models import BirdRecord
from birdatlas.config.manager import ConfigManager
from birdatlas.container import Container
from birdatlas.errors import BirdAtlasError
from birdatlas.export.csv_export import write_csv, write_summary_csv
from birdatlas.gate.models import Identity
from birdatlas.sync.service import BirdAtlasService
from birdatlas.utils.structlog_configurator import bind_command_context, configure_structlog
from birdatlas.views.search import search
from birdatlas.views.statistics import compute_statistics

T = TypeVar("T")


def _run(container: Container, work: Callable[[BirdAtlasService], Awaitable[T]]) -> T:
    """Open a session, run ``work`` against the service, then close it."""

    async def runner() -> T:
        config = container.config()
        session = container.session()
        identity = Identity(principal=config.principal) if config.principal else None
        await session.start(identity)
        try:
            return await work(container.service())
        finally:
            await session.close()

    try:
        return asyncio.run(runner())
    except BirdAtlasError as e:
        raise click.ClickException(str(e)) from e


async def _load_birds(service: BirdAtlasService, term: str | None) -> list[BirdRecord]:
    result = await service.get_all_bird_data()
    if result.error is not None:
        raise result.error
    birds: list[BirdRecord] = result.data or []
    return search(birds, term) if term else birds


def _output_dir(ctx: click.Context, output: Path | None) -> Path:
    if output is not None:
        return output
    container: Container = ctx.obj["container"]
    return container.path_resolver().get_exports_dir(container.config().export.directory)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: $BIRDATLAS_CONFIG or the data directory)",
)
@click.option("--principal", help="Act on behalf of this principal instead of the configured one")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, principal: str | None) -> None:
    """Bird atlas data tools.

    Examples:
        # Export every bird to CSV
        birdatlas export-csv --output ./exports

        # Spreadsheet summary with media counts
        birdatlas export-summary

        # Printable report of matching birds
        birdatlas export-html --search owl

        # Summary statistics as JSON
        birdatlas stats --json
    """
    ctx.ensure_object(dict)
    container = Container()
    config = ConfigManager(container.path_resolver(), config_path=config_path).load()
    if principal:
        config = config.model_copy(update={"principal": principal})
    container.config.override(providers.Object(config))
    configure_structlog(config)
    bind_command_context(ctx.invoked_subcommand or "")
    ctx.obj["container"] = container


@cli.command("export-csv")
@click.option("--output", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--search", "term", help="Only export birds whose names contain this text")
@click.pass_context
def export_csv(ctx: click.Context, output: Path | None, term: str | None) -> None:
    """Export bird records to a UTF-8 CSV file."""
    directory = _output_dir(ctx, output)

    async def work(service: BirdAtlasService) -> Path:
        return write_csv(await _load_birds(service, term), directory)

    path = _run(ctx.obj["container"], work)
    click.echo(click.style(f"CSV written to {path}", fg="green"))


@cli.command("export-summary")
@click.option("--output", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--search", "term", help="Only export birds whose names contain this text")
@click.pass_context
def export_summary(ctx: click.Context, output: Path | None, term: str | None) -> None:
    """Export a spreadsheet summary with location and image counts per bird."""
    directory = _output_dir(ctx, output)

    async def work(service: BirdAtlasService) -> Path:
        return write_summary_csv(await _load_birds(service, term), directory)

    path = _run(ctx.obj["container"], work)
    click.echo(click.style(f"Summary written to {path}", fg="green"))


@cli.command("export-html")
@click.option("--output", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--search", "term", help="Only include birds whose names contain this text")
@click.pass_context
def export_html(ctx: click.Context, output: Path | None, term: str | None) -> None:
    """Export a printable HTML report of bird records."""
    container: Container = ctx.obj["container"]
    directory = _output_dir(ctx, output)
    renderer = container.report_renderer()

    async def work(service: BirdAtlasService) -> Path:
        return renderer.write(await _load_birds(service, term), directory)

    path = _run(container, work)
    click.echo(click.style(f"Report written to {path}", fg="green"))


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON")
@click.pass_context
def stats(ctx: click.Context, as_json: bool) -> None:
    """Show bird and location statistics."""

    async def work(service: BirdAtlasService) -> Any:  # noqa: ANN401
        return compute_statistics(await _load_birds(service, None))

    statistics = _run(ctx.obj["container"], work)

    if as_json:
        click.echo(json.dumps(statistics.model_dump(), ensure_ascii=False, indent=2))
        return

    click.echo(f"Birds: {statistics.total_birds}")
    click.echo(f"Locations: {statistics.total_locations} ({statistics.mapped_locations} mapped)")
    click.echo(f"Birds with audio: {statistics.birds_with_audio}")
    click.echo(f"Images: {statistics.total_images}")
    click.echo("Locations by zone:")
    for zone_name, count in statistics.locations_by_zone.items():
        click.echo(f"  {zone_name}: {count}")
    if statistics.locations_by_bird:
        click.echo("Most sighted:")
        for item in statistics.locations_by_bird[:10]:
            click.echo(f"  {item.bird_name}: {item.count}")


def main() -> None:
    """Entry point for the birdatlas CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
