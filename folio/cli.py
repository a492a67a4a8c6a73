"""Command-line interface for Folio.

This module defines the CLI commands using Click framework.
Running ``folio`` without a command builds the site.

Commands:
- build: Build the site into the output directory.
- timestamps: Print content file timestamps from git as JSON.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __version__


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="folio")
@click.pass_context
def cli(ctx: click.Context):
    """Folio static site generator."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(build)


@cli.command()
@click.option("--verbose", is_flag=True, help="List every page written")
def build(verbose: bool):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, NoContentError, build_site

    try:
        result = build_site(project_root)
    except NoContentError:
        click.echo(click.style("No files found", fg="blue"))
        raise SystemExit(1) from None
    except BuildError as exc:
        rel_path = _display_path(exc.source_path, project_root)
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    if verbose:
        for page in result.pages:
            click.echo(f"  {_display_path(page.output_path, result.output_dir)}")
    click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")


@cli.command()
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Content directory (overrides folio.yaml content_dir)",
)
def timestamps(content_dir: Path | None):
    """Print content file timestamps from git as JSON."""
    project_root = Path.cwd()
    from .build import load_config
    from .timestamps import collect_timestamps, dump_timestamps

    if content_dir is None:
        content_dir = project_root / load_config(project_root)["content_dir"]
    records = collect_timestamps(content_dir, project_root)
    click.echo(dump_timestamps(records))


def _display_path(path: Path, root: Path) -> str:
    """Show ``path`` relative to ``root`` when it lies inside it."""
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


def main():
    """Entry point for the CLI application."""
    cli()
