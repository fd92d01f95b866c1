"""Click CLI for Fylex."""

import logging
from pathlib import Path
from typing import Optional

import click
from trogon import tui

from fylex import __version__
from fylex.catalog import ProjectCatalog
from fylex.config import FylexConfig
from fylex.errors import AlreadyExists, CatalogError, ConfigExists, ScanError
from fylex.models import Project
from fylex.store import ConfigStore
from fylex.vcs import VcsProbe


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_file: Optional[str], verbose: bool) -> None:
    """Send fylex logs to ``log_file``; stay silent otherwise.

    The TUI owns the terminal, so nothing is ever logged to the console.
    """
    logger = logging.getLogger("fylex")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    if log_file:
        handler: logging.Handler = logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()
    logger.addHandler(handler)
    logger.propagate = False


def get_catalog(ctx: click.Context) -> ProjectCatalog:
    """Build the catalog for the root resolved by the group options."""
    settings: FylexConfig = ctx.obj["settings"]
    return ProjectCatalog(
        ctx.obj["root"],
        store=ConfigStore(),
        probe=VcsProbe(timeout=settings.vcs_timeout),
    )


def scan_or_exit(catalog: ProjectCatalog) -> list[Project]:
    """Scan the root, exiting with status 1 if it cannot be listed."""
    try:
        return catalog.scan()
    except ScanError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


def find_or_exit(catalog: ProjectCatalog, name: str) -> Project:
    """Look up the project in folder ``name``, exiting with status 1 if absent."""
    try:
        project = catalog.find(name)
    except ScanError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    if project is not None:
        return project
    click.echo(f"Error: Project '{name}' not found.", err=True)
    raise SystemExit(1)


@tui()
@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="fylex")
@click.option("--root", "-r", "root", type=click.Path(file_okay=False), help="Projects root (default: $FYLEX_ROOT or settings)")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write logs to this file")
@click.option("--verbose", "-v", is_flag=True, help="Log debug details")
@click.pass_context
def cli(ctx: click.Context, root: Optional[str], log_file: Optional[str], verbose: bool) -> None:
    """Fylex - Terminal browser for a directory of projects.

    Lists every folder under the root, filters as you type and opens a
    shell in the one you pick.

    Quick start:
        fylex                 Browse projects (same as: fylex browse)
        fylex list            Print all projects
        fylex new NAME        Create a project folder
        fylex tui             Launch command explorer (Trogon)
    """
    settings = FylexConfig.load()
    configure_logging(log_file or settings.log_file, verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["root"] = settings.resolve_root(root)

    if ctx.invoked_subcommand is None:
        ctx.invoke(browse)


@cli.command()
@click.pass_context
def browse(ctx: click.Context) -> None:
    """Launch the interactive project browser.

    Type to filter by name or tag, pick a project with the arrow keys and
    press Enter to open a shell there.

    Keyboard shortcuts:
        Enter - Open shell in project
        N - New project
        T - Add tag
        A - Add config file
        R - Reload
        Q - Quit
    """
    from fylex.session import SessionState
    from fylex.tui import FylexApp

    catalog = get_catalog(ctx)
    session = SessionState(catalog=scan_or_exit(catalog))
    app = FylexApp(catalog, session=session, settings=ctx.obj["settings"])
    app.run()
    raise SystemExit(app.return_code or 0)


@cli.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show path and description")
@click.pass_context
def list_projects(ctx: click.Context, verbose: bool) -> None:
    """List all projects under the root."""
    catalog = get_catalog(ctx)
    projects = scan_or_exit(catalog)

    if not projects:
        click.echo(f"No projects in {catalog.root}.")
        return

    click.echo(f"\nProjects in {catalog.root}:")
    click.echo("=" * 50)

    for project in projects:
        suffix = project.vcs_state.suffix if project.vcs_state else ""
        tag_str = f" [{', '.join(project.tags)}]" if project.tags else ""
        click.echo(f"  {project.display_name}{suffix}{tag_str}")

        if verbose:
            click.echo(f"    Path: {project.path}")
            if project.description:
                desc = project.description[:60] + "..." if len(project.description) > 60 else project.description
                click.echo(f"    {desc}")

    click.echo(f"\nTotal: {len(projects)} projects")


@cli.command()
@click.argument("name")
@click.pass_context
def new(ctx: click.Context, name: str) -> None:
    """Create a new project folder with git and a default config.

    NAME: Folder name under the root
    """
    catalog = get_catalog(ctx)
    try:
        project = catalog.create(name)
    except AlreadyExists:
        click.echo(f"Error: '{name}' already exists.", err=True)
        raise SystemExit(1)
    except CatalogError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Created project: {project.path}")


@cli.command()
@click.argument("name")
@click.argument("tag")
@click.pass_context
def tag(ctx: click.Context, name: str, tag: str) -> None:
    """Append a tag to a project's config.

    NAME: Project folder name
    TAG: Tag to append
    """
    catalog = get_catalog(ctx)
    project = find_or_exit(catalog, name)
    try:
        project = catalog.add_tag(project, tag)
    except CatalogError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Tags for {project.dir_name}: {', '.join(project.tags)}")


@cli.command("init-config")
@click.argument("name")
@click.pass_context
def init_config(ctx: click.Context, name: str) -> None:
    """Write a default config file for a project that has none.

    NAME: Project folder name
    """
    catalog = get_catalog(ctx)
    project = find_or_exit(catalog, name)
    try:
        catalog.add_config(project)
    except ConfigExists:
        click.echo(f"Error: '{name}' already has a config.", err=True)
        raise SystemExit(1)
    except CatalogError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Wrote config for {name}")
