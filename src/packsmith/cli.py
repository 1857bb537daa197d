"""Command-line interface for packsmith."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.table import Table

from packsmith import __version__
from packsmith.artifacts import ArtifactSpec, resolve_artifacts
from packsmith.config.loader import (
    get_home_config_path,
    get_local_config_path,
    home_config_exists,
    load_config,
    local_config_exists,
    update_config_file,
)
from packsmith.console import configure_logging, console
from packsmith.errors import FilesystemError, PacksmithError, ValidationError
from packsmith.generator import failure_state, generate_package, package_root
from packsmith.materializer import ConflictPolicy, RunState, always_overwrite
from packsmith.package import FeatureKey, PackageType, resolve_descriptor
from packsmith.package.features import FEATURE_DESCRIPTIONS
from packsmith.stubs import StubStore, get_stub_providers, publish_default_stubs

logger = logging.getLogger(__name__)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"packsmith [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


def feature_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add a ``--with-<feature>`` flag for every FeatureKey."""
    for key in reversed(list(FeatureKey)):
        func = click.option(
            f"--{key.option_name}",
            f"with_{key.value}",
            is_flag=True,
            default=False,
            help=FEATURE_DESCRIPTIONS[key],
        )(func)
    return func


def confirm_overwrite(root: Path) -> bool:
    """Ask before replacing an existing package directory."""
    console.print(f"[yellow]The package directory {root} already exists.[/yellow]")
    return click.confirm(
        "Do you want to overwrite it? Its contents will be deleted", default=False
    )


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Packsmith - scaffold Laravel packages from feature toggles."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@main.command()
@click.argument("name")
@click.option("--vendor", help="Vendor name (kebab-case).")
@click.option("--description", "-d", help="Package description.")
@click.option("--author", help="Author name for the manifest and license.")
@click.option("--email", help="Author email address.")
@click.option("--license", "license_name", help="License identifier (default MIT).")
@click.option("--locale", help="Locale for resources/lang (default en).")
@click.option(
    "--type",
    "package_type",
    type=click.Choice([t.value for t in PackageType]),
    help="Package type; adds its own directories to the base layout.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the package folder is created in (default ./packages).",
)
@click.option(
    "--stubs",
    "stubs_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory of stub overrides, searched before all others.",
)
@feature_options
@click.option("--all", "all_features", is_flag=True, help="Enable every feature.")
@click.option("--force", "-f", is_flag=True, help="Overwrite without asking.")
@click.option(
    "--dry-run", is_flag=True, help="List the artifacts without writing anything."
)
def make(
    name: str,
    vendor: str | None,
    description: str | None,
    author: str | None,
    email: str | None,
    license_name: str | None,
    locale: str | None,
    package_type: str | None,
    output_dir: Path | None,
    stubs_dir: Path | None,
    all_features: bool,
    force: bool,
    dry_run: bool,
    **feature_flags: bool,
) -> None:
    """Generate a new package structure named NAME."""
    config = load_config()

    features = {
        FeatureKey(flag[len("with_") :]): True
        for flag, enabled in feature_flags.items()
        if enabled
    }

    try:
        descriptor = resolve_descriptor(
            name,
            vendor=vendor,
            description=description,
            author=author,
            email=email,
            features=features,
            all_features=all_features,
            license=license_name,
            locale=locale,
            package_type=package_type,
            config=config,
        )
    except ValidationError as e:
        console.print("[red]Invalid package input:[/red]")
        for error in e.errors:
            console.print(f"  [red]✗[/red] {error}")
        logger.debug("Run %s", failure_state(e).value)
        raise SystemExit(1) from None

    if output_dir is None:
        output_dir = Path(config.output_dir or "packages")
    if stubs_dir is None and config.stubs_dir:
        stubs_dir = Path(config.stubs_dir)

    if dry_run:
        _print_plan(descriptor.package_name, package_root(descriptor, output_dir))
        _print_artifacts(resolve_artifacts(descriptor))
        return

    policy: ConflictPolicy = always_overwrite if force else confirm_overwrite
    logger.debug("Generating %s into %s", descriptor.package_name, output_dir)
    store = StubStore(get_stub_providers(stubs_dir))

    try:
        result = generate_package(descriptor, output_dir, policy, store=store)
    except PacksmithError as e:
        label = "Filesystem error" if isinstance(e, FilesystemError) else "Error"
        console.print(f"[red]{label}:[/red] {e}")
        logger.debug("Run %s", failure_state(e).value)
        raise SystemExit(1) from None

    if result.state == RunState.DECLINED:
        console.print("[yellow]Package creation aborted. No changes made.[/yellow]")
        return

    files = sum(1 for a in result.artifacts if not a.is_directory)
    console.print(
        f"[green]✓[/green] Package [bold]{descriptor.package_name}[/bold] "
        f"created at {result.root} ({files} files)"
    )
    console.print(f"  Namespace: [cyan]{descriptor.namespace}[/cyan]")


def _print_plan(package_name: str, root: Path) -> None:
    console.print(f"[bold]Dry run:[/bold] {package_name} -> {root}\n")


def _print_artifacts(artifacts: list[ArtifactSpec]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Path")
    table.add_column("Stub")
    table.add_column("Feature", style="dim")
    for artifact in artifacts:
        path = artifact.relative_path + ("/" if artifact.is_directory else "")
        feature = artifact.feature.value if artifact.feature else "base"
        table.add_row(path, artifact.template_id or "-", feature)
    console.print(table)


@main.group(invoke_without_command=True)
@click.pass_context
def stubs(ctx: click.Context) -> None:
    """Inspect and publish stub templates."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(stubs_list)


@stubs.command("list")
@click.option(
    "--stubs",
    "stubs_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory of stub overrides to include.",
)
def stubs_list(stubs_dir: Path | None = None) -> None:
    """List available stubs and where each one resolves from."""
    store = StubStore(get_stub_providers(stubs_dir))
    available = store.available()
    if not available:
        console.print("[yellow]No stubs found.[/yellow]")
        return

    console.print("[bold]Available Stubs:[/bold]\n")
    for stub_id, provider in available.items():
        console.print(f"  [cyan]{stub_id}[/cyan] [dim]({provider.label})[/dim]")


@stubs.command("publish")
@click.option(
    "--global",
    "-g",
    "global_stubs",
    is_flag=True,
    help="Publish to ~/.packsmith/stubs/ instead of ./.packsmith/stubs/.",
)
@click.option("--overwrite", is_flag=True, help="Replace stubs already published.")
def stubs_publish(global_stubs: bool, overwrite: bool) -> None:
    """Copy the built-in stubs so they can be customised."""
    copied = publish_default_stubs(local=not global_stubs, overwrite=overwrite)
    where = "~/.packsmith/stubs/" if global_stubs else "./.packsmith/stubs/"
    if copied:
        console.print(f"[green]Published {len(copied)} stubs to {where}[/green]")
    else:
        console.print(f"[dim]All stubs already present in {where}[/dim]")


@main.command("config")
@click.argument("assignments", nargs=-1)
@click.option(
    "--global",
    "-g",
    "global_config",
    is_flag=True,
    help="Write to the global config (~/.packsmith/config.yaml).",
)
@click.option(
    "--local",
    "-l",
    "local_config",
    is_flag=True,
    help="Write to the local config (./.packsmith/config.yaml).",
)
@click.option(
    "--show", is_flag=True, help="Show current effective configuration and exit."
)
def config_cmd(
    assignments: tuple[str, ...], global_config: bool, local_config: bool, show: bool
) -> None:
    """Show or update configuration defaults.

    Pass KEY=VALUE pairs with --global or --local, for example:

      packsmith config --global vendor=acme author="Jane Doe"
    """
    if show or not assignments:
        _show_current_config()
        return

    if global_config == local_config:
        console.print("[red]Choose exactly one of --global or --local.[/red]")
        raise SystemExit(1)

    values: dict[str, str] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            console.print(f"[red]Expected KEY=VALUE, got '{assignment}'[/red]")
            raise SystemExit(1)
        values[key.strip()] = value.strip()

    path = get_home_config_path() if global_config else get_local_config_path()
    try:
        saved = update_config_file(path, values)
    except ValidationError as e:
        console.print("[red]Invalid configuration:[/red]")
        for error in e.errors:
            console.print(f"  [red]✗[/red] {error}")
        raise SystemExit(1) from None
    console.print(f"[green]Configuration saved to {path}[/green]")
    for key, value in saved.to_dict().items():
        console.print(f"  {key}: {value}")


def _show_current_config() -> None:
    """Display the current effective configuration."""
    config = load_config()
    console.print("\n[bold]Current Effective Configuration:[/bold]")
    console.print(f"  [dim]Global: {get_home_config_path()}[/dim]")
    console.print(f"  [dim]Local: {get_local_config_path()}[/dim]")
    console.print()

    for key, value in config.to_dict().items():
        console.print(f"  {key}: {value}")

    console.print()
    if home_config_exists():
        console.print("  [green]Global config: exists[/green]")
    else:
        console.print("  [dim]Global config: not found[/dim]")
    if local_config_exists():
        console.print("  [green]Local config: exists[/green]")
    else:
        console.print("  [dim]Local config: not found[/dim]")
