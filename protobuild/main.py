"""
protobuild — CLI entrypoint.

Usage:
    protobuild --help
    protobuild build ./...
    protobuild build --dryrun
    protobuild config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from protobuild import __version__
from protobuild.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="protobuild")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress command output unless a command fails.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "-f",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to Protobuild.toml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """protobuild — run protoc across every package with .proto files."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("PROTOBUILD_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("PROTOBUILD_LOG_FILE"),
        log_file_level=os.environ.get("PROTOBUILD_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.argument("packages", nargs=-1)
@click.option("--dryrun", "--dry-run", "dry_run", is_flag=True, help="Print commands without running.")
@click.option("--jobs", "-j", default=1, show_default=True, type=click.IntRange(min=1),
              help="Number of concurrent protoc invocations.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(
    ctx: click.Context,
    packages: tuple[str, ...],
    dry_run: bool,
    jobs: int,
    as_json: bool,
) -> None:
    """Compile .proto files in PACKAGES (default: ./...).

    Examples:

        protobuild build

        protobuild build ./api/...

        protobuild --quiet build --jobs 4
    """
    from protobuild.core.use_cases.build import run_build

    quiet = ctx.obj.get("quiet", False)
    result = run_build(
        config_path=ctx.obj.get("config_path"),
        patterns=list(packages) if packages else None,
        dry_run=dry_run,
        quiet=quiet or as_json,
        jobs=jobs,
        echo=click.echo,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"protobuild: {result.error}", fg="red", err=True)
        sys.exit(result.exit_code)

    report = result.report
    assert report is not None
    if ctx.obj.get("verbose"):
        for path in report.descriptors_written:
            click.secho(f"wrote {path}", fg="green", err=True)
        for path in report.descriptors_skipped:
            click.secho(f"skipped {path} (no descriptors)", fg="yellow", err=True)


@cli.command("packages")
@click.argument("patterns", nargs=-1)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def packages_cmd(patterns: tuple[str, ...], as_json: bool) -> None:
    """List packages with .proto files matching PATTERNS."""
    from protobuild.core.errors import ProtobuildError
    from protobuild.core.use_cases.build import list_packages

    try:
        found = list_packages(list(patterns) if patterns else None)
    except ProtobuildError as e:
        click.secho(f"protobuild: {e}", fg="red", err=True)
        sys.exit(e.exit_code)

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in found], indent=2))
        return

    for pkg in found:
        click.secho(pkg.import_path, fg="cyan", bold=True)
        for file in pkg.proto_files:
            click.echo(f"   {file}")


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate Protobuild.toml."""
    from protobuild.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Generator: {result.config.generator}")
        click.echo(f"   Overrides: {len(result.config.overrides)}")
        click.echo(f"   Descriptor sets: {len(result.config.descriptors)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
