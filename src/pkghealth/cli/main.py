"""
Main CLI entry point for pkghealth.

Provides commands for reporting on a package.json, listing its
vulnerabilities and outdated packages, validating version ranges, and
checking a version against a range.
"""

import asyncio
import dataclasses
import json
import sys
from pathlib import Path
from typing import Optional

import click

from pkghealth import __version__
from pkghealth.cli.output import (
    configure_logging,
    print_error,
    print_info,
    print_outdated,
    print_report,
    print_severity_counts,
    print_success,
    print_vulnerabilities,
)
from pkghealth.config import Settings
from pkghealth.core.exceptions import ManifestError, PkgHealthError
from pkghealth.core.models import Manifest, Severity


def run_async(coro):
    """Run an async coroutine in a fresh event loop."""
    return asyncio.run(coro)


def _read_manifest(path: str) -> dict:
    """Load a package.json file, exiting with an error if it cannot be read."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print_error(f"Could not read {path}: {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="pkghealth")
@click.option(
    "--registry-url",
    envvar="PKGHEALTH_REGISTRY_URL",
    help="npm registry root (for mirrors and private registries).",
)
@click.option(
    "--npms-url",
    envvar="PKGHEALTH_NPMS_URL",
    help="npms.io API root.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    envvar="PKGHEALTH_TIMEOUT",
    help="Per-request timeout in seconds (default: 5).",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Log debug output to stderr.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    registry_url: Optional[str],
    npms_url: Optional[str],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """pkghealth - Know the health of your npm dependencies.

    pkghealth checks a package.json against the npm registry, npms.io
    quality signals and npm audit, and scores it out of 100.
    """
    try:
        settings = Settings.from_env()
    except PkgHealthError as e:
        raise click.BadParameter(str(e))

    settings = settings.with_overrides(
        registry_url=registry_url.rstrip("/") if registry_url else None,
        npms_url=npms_url.rstrip("/") if npms_url else None,
        timeout=timeout,
    )
    configure_logging(verbose=verbose, level=settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


def _generator(ctx: click.Context, audit_dir: Optional[str] = None):
    from pkghealth.collectors.audit import build_audit_source
    from pkghealth.reports.generator import ReportGenerator

    settings: Settings = ctx.obj["settings"]
    audit = audit_dir or settings.audit_project_dir
    return ReportGenerator(
        settings=settings,
        audit_source=build_audit_source(audit, timeout=settings.timeout),
    )


@cli.command()
@click.argument("package_json", type=click.Path(exists=True, dir_okay=False), default="package.json")
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json", "markdown"]),
    default="table",
    help="Output format.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Write output to file.",
)
@click.option(
    "--audit-dir",
    type=click.Path(exists=True, file_okay=False),
    envvar="PKGHEALTH_AUDIT_DIR",
    help="Run npm audit in this project directory.",
)
@click.option(
    "--fail-under",
    type=click.IntRange(0, 100),
    help="Exit non-zero if the health score is below this value.",
)
@click.option(
    "--sort-outdated",
    is_flag=True,
    help="List outdated packages by priority (major bumps first).",
)
@click.pass_context
def report(
    ctx: click.Context,
    package_json: str,
    format: str,
    output: Optional[str],
    audit_dir: Optional[str],
    fail_under: Optional[int],
    sort_outdated: bool,
) -> None:
    """Generate a full health report for PACKAGE_JSON.

    \b
    Examples:
        pkghealth report                         # ./package.json
        pkghealth report app/package.json -f json -o report.json
        pkghealth report --audit-dir . --fail-under 80
    """
    from pkghealth.core.classifier import OutdatedClassifier
    from pkghealth.reports.formatters import serialize

    manifest = _read_manifest(package_json)
    generator = _generator(ctx, audit_dir)

    try:
        result = run_async(generator.generate(manifest))
    except PkgHealthError as e:
        print_error(str(e))
        sys.exit(1)

    if sort_outdated:
        result = dataclasses.replace(
            result, outdated=tuple(OutdatedClassifier.sort_by_priority(list(result.outdated)))
        )

    if output:
        if format == "json":
            Path(output).write_bytes(serialize(result))
        else:
            Path(output).write_text(generator.format_report(result, format), encoding="utf-8")
        print_success(f"Report written to {output}")
    elif format == "table":
        print_report(result)
    else:
        click.echo(generator.format_report(result, format), nl=False)

    if fail_under is not None and result.health_score < fail_under:
        print_error(f"Health score {result.health_score} is below {fail_under}.")
        sys.exit(1)


@cli.command()
@click.argument("package_json", type=click.Path(exists=True, dir_okay=False), default="package.json")
@click.option(
    "--severity",
    type=click.Choice(["critical", "high", "moderate", "low"]),
    help="Only show vulnerabilities at this severity or above.",
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
@click.option(
    "--audit-dir",
    type=click.Path(exists=True, file_okay=False),
    envvar="PKGHEALTH_AUDIT_DIR",
    help="Run npm audit in this project directory.",
)
@click.pass_context
def vulns(
    ctx: click.Context,
    package_json: str,
    severity: Optional[str],
    format: str,
    audit_dir: Optional[str],
) -> None:
    """List the vulnerabilities of PACKAGE_JSON.

    \b
    Examples:
        pkghealth vulns                      # ./package.json
        pkghealth vulns --severity high      # high and critical only
    """
    manifest = _read_manifest(package_json)
    generator = _generator(ctx, audit_dir)

    try:
        found = run_async(generator.generate_vulnerabilities(manifest))
    except PkgHealthError as e:
        print_error(str(e))
        sys.exit(1)

    if severity:
        threshold = Severity(severity).sort_order
        found = [v for v in found if v.severity.sort_order <= threshold]

    if format == "json":
        click.echo(json.dumps([v.to_dict() for v in found], indent=2, sort_keys=True))
        return

    if not found:
        print_success("No vulnerabilities found.")
        return

    print_vulnerabilities(found)
    print_severity_counts(found)


@cli.command()
@click.argument("package_json", type=click.Path(exists=True, dir_okay=False), default="package.json")
@click.option(
    "--sort-by-priority",
    is_flag=True,
    help="Major bumps first, then minor, then patch.",
)
@click.pass_context
def outdated(ctx: click.Context, package_json: str, sort_by_priority: bool) -> None:
    """List the outdated dependencies of PACKAGE_JSON.

    \b
    Examples:
        pkghealth outdated
        pkghealth outdated --sort-by-priority
    """
    from pkghealth.core.classifier import OutdatedClassifier

    manifest = _read_manifest(package_json)
    generator = _generator(ctx)

    try:
        result = run_async(generator.generate(manifest))
    except PkgHealthError as e:
        print_error(str(e))
        sys.exit(1)

    entries = list(result.outdated)
    if not entries:
        print_success("All packages are up to date.")
        return

    if sort_by_priority:
        entries = OutdatedClassifier.sort_by_priority(entries)
    print_outdated(entries)


@cli.command()
@click.argument("package_json", type=click.Path(exists=True, dir_okay=False), default="package.json")
def validate(package_json: str) -> None:
    """Check that every version range in PACKAGE_JSON is valid.

    No network access is needed.
    """
    from pkghealth.core.validation import validate_manifest_ranges

    try:
        manifest = Manifest.from_dict(_read_manifest(package_json))
    except ManifestError as e:
        print_error(str(e))
        sys.exit(1)

    result = validate_manifest_ranges(manifest)
    if result.valid:
        print_success(f"All {len(manifest.package_names)} version ranges are valid.")
        return

    for error in result.errors:
        print_error(error)
    sys.exit(1)


@cli.command(name="check-version")
@click.argument("version")
@click.argument("version_range", metavar="RANGE")
def check_version(version: str, version_range: str) -> None:
    """Check whether VERSION satisfies RANGE.

    Also reports whether moving from VERSION to the version RANGE names
    crosses a major version.

    \b
    Examples:
        pkghealth check-version 1.4.2 "^1.2.0"
        pkghealth check-version 1.4.2 "^2.0.0"
    """
    from pkghealth.core.ranges import satisfies
    from pkghealth.core.versions import extract_concrete_version, has_breaking_changes

    target = extract_concrete_version(version_range)
    breaking = target is not None and has_breaking_changes(version, target)

    if satisfies(version, version_range):
        print_success(f"{version} satisfies {version_range}")
    else:
        print_info(f"{version} does not satisfy {version_range}")

    if breaking:
        print_info(f"Upgrading from {version} to {target} is a breaking change.")


if __name__ == "__main__":
    cli()
