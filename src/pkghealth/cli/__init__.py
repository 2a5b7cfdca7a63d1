"""
Command-line interface for pkghealth.

Provides Click-based CLI commands for reporting on a package.json,
listing vulnerabilities and outdated packages, and validating ranges.
"""

from pkghealth.cli.main import cli

__all__ = ["cli"]
