"""
CLI entry point for running pkghealth as a module.

Usage: python -m pkghealth [OPTIONS] COMMAND [ARGS]...
"""

from pkghealth.cli.main import cli

if __name__ == "__main__":
    cli()
