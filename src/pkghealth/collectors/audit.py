"""
Audit-style vulnerability sources.

An audit source is a single bulk call (not per package) that returns
findings keyed by package name. Failures never propagate: a source that
cannot produce a result yields an empty mapping.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping, Optional

from pkghealth.config import DEFAULT_TIMEOUT
from pkghealth.core.exceptions import AuditError
from pkghealth.core.models import AuditEntry, Manifest, parse_audit_report

logger = logging.getLogger(__name__)


class AuditSource(ABC):
    """Abstract base class for audit-style sources."""

    name = "audit"

    @abstractmethod
    async def run(self, manifest: Manifest) -> dict[str, AuditEntry]:
        """Produce audit entries for the manifest.

        Raises:
            AuditError: If the source cannot produce a result.
        """
        pass

    async def fetch_audit(self, manifest: Manifest) -> dict[str, AuditEntry]:
        """Run the audit, substituting an empty result on failure."""
        try:
            return await self.run(manifest)
        except AuditError as e:
            logger.warning("%s", e)
            return {}


class StaticAuditSource(AuditSource):
    """Audit source backed by an already-parsed audit document.

    Useful when an ``npm audit --json`` report was produced elsewhere (for
    example by a CI step) and only needs to be folded into the report.
    """

    name = "static audit"

    def __init__(self, data: Any):
        self._entries = parse_audit_report(data)

    async def run(self, manifest: Manifest) -> dict[str, AuditEntry]:
        return dict(self._entries)


class NpmAuditSource(AuditSource):
    """Run ``npm audit --json`` in a project directory.

    ``npm audit`` exits non-zero whenever it finds vulnerabilities, so the
    exit code is ignored and only stdout is parsed.
    """

    name = "npm audit"

    # npm audit can be slow on large lockfiles
    DEFAULT_AUDIT_TIMEOUT = 60.0

    # Matches the 10 MB buffer npm tooling conventionally allows
    MAX_OUTPUT_SIZE = 10 * 1024 * 1024

    def __init__(
        self,
        project_dir: Path,
        timeout: float = DEFAULT_AUDIT_TIMEOUT,
        npm_executable: str = "npm",
    ):
        """Initialize the audit source.

        Args:
            project_dir: Directory holding package.json and a lockfile.
            timeout: Seconds to wait for npm before giving up.
            npm_executable: npm binary to run.
        """
        self.project_dir = Path(project_dir)
        self.timeout = timeout
        self.npm_executable = npm_executable

    async def run(self, manifest: Manifest) -> dict[str, AuditEntry]:
        stdout = await self._run_npm()
        if len(stdout) > self.MAX_OUTPUT_SIZE:
            raise AuditError(self.name, f"output exceeds {self.MAX_OUTPUT_SIZE} bytes")
        try:
            data = json.loads(stdout)
        except ValueError as e:
            raise AuditError(self.name, f"invalid JSON output: {e}")
        return parse_audit_report(data)

    async def _run_npm(self) -> bytes:
        try:
            process = await asyncio.create_subprocess_exec(
                self.npm_executable,
                "audit",
                "--json",
                cwd=str(self.project_dir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise AuditError(self.name, f"could not start {self.npm_executable}: {e}")

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise AuditError(self.name, f"timed out after {self.timeout}s")
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        return stdout


def build_audit_source(
    audit: Optional[AuditSource | Mapping | Path | str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Optional[AuditSource]:
    """Resolve the accepted audit arguments into an :class:`AuditSource`.

    ``audit`` may be a source, a parsed audit document, or a project
    directory to run ``npm audit`` in. ``timeout`` is only a floor for the
    npm run; npm itself needs far longer than one HTTP request.
    """
    if audit is None or isinstance(audit, AuditSource):
        return audit
    if isinstance(audit, Mapping):
        return StaticAuditSource(audit)
    return NpmAuditSource(Path(audit), timeout=max(timeout, NpmAuditSource.DEFAULT_AUDIT_TIMEOUT))
