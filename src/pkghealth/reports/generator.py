"""
Report generator for orchestrating health report creation.

Provides the main ReportGenerator class that fans out the registry,
quality-signal and audit fetches, then classifies, aggregates and scores
the settled results into one immutable :class:`Report`.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from pkghealth.collectors.audit import AuditSource
from pkghealth.collectors.npm import NpmRegistryClient
from pkghealth.collectors.npms import NpmsClient
from pkghealth.config import Settings
from pkghealth.core.aggregator import VulnerabilityAggregator
from pkghealth.core.calculator import HealthCalculator
from pkghealth.core.classifier import OutdatedClassifier
from pkghealth.core.exceptions import ManifestError, ReportGenerationError
from pkghealth.core.models import (
    AuditEntry,
    FetchOutcome,
    Manifest,
    PackageMetadata,
    QualitySignal,
    Report,
    Summary,
    Vulnerability,
)
from pkghealth.reports.formatters import (
    Formatter,
    JSONFormatter,
    MarkdownFormatter,
    TableFormatter,
)

logger = logging.getLogger(__name__)


class _FetchedData:
    """Settled results of one run's fan-out."""

    def __init__(
        self,
        metadata: dict[str, FetchOutcome[PackageMetadata]],
        quality: dict[str, FetchOutcome[QualitySignal]],
        audit: dict[str, AuditEntry],
    ):
        self.metadata = {name: outcome.value for name, outcome in metadata.items()}
        self.quality = {name: outcome.value for name, outcome in quality.items()}
        self.audit = audit
        self.failed = sorted(name for name, outcome in metadata.items() if not outcome.ok)


class ReportGenerator:
    """Generate dependency health reports.

    Orchestrates the entire process of fetching registry metadata,
    quality signals and audit findings, classifying outdated packages,
    aggregating vulnerabilities, and calculating the health score. Each
    call is an independent run with its own HTTP session; nothing is
    cached between runs.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        audit_source: Optional[AuditSource] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the report generator.

        Args:
            settings: Endpoints and timeouts. Defaults to ``Settings()``.
            audit_source: Optional bulk audit source. Without one, only
                registry deprecations and quality signals contribute
                vulnerabilities.
            session: Optional aiohttp session to reuse. When omitted a
                session is created and closed for every run.
        """
        self.settings = settings or Settings()
        self.audit_source = audit_source
        self._session = session

        self.classifier = OutdatedClassifier()
        self.aggregator = VulnerabilityAggregator()
        self.calculator = HealthCalculator()

        # Formatters
        self.formatters: dict[str, Formatter] = {
            "json": JSONFormatter(),
            "markdown": MarkdownFormatter(),
            "table": TableFormatter(),
        }

    async def generate(self, manifest: Any) -> Report:
        """Generate a complete health report.

        Args:
            manifest: A :class:`Manifest` or a package.json-style mapping.

        Returns:
            The finished Report.

        Raises:
            ReportGenerationError: If the manifest is structurally invalid.
        """
        manifest = self._load_manifest(manifest)
        logger.info("Analyzing %d packages", len(manifest.package_names))

        data = await self._fetch_all(manifest)

        outdated = self.classifier.classify(manifest, data.metadata)
        vulnerabilities = self.aggregator.aggregate(
            manifest, data.audit, data.metadata, data.quality
        )
        return self.build_report(manifest, outdated, vulnerabilities)

    async def generate_vulnerabilities(self, manifest: Any) -> list[Vulnerability]:
        """Collect vulnerabilities only, skipping outdated classification.

        Raises:
            ReportGenerationError: If the manifest is structurally invalid.
        """
        manifest = self._load_manifest(manifest)
        data = await self._fetch_all(manifest)
        return self.aggregator.aggregate(manifest, data.audit, data.metadata, data.quality)

    def build_report(
        self,
        manifest: Manifest,
        outdated: list,
        vulnerabilities: list[Vulnerability],
    ) -> Report:
        """Assemble a Report; the summary and score are always derived here."""
        summary = Summary.compute(manifest, outdated, vulnerabilities)
        score = self.calculator.calculate(vulnerabilities, outdated)

        return Report(
            dependencies=dict(manifest.dependencies),
            dev_dependencies=dict(manifest.dev_dependencies),
            outdated=tuple(outdated),
            vulnerabilities=tuple(vulnerabilities),
            summary=summary,
            total_dependencies=summary.total_deps + summary.total_dev_deps,
            health_score=score,
        )

    @staticmethod
    def _load_manifest(manifest: Any) -> Manifest:
        try:
            return Manifest.from_dict(manifest)
        except ManifestError as e:
            raise ReportGenerationError(e) from e

    async def _fetch_all(self, manifest: Manifest) -> _FetchedData:
        """Run every fetch for the manifest concurrently and wait for all of them.

        Cancelling the calling task cancels every in-flight fetch and
        closes the session.
        """
        names = manifest.package_names

        if self._session is not None:
            return await self._fetch_with_session(self._session, manifest, names)

        timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._fetch_with_session(session, manifest, names)

    async def _fetch_with_session(
        self,
        session: aiohttp.ClientSession,
        manifest: Manifest,
        names: list[str],
    ) -> _FetchedData:
        registry = self._registry_client(session)
        npms = self._npms_client(session)

        metadata, quality, audit = await asyncio.gather(
            registry.fetch_many(names),
            npms.fetch_many(names),
            self._fetch_audit(manifest),
        )

        data = _FetchedData(metadata, quality, audit)
        if data.failed:
            logger.info(
                "No registry data for %d of %d packages: %s",
                len(data.failed), len(names), ", ".join(data.failed),
            )
        return data

    async def _fetch_audit(self, manifest: Manifest) -> dict[str, AuditEntry]:
        if self.audit_source is None:
            return {}
        return await self.audit_source.fetch_audit(manifest)

    def _registry_client(self, session: aiohttp.ClientSession) -> NpmRegistryClient:
        return NpmRegistryClient(
            session,
            timeout=self.settings.timeout,
            base_url=self.settings.registry_url,
            user_agent=self.settings.user_agent,
        )

    def _npms_client(self, session: aiohttp.ClientSession) -> NpmsClient:
        return NpmsClient(
            session,
            timeout=self.settings.timeout,
            base_url=self.settings.npms_url,
            user_agent=self.settings.user_agent,
        )

    def format_report(self, report: Report, format_name: str = "table") -> str:
        """Format a report using the specified formatter.

        Args:
            report: The Report to render.
            format_name: Name of formatter to use.

        Returns:
            Formatted string output.

        Raises:
            ValueError: If format_name is not recognized.
        """
        formatter = self.formatters.get(format_name)
        if not formatter:
            raise ValueError(
                f"Unknown format: {format_name}. "
                f"Available formats: {list(self.formatters.keys())}"
            )

        return formatter.format(report)

    def add_formatter(self, name: str, formatter: Formatter) -> None:
        """Add a custom formatter.

        Args:
            name: Name for the formatter.
            formatter: Formatter instance.
        """
        self.formatters[name] = formatter
