"""
Pytest fixtures and configuration for pkghealth tests.

Provides mock API responses, a fake HTTP session and test data for unit
testing. No test talks to the network.
"""

import asyncio
import json
from pathlib import Path
from typing import Any
from urllib.parse import quote

import pytest

from pkghealth.config import DEFAULT_NPMS_URL, DEFAULT_REGISTRY_URL
from pkghealth.core.models import (
    BumpType,
    Manifest,
    OutdatedEntry,
    PackageMetadata,
    QualitySignal,
    Severity,
    Vulnerability,
)

# =============================================================================
# Fake HTTP session
# =============================================================================


class FakeResponse:
    """Stands in for an aiohttp response inside ``async with session.get(...)``."""

    def __init__(self, status: int = 200, payload: Any = None, headers: dict | None = None):
        self.status = status
        self.payload = payload
        self.headers = headers or {}

    async def json(self, content_type: str | None = None) -> Any:
        if isinstance(self.payload, (bytes, str)):
            return json.loads(self.payload)
        return self.payload


class _FakeRequest:
    def __init__(self, route: Any):
        self.route = route

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self.route, BaseException):
            raise self.route
        if isinstance(self.route, FakeResponse):
            return self.route
        return FakeResponse(200, self.route)

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False


class FakeSession:
    """Routes GET requests to canned payloads.

    A route value is a payload (served with status 200), a FakeResponse,
    or an exception instance to raise. Unknown URLs get a 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes = routes or {}
        self.requested: list[str] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> _FakeRequest:
        self.requested.append(url)
        return _FakeRequest(self.routes.get(url, FakeResponse(404)))

    async def close(self) -> None:
        self.closed = True


def registry_url(name: str) -> str:
    return f"{DEFAULT_REGISTRY_URL}/{quote(name, safe='@')}"


def npms_url(name: str) -> str:
    return f"{DEFAULT_NPMS_URL}/package/{quote(name, safe='')}"


def registry_doc(latest: str, deprecated: dict[str, str] | None = None) -> dict:
    """Build a minimal registry document."""
    versions = {latest: {}}
    for version, message in (deprecated or {}).items():
        versions[version] = {"deprecated": message}
    return {"dist-tags": {"latest": latest}, "versions": versions}


def npms_doc(
    quality: float = 0.9,
    maintenance: float = 0.9,
    has_vulnerabilities: bool = False,
) -> dict:
    """Build a minimal npms.io package document."""
    doc = {"score": {"detail": {"quality": quality, "maintenance": maintenance}}}
    if has_vulnerabilities:
        doc["collected"] = {"metadata": {"hasVulnerabilities": True}}
    return doc


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def sample_manifest_data() -> dict:
    """A package.json-style mapping."""
    return {
        "name": "demo-app",
        "version": "1.0.0",
        "dependencies": {
            "express": "^4.17.1",
            "lodash": "4.17.20",
            "left-pad": "^1.3.0",
        },
        "devDependencies": {
            "jest": "~27.0.0",
            "typescript": ">=4.0.0 <5.0.0",
        },
    }


@pytest.fixture
def sample_manifest(sample_manifest_data: dict) -> Manifest:
    """The sample mapping as a Manifest."""
    return Manifest.from_dict(sample_manifest_data)


@pytest.fixture
def sample_registry_routes() -> dict[str, Any]:
    """Registry and npms.io responses for every sample package."""
    return {
        registry_url("express"): registry_doc("4.18.2"),
        registry_url("lodash"): registry_doc(
            "4.17.21", deprecated={"4.17.20": "Prototype pollution, upgrade to 4.17.21"}
        ),
        registry_url("left-pad"): registry_doc("1.3.0"),
        registry_url("jest"): registry_doc("29.7.0"),
        registry_url("typescript"): registry_doc("5.3.3"),
        npms_url("express"): npms_doc(),
        npms_url("lodash"): npms_doc(),
        npms_url("left-pad"): npms_doc(quality=0.2, maintenance=0.1, has_vulnerabilities=True),
        npms_url("jest"): npms_doc(),
        npms_url("typescript"): npms_doc(),
    }


@pytest.fixture
def fake_session(sample_registry_routes: dict[str, Any]) -> FakeSession:
    """A fake session answering for the sample manifest."""
    return FakeSession(dict(sample_registry_routes))


@pytest.fixture
def timeout_session(sample_registry_routes: dict[str, Any]) -> FakeSession:
    """Like ``fake_session`` but every left-pad request times out."""
    routes = dict(sample_registry_routes)
    routes[registry_url("left-pad")] = asyncio.TimeoutError()
    routes[npms_url("left-pad")] = asyncio.TimeoutError()
    return FakeSession(routes)


@pytest.fixture
def sample_audit_report() -> dict[str, Any]:
    """An ``npm audit --json`` style document."""
    return {
        "auditReportVersion": 2,
        "vulnerabilities": {
            "express": {
                "name": "express",
                "severity": "high",
                "via": [
                    {
                        "source": 1096820,
                        "title": "Open redirect in express",
                        "severity": "moderate",
                        "range": "<4.19.2",
                    },
                    "body-parser",
                ],
                "fixAvailable": {"name": "express", "version": "4.19.2"},
            },
            "left-pad": {
                "name": "left-pad",
                "severity": "critical",
                "via": [{"source": 1, "title": "Critical issue", "severity": "critical"}],
                "fixAvailable": True,
            },
        },
    }


@pytest.fixture
def sample_metadata() -> dict[str, PackageMetadata]:
    """Registry metadata for a few packages, keyed by name."""
    return {
        "express": PackageMetadata.from_registry("express", registry_doc("4.18.2")),
        "lodash": PackageMetadata.from_registry(
            "lodash", registry_doc("4.17.21", deprecated={"4.17.20": "Upgrade"})
        ),
    }


@pytest.fixture
def sample_quality() -> QualitySignal:
    """A healthy npms.io signal."""
    return QualitySignal(name="express", quality=0.9, maintenance=0.8)


@pytest.fixture
def sample_vulnerability() -> Vulnerability:
    """Create a sample vulnerability."""
    return Vulnerability(
        id="1096820",
        package="express",
        affected_versions="<4.19.2",
        severity=Severity.MODERATE,
        description="Open redirect in express",
        fixed_in="4.19.2",
    )


@pytest.fixture
def sample_outdated() -> OutdatedEntry:
    """Create a sample outdated entry."""
    return OutdatedEntry(
        package="lodash",
        current="4.17.20",
        latest="4.17.21",
        bump_type=BumpType.PATCH,
    )


@pytest.fixture
def tmp_package_json(tmp_path: Path, sample_manifest_data: dict) -> Path:
    """Write the sample manifest to a package.json file."""
    path = tmp_path / "package.json"
    path.write_text(json.dumps(sample_manifest_data))
    return path
