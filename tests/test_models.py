"""
Tests for core data models.
"""

import pytest

from pkghealth.core.exceptions import ManifestError
from pkghealth.core.models import (
    AuditEntry,
    BumpType,
    FetchOutcome,
    Manifest,
    OutdatedEntry,
    PackageMetadata,
    QualitySignal,
    Report,
    Severity,
    Summary,
    Vulnerability,
    parse_audit_report,
)


class TestManifest:
    """Tests for Manifest decoding."""

    def test_from_dict(self, sample_manifest_data):
        manifest = Manifest.from_dict(sample_manifest_data)
        assert manifest.dependencies["express"] == "^4.17.1"
        assert manifest.dev_dependencies["jest"] == "~27.0.0"

    def test_missing_sections(self):
        """Test that absent or null sections are empty."""
        manifest = Manifest.from_dict({"name": "x", "devDependencies": None})
        assert manifest.dependencies == {}
        assert manifest.dev_dependencies == {}

    def test_passthrough(self, sample_manifest):
        assert Manifest.from_dict(sample_manifest) is sample_manifest

    @pytest.mark.parametrize(
        "data",
        [
            ["not", "a", "mapping"],
            "package.json",
            None,
            {"dependencies": ["express"]},
            {"dependencies": {"express": 4}},
            {"devDependencies": {"": "1.0.0"}},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ManifestError):
            Manifest.from_dict(data)

    def test_package_names_dedupe(self):
        """Test that shared names are listed once and resolve to the dev range."""
        manifest = Manifest(dependencies={"b": "1", "a": "1"}, dev_dependencies={"a": "2", "c": "1"})
        assert manifest.package_names == ["b", "a", "c"]
        assert manifest.range_for("a") == "2"
        assert manifest.range_for("c") == "1"
        assert manifest.range_for("missing") is None


class TestFetchOutcome:
    """Tests for FetchOutcome."""

    def test_success(self):
        outcome = FetchOutcome.success("p", 1)
        assert outcome.ok
        assert outcome.value == 1
        assert outcome.error is None

    def test_absent(self):
        outcome = FetchOutcome.absent("p", "timed out")
        assert not outcome.ok
        assert outcome.value is None
        assert outcome.error == "timed out"


class TestPackageMetadata:
    """Tests for registry document decoding."""

    def test_from_registry(self):
        data = {
            "name": "request",
            "dist-tags": {"latest": "2.88.2"},
            "versions": {
                "2.88.0": {"deprecated": "request has been deprecated"},
                "2.88.2": {"deprecated": "request has been deprecated"},
            },
        }
        meta = PackageMetadata.from_registry("request", data)
        assert meta.latest_version == "2.88.2"
        assert meta.is_deprecated
        assert meta.deprecation_for("2.88.0") == "request has been deprecated"
        assert meta.deprecation_for("1.0.0") is None

    @pytest.mark.parametrize(
        "data",
        [None, [], {"dist-tags": "oops"}, {"dist-tags": {"latest": 3}}, {"versions": []}],
    )
    def test_unexpected_shapes(self, data):
        """Test that unexpected shapes degrade instead of raising."""
        meta = PackageMetadata.from_registry("p", data)
        assert meta.latest_version is None
        assert not meta.is_deprecated


class TestQualitySignal:
    """Tests for npms.io document decoding."""

    def test_from_npms(self):
        data = {
            "score": {"final": 0.7, "detail": {"quality": 0.8, "maintenance": 0.33}},
            "collected": {"metadata": {"hasVulnerabilities": True}},
        }
        signal = QualitySignal.from_npms("p", data)
        assert signal.quality == pytest.approx(0.8)
        assert signal.maintenance == pytest.approx(0.33)
        assert signal.has_vulnerabilities

    def test_missing_and_wrong_types(self):
        data = {"score": {"detail": {"quality": "high", "maintenance": True}}}
        signal = QualitySignal.from_npms("p", data)
        assert signal.quality is None
        assert signal.maintenance is None
        assert not signal.has_vulnerabilities


class TestAuditDecoding:
    """Tests for audit payload decoding."""

    def test_parse_full_document(self, sample_audit_report):
        entries = parse_audit_report(sample_audit_report)
        assert set(entries) == {"express", "left-pad"}
        express = entries["express"]
        assert len(express.via) == 1
        assert express.via[0].source == "1096820"
        assert express.fix_version == "4.19.2"
        # fixAvailable: true carries no version
        assert entries["left-pad"].fix_version is None

    def test_parse_bare_mapping(self):
        entries = parse_audit_report({"p": {"via": [{"title": "t"}]}})
        assert entries["p"].via[0].title == "t"

    def test_garbage(self):
        assert parse_audit_report("nope") == {}
        assert AuditEntry.from_dict("p", None).via == ()


class TestSerializedShapes:
    """Tests for to_dict wire shapes."""

    def test_outdated_entry(self, sample_outdated):
        assert sample_outdated.to_dict() == {
            "package": "lodash",
            "current": "4.17.20",
            "latest": "4.17.21",
            "type": "patch",
        }

    def test_vulnerability(self, sample_vulnerability):
        assert sample_vulnerability.to_dict() == {
            "id": "1096820",
            "package": "express",
            "version": "<4.19.2",
            "severity": "moderate",
            "description": "Open redirect in express",
            "fixedIn": "4.19.2",
        }

    def test_summary_compute(self, sample_manifest, sample_vulnerability, sample_outdated):
        summary = Summary.compute(sample_manifest, [sample_outdated], [sample_vulnerability])
        assert summary.to_dict() == {
            "critical": 0,
            "high": 0,
            "moderate": 1,
            "low": 0,
            "unknown": 0,
            "outdated": 1,
            "totalDeps": 3,
            "totalDevDeps": 2,
        }
        assert summary.total_vulnerabilities == 1

    def test_report(self, sample_manifest, sample_vulnerability, sample_outdated):
        report = Report(
            dependencies=sample_manifest.dependencies,
            dev_dependencies=sample_manifest.dev_dependencies,
            outdated=(sample_outdated,),
            vulnerabilities=(sample_vulnerability,),
            summary=Summary.compute(sample_manifest, [sample_outdated], [sample_vulnerability]),
            total_dependencies=5,
            health_score=94,
        )
        data = report.to_dict()
        assert sorted(data) == [
            "dependencies",
            "devDependencies",
            "healthScore",
            "outdated",
            "summary",
            "totalDependencies",
            "vulnerabilities",
        ]
        assert data["healthScore"] == 94
        assert report.vulnerabilities_at_or_above(Severity.HIGH) == []
        assert report.vulnerabilities_at_or_above(Severity.MODERATE) == [sample_vulnerability]


class TestEnums:
    """Tests for enum ordering helpers."""

    def test_severity_order(self):
        ordered = sorted(Severity, key=lambda s: s.sort_order)
        assert ordered[0] == Severity.CRITICAL
        assert ordered[-1] == Severity.UNKNOWN

    def test_bump_order(self):
        assert BumpType.MAJOR.sort_order < BumpType.MINOR.sort_order < BumpType.PATCH.sort_order
        assert str(BumpType.MINOR) == "minor"

    def test_entry_str(self, sample_outdated, sample_vulnerability):
        assert str(sample_outdated) == "lodash: 4.17.20 -> 4.17.21 (patch)"
        assert "express" in str(sample_vulnerability)

    def test_outdated_entry_is_frozen(self, sample_outdated):
        with pytest.raises(AttributeError):
            sample_outdated.latest = "9.9.9"


def test_vulnerability_key():
    vuln = Vulnerability("id", "pkg", "*", Severity.LOW, "d", "latest")
    assert vuln.key == ("pkg", "id")


def test_outdated_entry_equality():
    a = OutdatedEntry("p", "1.0.0", "2.0.0", BumpType.MAJOR)
    b = OutdatedEntry("p", "1.0.0", "2.0.0", BumpType.MAJOR)
    assert a == b
