"""
Tests for outdated dependency classification.
"""

import pytest

from pkghealth.core.classifier import OutdatedClassifier
from pkghealth.core.models import BumpType, Manifest, OutdatedEntry, PackageMetadata


def meta(name: str, latest: str | None) -> PackageMetadata:
    return PackageMetadata(name=name, latest_version=latest)


class TestOutdatedClassifier:
    """Tests for OutdatedClassifier."""

    @pytest.fixture
    def classifier(self):
        return OutdatedClassifier()

    def test_bump_scenarios(self, classifier):
        """Test one major, one minor and one patch lag."""
        manifest = Manifest(dependencies={"a": "^1.0.0", "b": "~1.0.0", "c": "1.0.0"})
        metadata = {"a": meta("a", "2.0.0"), "b": meta("b", "1.1.0"), "c": meta("c", "1.0.1")}

        result = classifier.classify(manifest, metadata)

        assert result == [
            OutdatedEntry("a", "1.0.0", "2.0.0", BumpType.MAJOR),
            OutdatedEntry("b", "1.0.0", "1.1.0", BumpType.MINOR),
            OutdatedEntry("c", "1.0.0", "1.0.1", BumpType.PATCH),
        ]

    def test_compound_range_never_outdated(self, classifier):
        """Test that a range without one concrete version is skipped."""
        manifest = Manifest(dependencies={"ts": ">=1.0.0 <2.0.0"})
        assert classifier.classify(manifest, {"ts": meta("ts", "9.0.0")}) == []

    @pytest.mark.parametrize("version_range", ["1.x", "latest", "*", "git+https://x/y.git"])
    def test_unresolvable_ranges(self, classifier, version_range):
        manifest = Manifest(dependencies={"p": version_range})
        assert classifier.classify(manifest, {"p": meta("p", "9.0.0")}) == []

    def test_up_to_date_and_ahead(self, classifier):
        """Test that packages at or ahead of latest are left out."""
        manifest = Manifest(dependencies={"same": "^2.0.0", "ahead": "3.0.0-beta.1"})
        metadata = {"same": meta("same", "2.0.0"), "ahead": meta("ahead", "2.9.0")}
        assert classifier.classify(manifest, metadata) == []

    def test_missing_metadata(self, classifier):
        """Test that packages without registry data are skipped."""
        manifest = Manifest(dependencies={"gone": "^1.0.0", "nolatest": "^1.0.0"})
        metadata = {"gone": None, "nolatest": meta("nolatest", None)}
        assert classifier.classify(manifest, metadata) == []

    def test_malformed_latest(self, classifier):
        """Test that an unparsable latest version is skipped."""
        manifest = Manifest(dependencies={"p": "^1.0.0"})
        assert classifier.classify(manifest, {"p": meta("p", "banana")}) == []

    def test_prerelease_current(self, classifier):
        """Test that a pre-release of the latest triple is a patch lag."""
        manifest = Manifest(dependencies={"p": "1.2.3-rc.1"})
        result = classifier.classify(manifest, {"p": meta("p", "1.2.3")})
        assert result == [OutdatedEntry("p", "1.2.3-rc.1", "1.2.3", BumpType.PATCH)]

    def test_manifest_order_and_dev_dependencies(self, classifier):
        """Test that entries follow manifest order across both sections."""
        manifest = Manifest(
            dependencies={"z": "1.0.0"},
            dev_dependencies={"a": "1.0.0", "z": "0.1.0"},
        )
        metadata = {"z": meta("z", "1.1.0"), "a": meta("a", "2.0.0")}

        result = classifier.classify(manifest, metadata)

        assert [e.package for e in result] == ["z", "a"]
        # devDependencies wins over dependencies for the same name
        assert result[0].current == "0.1.0"
        assert result[0].bump_type == BumpType.MAJOR

    def test_dev_range_decides_duplicate_name(self, classifier):
        """Test that an up-to-date devDependencies range hides an older dependencies one."""
        manifest = Manifest(dependencies={"p": "1.0.0"}, dev_dependencies={"p": "2.0.0"})
        assert classifier.classify(manifest, {"p": meta("p", "2.0.0")}) == []


class TestSortByPriority:
    """Tests for priority ordering."""

    def test_major_first_then_current(self):
        entries = [
            OutdatedEntry("patchy", "1.0.0", "1.0.1", BumpType.PATCH),
            OutdatedEntry("minor", "2.0.0", "2.1.0", BumpType.MINOR),
            OutdatedEntry("big2", "3.0.0", "5.0.0", BumpType.MAJOR),
            OutdatedEntry("big1", "1.0.0", "5.0.0", BumpType.MAJOR),
        ]

        result = OutdatedClassifier.sort_by_priority(entries)

        assert [e.package for e in result] == ["big1", "big2", "minor", "patchy"]
        # Input untouched
        assert entries[0].package == "patchy"
