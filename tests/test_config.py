"""
Tests for settings and input validation.
"""

from pathlib import Path

import pytest

from pkghealth import __version__
from pkghealth.config import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT, Settings
from pkghealth.core.exceptions import ValidationError
from pkghealth.core.models import Manifest
from pkghealth.core.validation import (
    encode_package_name_for_url,
    validate_manifest_ranges,
    validate_package_name,
    validate_response_size,
)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.registry_url == DEFAULT_REGISTRY_URL
        assert settings.timeout == DEFAULT_TIMEOUT == 5.0
        assert settings.user_agent == f"pkghealth/{__version__}"
        assert settings.audit_project_dir is None

    def test_from_env(self):
        settings = Settings.from_env({
            "PKGHEALTH_REGISTRY_URL": "https://npm.example.com/",
            "PKGHEALTH_NPMS_URL": "https://npms.example.com/v2",
            "PKGHEALTH_TIMEOUT": "2.5",
            "PKGHEALTH_AUDIT_DIR": "/srv/app",
            "PKGHEALTH_LOG_LEVEL": "debug",
        })
        assert settings.registry_url == "https://npm.example.com"
        assert settings.npms_url == "https://npms.example.com/v2"
        assert settings.timeout == 2.5
        assert settings.audit_project_dir == Path("/srv/app")
        assert settings.log_level == "DEBUG"

    def test_from_env_empty(self):
        assert Settings.from_env({}) == Settings()

    @pytest.mark.parametrize("raw", ["soon", "0", "-1"])
    def test_bad_timeout(self, raw):
        with pytest.raises(ValidationError):
            Settings.from_env({"PKGHEALTH_TIMEOUT": raw})

    def test_with_overrides_ignores_none(self):
        settings = Settings().with_overrides(timeout=1.0, registry_url=None)
        assert settings.timeout == 1.0
        assert settings.registry_url == DEFAULT_REGISTRY_URL


class TestPackageNameValidation:
    """Tests for npm package name validation."""

    @pytest.mark.parametrize(
        "name",
        ["express", "left-pad", "@types/node", "lodash.merge", "JSONStream", "a" * 214],
    )
    def test_valid(self, name):
        assert validate_package_name(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", ".hidden", "_private", "a" * 215, "bad\x00name", "@scope/", "a/b/c", "sp ace", "@a/@b/c"],
    )
    def test_invalid(self, name):
        with pytest.raises(ValidationError):
            validate_package_name(name)

    def test_url_encoding(self):
        assert encode_package_name_for_url("@types/node") == "@types%2Fnode"
        assert encode_package_name_for_url("express") == "express"


class TestResponseSize:
    """Tests for response size validation."""

    def test_within_limit(self):
        validate_response_size(1024)
        validate_response_size(None)

    def test_too_large(self):
        with pytest.raises(ValidationError, match="exceeds maximum size"):
            validate_response_size(11 * 1024 * 1024)


class TestManifestRanges:
    """Tests for declared range validation."""

    def test_all_valid(self, sample_manifest):
        result = validate_manifest_ranges(sample_manifest)
        assert result.valid
        assert result.errors == []

    def test_invalid_ranges(self):
        manifest = Manifest(
            dependencies={"a": "^1.0.0", "b": "latest"},
            dev_dependencies={"c": "not-a-range"},
        )

        result = validate_manifest_ranges(manifest)

        assert not result.valid
        assert result.to_dict() == {
            "valid": False,
            "errors": [
                "Invalid version range for b: latest",
                "Invalid version range for c: not-a-range",
            ],
        }
