"""
Input validation utilities for pkghealth.

Provides validation for npm package names, response sizes and declared
version ranges. Package names are checked before they are interpolated
into registry URLs.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import quote

from pkghealth.core.exceptions import ValidationError
from pkghealth.core.models import Manifest
from pkghealth.core.ranges import valid_range

# npm package names: optional @scope/, URL-safe characters, no leading dot or underscore.
# Legacy packages may contain capital letters, so matching is case-insensitive.
_PACKAGE_NAME_PATTERN = re.compile(
    r"^(?:@[a-z0-9~-][a-z0-9._~-]*/)?[a-z0-9~-][a-z0-9._~-]*$",
    re.IGNORECASE,
)

# npm's registry limit
MAX_PACKAGE_NAME_LENGTH = 214

# Maximum response size (10 MB). Registry documents for very old, very
# active packages are large but stay well under this.
MAX_RESPONSE_SIZE = 10 * 1024 * 1024


@dataclass
class ValidationResult:
    """Outcome of validating a manifest's declared ranges."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors)}


def validate_package_name(name: str) -> str:
    """Validate an npm package name.

    Args:
        name: Package name to validate.

    Returns:
        The name, unchanged.

    Raises:
        ValidationError: If the package name is invalid.
    """
    if not name:
        raise ValidationError("package_name", name or "", "Package name cannot be empty")

    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        raise ValidationError(
            "package_name",
            name[:50] + "...",
            f"Package name exceeds {MAX_PACKAGE_NAME_LENGTH} character limit",
        )

    # Check for null bytes or control characters
    if any(ord(c) < 32 or ord(c) == 127 for c in name):
        raise ValidationError(
            "package_name", repr(name), "Package name contains invalid control characters"
        )

    if not _PACKAGE_NAME_PATTERN.match(name):
        raise ValidationError(
            "package_name",
            name,
            "Package name must be URL-safe, may not start with '.' or '_', "
            "and may only carry a single '@scope/' prefix",
        )

    return name


def encode_package_name_for_url(name: str) -> str:
    """URL-encode a package name for registry paths.

    The scope marker is kept and the scope separator is encoded, which is
    the form the npm registry expects (``@types%2Fnode``).
    """
    return quote(name, safe="@")


def validate_response_size(
    content_length: int | None,
    max_size: int = MAX_RESPONSE_SIZE,
) -> None:
    """Validate that a response size is within acceptable limits.

    Args:
        content_length: The Content-Length header value (may be None).
        max_size: Maximum allowed response size in bytes.

    Raises:
        ValidationError: If the response is too large.
    """
    if content_length is not None and content_length > max_size:
        size_mb = content_length / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            "response_size",
            f"{size_mb:.1f} MB",
            f"Response exceeds maximum size of {max_mb:.0f} MB",
        )


def validate_manifest_ranges(manifest: Manifest) -> ValidationResult:
    """Check every declared range in both dependency sections."""
    errors = []
    sections = (manifest.dependencies, manifest.dev_dependencies)
    for section in sections:
        for name, version_range in section.items():
            if not valid_range(version_range):
                errors.append(f"Invalid version range for {name}: {version_range}")

    return ValidationResult(valid=not errors, errors=errors)
