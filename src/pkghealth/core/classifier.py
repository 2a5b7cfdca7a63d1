"""
Outdated dependency classification.

Compares the concrete version each declared range names against the
registry's ``latest`` dist-tag and classifies the gap as a major, minor
or patch bump.
"""

import logging
from typing import Mapping, Optional

from pkghealth.core.models import Manifest, OutdatedEntry, PackageMetadata
from pkghealth.core.versions import (
    classify_bump,
    extract_concrete_version,
    is_newer,
    parse_version,
    valid_version,
)

logger = logging.getLogger(__name__)


class OutdatedClassifier:
    """Find dependencies that lag the registry's latest release.

    The current version of a dependency is the exact version its declared
    range reduces to (``^1.2.3`` is ``1.2.3``). Ranges that do not reduce
    to one version, packages without registry data and packages already at
    or ahead of latest are left out; none of these are errors.
    """

    def classify(
        self,
        manifest: Manifest,
        metadata: Mapping[str, Optional[PackageMetadata]],
    ) -> list[OutdatedEntry]:
        """Classify every dependency in the manifest.

        Args:
            manifest: The declared dependencies.
            metadata: Registry metadata keyed by package name. Missing keys
                and None values both mean "no data".

        Returns:
            Outdated entries in manifest order.
        """
        outdated = []
        for name in manifest.package_names:
            entry = self.classify_package(name, manifest.range_for(name), metadata.get(name))
            if entry is not None:
                outdated.append(entry)
        return outdated

    def classify_package(
        self,
        name: str,
        version_range: str | None,
        metadata: Optional[PackageMetadata],
    ) -> OutdatedEntry | None:
        """Classify a single dependency, or return None if it is not outdated."""
        if metadata is None or not metadata.latest_version:
            logger.debug("No registry data for %s, skipping", name)
            return None

        current = extract_concrete_version(version_range)
        if current is None:
            logger.debug("Range %r for %s does not name one version, skipping", version_range, name)
            return None

        latest = metadata.latest_version
        if not is_newer(latest, current):
            return None

        bump_type = classify_bump(current, latest)
        if bump_type is None:
            logger.debug("Cannot classify %s: current=%s latest=%s", name, current, latest)
            return None

        return OutdatedEntry(
            package=name,
            current=current,
            latest=valid_version(latest),
            bump_type=bump_type,
        )

    @staticmethod
    def sort_by_priority(entries: list[OutdatedEntry]) -> list[OutdatedEntry]:
        """Order entries by bump size (major first), then by current version.

        Returns a new list; the input is left untouched.
        """
        return sorted(
            entries,
            key=lambda e: (e.bump_type.sort_order, parse_version(e.current), e.package),
        )
