"""
Health Calculator for computing the dependency health score.

The score starts at 100 and every vulnerability and outdated dependency
takes an independent penalty off it. Penalties are summed, so the result
does not depend on the order of the inputs.
"""

import math
from typing import Iterable, Optional

from pkghealth.core.models import BumpType, HealthGrade, OutdatedEntry, Severity, Vulnerability
from pkghealth.core.versions import distance


class HealthCalculator:
    """Calculate a bounded health score from vulnerabilities and staleness.

    Penalty tables can be overridden per instance, the same way scoring
    weights are customised.
    """

    MAX_SCORE = 100
    MIN_SCORE = 0

    # Per-vulnerability deductions
    SEVERITY_PENALTIES = {
        Severity.CRITICAL: 15,
        Severity.HIGH: 10,
        Severity.MODERATE: 5,
        Severity.LOW: 2,
        Severity.UNKNOWN: 0,
    }

    # Deduction per version behind, at the tier the bump type names
    BUMP_PENALTIES = {
        BumpType.MAJOR: 5,
        BumpType.MINOR: 2,
        BumpType.PATCH: 1,
    }

    def __init__(
        self,
        severity_penalties: Optional[dict[Severity, float]] = None,
        bump_penalties: Optional[dict[BumpType, float]] = None,
    ):
        """Initialize the calculator with optional penalty overrides.

        Args:
            severity_penalties: Overrides for per-severity deductions.
            bump_penalties: Overrides for per-version-behind deductions.
        """
        self.severity_penalties = {**self.SEVERITY_PENALTIES}
        if severity_penalties:
            self.severity_penalties.update(severity_penalties)

        self.bump_penalties = {**self.BUMP_PENALTIES}
        if bump_penalties:
            self.bump_penalties.update(bump_penalties)

    def calculate(
        self,
        vulnerabilities: Iterable[Vulnerability],
        outdated: Iterable[OutdatedEntry],
    ) -> int:
        """Calculate the health score.

        Args:
            vulnerabilities: Normalized vulnerabilities.
            outdated: Outdated dependency entries.

        Returns:
            Integer score in [0, 100].
        """
        score = float(self.MAX_SCORE)
        score -= self.vulnerability_penalty(vulnerabilities)
        score -= self.outdated_penalty(outdated)

        # Halves round up
        return math.floor(max(self.MIN_SCORE, min(self.MAX_SCORE, score)) + 0.5)

    def vulnerability_penalty(self, vulnerabilities: Iterable[Vulnerability]) -> float:
        """Total deduction for a list of vulnerabilities."""
        return sum(self.severity_penalties.get(v.severity, 0) for v in vulnerabilities)

    def outdated_penalty(self, outdated: Iterable[OutdatedEntry]) -> float:
        """Total deduction for a list of outdated entries."""
        return sum(self.penalty_for(entry) for entry in outdated)

    def penalty_for(self, entry: OutdatedEntry) -> float:
        """Deduction for a single outdated entry.

        Only the versions behind at the entry's own tier count: a major
        bump is charged per major version, never for its minor or patch
        deltas.
        """
        gap = distance(entry.current, entry.latest)
        behind = {
            BumpType.MAJOR: gap.major_behind,
            BumpType.MINOR: gap.minor_behind,
            BumpType.PATCH: gap.patch_behind,
        }[entry.bump_type]
        return self.bump_penalties.get(entry.bump_type, 0) * behind

    @staticmethod
    def score_to_grade(score: float) -> HealthGrade:
        """Convert a numeric score to a letter grade."""
        if score >= 90:
            return HealthGrade.A
        elif score >= 80:
            return HealthGrade.B
        elif score >= 70:
            return HealthGrade.C
        elif score >= 60:
            return HealthGrade.D
        else:
            return HealthGrade.F
