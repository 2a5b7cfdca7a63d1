"""
Data collectors for fetching package data from external sources.

This module provides async clients for the npm registry and npms.io, and
audit sources wrapping ``npm audit``.
"""

from pkghealth.collectors.audit import (
    AuditSource,
    NpmAuditSource,
    StaticAuditSource,
    build_audit_source,
)
from pkghealth.collectors.base import Collector
from pkghealth.collectors.npm import NpmRegistryClient
from pkghealth.collectors.npms import NpmsClient

__all__ = [
    "Collector",
    "NpmRegistryClient",
    "NpmsClient",
    "AuditSource",
    "NpmAuditSource",
    "StaticAuditSource",
    "build_audit_source",
]
