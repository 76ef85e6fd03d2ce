#!/usr/bin/env python3
"""
KUBEMANIFEST ERRORS
-------------------
Exception hierarchy for decode-time and load-time failures.

Policy outcomes (excluded by profile, disabled capability, ...) are NOT
errors; they live in kubemanifest.rules.inclusion as ExclusionReason data.

Author: KubeManifest Team
Date: 2026-10-18
"""

from typing import List, Optional, Sequence

from kubemanifest.core.models import ResourceId


class ManifestError(Exception):
    """Base class for every failure raised by KubeManifest."""


class MalformedDocumentError(ManifestError):
    """
    The document bytes are not well-formed YAML (or cannot be expressed
    as canonical JSON). Carries the document position when known.
    """

    def __init__(self, problem: str, index: Optional[int] = None, source: Optional[str] = None):
        self.problem = problem
        self.index = index
        self.source = source
        where = []
        if source:
            where.append(source)
        if index is not None:
            where.append(f"document {index}")
        prefix = f"{' '.join(where)}: " if where else ""
        super().__init__(f"{prefix}malformed document: {problem}")


class MissingRequiredFieldError(ManifestError):
    """The document lacks kind or metadata.name."""

    def __init__(self, identity: ResourceId):
        self.identity = identity
        super().__init__(
            f"Resource with fields {identity} must contain kubernetes required fields kind and name"
        )


class DuplicateResourceError(ManifestError):
    """A resource identity was seen more than once."""

    def __init__(self, identity: ResourceId):
        self.identity = identity
        super().__init__(f"duplicate resource: ({identity})")


class SourceError(ManifestError):
    """Wraps a failure with the source (file) that produced it."""

    def __init__(self, action: str, source: str, cause: Exception):
        self.action = action
        self.source = source
        self.cause = cause
        super().__init__(f"error {action} {source}: {cause}")


class ManifestLoadError(ManifestError):
    """
    Aggregate of every error collected during a multi-source load,
    in encounter order.
    """

    def __init__(self, errors: Sequence[Exception]):
        self.errors: List[Exception] = list(errors)
        if len(self.errors) == 1:
            aggregated = str(self.errors[0])
        else:
            aggregated = "[" + ", ".join(str(e) for e in self.errors) + "]"
        super().__init__(f"error loading manifests: {aggregated}")

    @property
    def duplicates(self) -> List[ResourceId]:
        """Every duplicate identity reported, including ones inside a failed source."""
        found = []
        for err in self.errors:
            if isinstance(err, SourceError):
                err = err.cause
            if isinstance(err, DuplicateResourceError):
                found.append(err.identity)
        return found
