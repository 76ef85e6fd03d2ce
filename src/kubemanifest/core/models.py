#!/usr/bin/env python3
"""
KUBEMANIFEST CORE MODELS
------------------------
Defines the fundamental data structures used across the KubeManifest engine.
A Manifest is the atomic unit handed back to callers: one decoded YAML
document, its canonical JSON bytes and the identity used for de-duplication.

Author: KubeManifest Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional


@dataclass(frozen=True)
class ResourceId:
    """
    The (group, kind, namespace, name) tuple that uniquely addresses a resource.

    An empty group is the core API group, not a wildcard.
    """
    group: str = ""
    kind: str = ""
    namespace: str = ""       # Empty for cluster-scoped resources
    name: str = ""

    def __str__(self) -> str:
        return (f'Group: "{self.group}" Kind: "{self.kind}" '
                f'Namespace: "{self.namespace}" Name: "{self.name}"')


@dataclass(frozen=True)
class GroupVersionKind:
    """Type descriptor split out of apiVersion + kind."""
    group: str = ""
    version: str = ""
    kind: str = ""

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


@dataclass(frozen=True)
class CapabilityStatus:
    """
    Cluster capability state supplied by the policy caller.

    known_capabilities:   every capability name the caller recognizes
    enabled_capabilities: the subset currently switched on
    """
    known_capabilities: FrozenSet[str] = field(default_factory=frozenset)
    enabled_capabilities: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable (lists from CLI flags, sets from callers)
        object.__setattr__(self, "known_capabilities", frozenset(self.known_capabilities))
        object.__setattr__(self, "enabled_capabilities", frozenset(self.enabled_capabilities))

    @classmethod
    def of(cls, known: Iterable[str] = (), enabled: Iterable[str] = ()) -> "CapabilityStatus":
        return cls(frozenset(known), frozenset(enabled))


@dataclass
class Manifest:
    """
    A single decoded Kubernetes resource.

    identity:          ResourceId used as the de-duplication key
    raw:               canonical JSON bytes (sorted keys, compact separators)
    gvk:               GroupVersionKind parsed from apiVersion/kind
    obj:               generic tree (dict/list/scalars) mirroring the document
    original_filename: base name of the source file, set by the file loader
    """
    identity: ResourceId
    raw: bytes = b""
    gvk: GroupVersionKind = field(default_factory=GroupVersionKind)
    obj: Optional[Dict[str, Any]] = None
    original_filename: Optional[str] = None

    def same_resource_id(self, other: "Manifest") -> bool:
        return self.identity == other.identity

    @property
    def annotations(self) -> Optional[Dict[str, str]]:
        """
        Returns metadata.annotations as a string map, or None when the
        document has no usable annotation mapping.

        A mapping holding any non-string value is treated as unusable,
        matching how the Kubernetes API machinery reads annotations.
        """
        from kubemanifest.parsing.values import MISSING, lookup

        value = lookup(self.obj, "metadata", "annotations")
        if value is MISSING or not isinstance(value, dict):
            return None
        if not all(isinstance(v, str) for v in value.values()):
            return None
        return dict(value)

    def capabilities(self) -> List[str]:
        from kubemanifest.rules.capabilities import get_manifest_capabilities
        return get_manifest_capabilities(self)

    def include(self, exclude_identifier: Optional[str] = None,
                include_tech_preview: Optional[bool] = None,
                profile: Optional[str] = None,
                capabilities: Optional[CapabilityStatus] = None):
        """
        Evaluates the inclusion policy for this manifest.
        Returns None when included, otherwise the ExclusionReason.
        """
        from kubemanifest.rules.inclusion import InclusionPolicy

        policy = InclusionPolicy(
            exclude_identifier=exclude_identifier,
            include_tech_preview=include_tech_preview,
            profile=profile,
            capabilities=capabilities,
        )
        return policy.evaluate(self)

    def __str__(self) -> str:
        source = f" ({self.original_filename})" if self.original_filename else ""
        return f"{self.gvk.api_version}, {self.identity}{source}"
