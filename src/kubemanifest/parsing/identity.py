#!/usr/bin/env python3
"""
KUBEMANIFEST IDENTITY - Resource Identity Resolver (Phase 2)
------------------------------------------------------------
Mines the identity (group, kind, namespace, name) and the type descriptor
of a decoded document. Any well-formed tree is accepted; trees without
kind or metadata.name are rejected.

Author: KubeManifest Team
Date: 2026-10-18
"""

from typing import Any, Tuple

from kubemanifest.core.errors import MalformedDocumentError, MissingRequiredFieldError
from kubemanifest.core.models import GroupVersionKind, ResourceId
from kubemanifest.parsing.values import lookup, lookup_str


def parse_group_version(api_version: str) -> Tuple[str, str]:
    """
    Splits apiVersion into (group, version).
    "apps/v1" -> ("apps", "v1"), "v1" -> ("", "v1"), "" -> ("", "").
    """
    if not api_version or api_version == "/":
        return "", ""
    parts = api_version.split("/")
    if len(parts) == 1:
        return "", parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    raise MalformedDocumentError(f"unexpected GroupVersion string: {api_version}")


def resolve_identity(obj: Any) -> Tuple[ResourceId, GroupVersionKind]:
    """
    Provides the resource identity and type descriptor of a decoded document.
    Raises MissingRequiredFieldError when kind or metadata.name is empty.
    """
    api_version = lookup(obj, "apiVersion")
    # Unquoted numeric apiVersions still carry a version
    if isinstance(api_version, (int, float)) and not isinstance(api_version, bool):
        api_version = str(api_version)
    group, version = parse_group_version(api_version if isinstance(api_version, str) else "")

    kind = lookup_str(obj, "kind")
    identity = ResourceId(
        group=group,
        kind=kind,
        namespace=lookup_str(obj, "metadata", "namespace"),
        name=lookup_str(obj, "metadata", "name"),
    )
    if not identity.kind or not identity.name:
        raise MissingRequiredFieldError(identity)

    return identity, GroupVersionKind(group=group, version=version, kind=kind)
