#!/usr/bin/env python3
"""
KUBEMANIFEST INCLUSION POLICY - The Gatekeeper
----------------------------------------------
Decides whether a manifest applies to a target cluster, based on its
release annotations and the caller's policy inputs:

    exclude_identifier    exclude.release.openshift.io/<id>=true drops the manifest
    profile               include.release.openshift.io/<profile>=true is required
    include_tech_preview  gates release.openshift.io/feature-gate=TechPreviewNoUpgrade
    capabilities          required capabilities must be enabled when known

Every input is optional; None means "this check was not requested".
Rules run in a fixed order and the first exclusion wins. Exclusions are
returned as ExclusionReason values, they are not raised.

Author: KubeManifest Team
Date: 2026-10-18
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from kubemanifest.core.models import CapabilityStatus, Manifest
from kubemanifest.rules.capabilities import get_manifest_capabilities

logger = logging.getLogger("kubemanifest.inclusion")

EXCLUDE_ANNOTATION_PREFIX = "exclude.release.openshift.io/"
INCLUDE_ANNOTATION_PREFIX = "include.release.openshift.io/"
FEATURE_GATE_ANNOTATION = "release.openshift.io/feature-gate"
TECH_PREVIEW_NO_UPGRADE = "TechPreviewNoUpgrade"


# ---------------------------------------------------------------------------
# Exclusion reasons
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExclusionReason:
    """Base for every policy outcome that drops a manifest."""

    @property
    def message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class NoAnnotations(ExclusionReason):
    @property
    def message(self) -> str:
        return "no annotations"


@dataclass(frozen=True)
class ExplicitlyExcluded(ExclusionReason):
    identifier: str

    @property
    def annotation(self) -> str:
        return EXCLUDE_ANNOTATION_PREFIX + self.identifier

    @property
    def message(self) -> str:
        return f"{self.annotation}=true"


@dataclass(frozen=True)
class ProfileNotIncluded(ExclusionReason):
    profile: str
    value: Optional[str] = None     # None when the include annotation is unset

    @property
    def annotation(self) -> str:
        return INCLUDE_ANNOTATION_PREFIX + self.profile

    @property
    def message(self) -> str:
        if self.value is None:
            return f"{self.annotation} unset"
        return f"unrecognized value {self.annotation}={self.value}"


@dataclass(frozen=True)
class TechPreviewMismatch(ExclusionReason):
    value: str = TECH_PREVIEW_NO_UPGRADE

    @property
    def message(self) -> str:
        return f"tech-preview excluded, and {FEATURE_GATE_ANNOTATION}={self.value}"


@dataclass(frozen=True)
class UnrecognizedFeatureGate(ExclusionReason):
    value: str

    @property
    def message(self) -> str:
        return f"unrecognized value {FEATURE_GATE_ANNOTATION}={self.value}"


@dataclass(frozen=True)
class DisabledCapabilities(ExclusionReason):
    capabilities: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return f"disabled capabilities: {', '.join(self.capabilities)}"


# ---------------------------------------------------------------------------
# Policy engine
# ---------------------------------------------------------------------------

Rule = Callable[[Manifest, Dict[str, str]], Optional[ExclusionReason]]


@dataclass
class InclusionPolicy:
    """
    The policy inputs for one target cluster, plus the ordered rule
    registry evaluated against every manifest.
    """
    exclude_identifier: Optional[str] = None
    include_tech_preview: Optional[bool] = None
    profile: Optional[str] = None
    capabilities: Optional[CapabilityStatus] = None
    active_rules: List[Rule] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Order matters: explicit exclusion dominates every other rule
        self.active_rules = [
            self._rule_explicit_exclusion,
            self._rule_profile_inclusion,
            self._rule_tech_preview,
            self._rule_capabilities,
        ]

    def evaluate(self, manifest: Manifest) -> Optional[ExclusionReason]:
        """
        Runs the manifest through the rules.
        Returns None when included, otherwise the first ExclusionReason hit.
        """
        annotations = manifest.annotations
        if annotations is None:
            return NoAnnotations()

        for rule in self.active_rules:
            reason = rule(manifest, annotations)
            if reason is not None:
                logger.debug("Excluding %s: %s", manifest.identity, reason)
                return reason
        return None

    def includes(self, manifest: Manifest) -> bool:
        return self.evaluate(manifest) is None

    def filter(self, manifests: List[Manifest]) -> Tuple[List[Manifest], List[Tuple[Manifest, ExclusionReason]]]:
        """Splits manifests into (included, [(excluded, reason), ...]), order preserved."""
        included, excluded = [], []
        for manifest in manifests:
            reason = self.evaluate(manifest)
            if reason is None:
                included.append(manifest)
            else:
                excluded.append((manifest, reason))
        return included, excluded

    def _rule_explicit_exclusion(self, manifest: Manifest, annotations: Dict[str, str]) -> Optional[ExclusionReason]:
        if self.exclude_identifier is None:
            return None
        if annotations.get(EXCLUDE_ANNOTATION_PREFIX + self.exclude_identifier) == "true":
            return ExplicitlyExcluded(self.exclude_identifier)
        return None

    def _rule_profile_inclusion(self, manifest: Manifest, annotations: Dict[str, str]) -> Optional[ExclusionReason]:
        if self.profile is None:
            return None
        key = INCLUDE_ANNOTATION_PREFIX + self.profile
        if key not in annotations:
            return ProfileNotIncluded(self.profile)
        if annotations[key] != "true":
            return ProfileNotIncluded(self.profile, annotations[key])
        return None

    def _rule_tech_preview(self, manifest: Manifest, annotations: Dict[str, str]) -> Optional[ExclusionReason]:
        if self.include_tech_preview is None or FEATURE_GATE_ANNOTATION not in annotations:
            return None
        value = annotations[FEATURE_GATE_ANNOTATION]
        if value != TECH_PREVIEW_NO_UPGRADE:
            return UnrecognizedFeatureGate(value)
        if not self.include_tech_preview:
            return TechPreviewMismatch(value)
        return None

    def _rule_capabilities(self, manifest: Manifest, annotations: Dict[str, str]) -> Optional[ExclusionReason]:
        if self.capabilities is None:
            return None
        # Capabilities the caller does not know about are ignored
        disabled = tuple(
            cap for cap in get_manifest_capabilities(manifest)
            if cap in self.capabilities.known_capabilities
            and cap not in self.capabilities.enabled_capabilities
        )
        if disabled:
            return DisabledCapabilities(disabled)
        return None
