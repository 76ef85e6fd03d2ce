#!/usr/bin/env python3
"""
KUBEMANIFEST CAPABILITIES
-------------------------
Reads the capabilities a manifest requires from its capability annotation.
The value is a `+`-delimited list, e.g. "Console+Insights".

Author: KubeManifest Team
Date: 2026-10-18
"""

from typing import List

CAPABILITY_ANNOTATION = "capability.release.openshift.io/name"
CAPABILITY_DELIMITER = "+"


def get_manifest_capabilities(manifest) -> List[str]:
    """
    Returns required capability names in annotation order.
    Duplicates are kept; an absent or empty annotation yields [].
    """
    annotations = manifest.annotations or {}
    value = annotations.get(CAPABILITY_ANNOTATION, "")
    if not value:
        return []
    return value.split(CAPABILITY_DELIMITER)
