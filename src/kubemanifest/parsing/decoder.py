#!/usr/bin/env python3
"""
KUBEMANIFEST DECODER - Canonical Round-Trip (Phase 2)
-----------------------------------------------------
Loads one YAML document into a generic tree and exports its canonical
JSON form: keys sorted at every level, compact separators, UTF-8.
The same document always produces byte-identical output, and decoding
the canonical output again reproduces it exactly.

Author: KubeManifest Team
Date: 2026-10-18
"""

import json
import logging
import re
from typing import Any, Optional, Union

from ruamel.yaml import YAML, YAMLError

from kubemanifest.core.errors import MalformedDocumentError
from kubemanifest.core.models import Manifest
from kubemanifest.parsing.identity import resolve_identity
from kubemanifest.parsing.values import KeyCollisionError, normalize

logger = logging.getLogger("kubemanifest.decoder")


# Characters YAML does not read back verbatim (DEL/C1 controls, NEL and the
# Unicode line separators, BOM, non-characters, lone surrogates)
YAML_UNSAFE = re.compile(r'[\x7f-\x9f\u2028\u2029\ufeff\ufffe\uffff\ud800-\udfff]')


def _escape_yaml_unsafe(match) -> str:
    return "\\u%04x" % ord(match.group(0))


def canonicalize(value: Any) -> bytes:
    """
    Serializes a normalized tree into canonical JSON bytes.
    Raises ValueError for values JSON cannot represent (NaN, Infinity).

    YAML-unsafe characters are kept as \\uXXXX escapes so that decoding the
    canonical bytes again yields the same bytes.
    """
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return YAML_UNSAFE.sub(_escape_yaml_unsafe, text).encode("utf-8")


class ManifestDecoder:
    """
    The Reconstructor: turns one document into a Manifest.
    Owns a single safe YAML loader so it can be reused across streams.
    """

    def __init__(self):
        self.yaml = YAML(typ='safe', pure=True)
        self.yaml.allow_duplicate_keys = False

    def load(self, raw: Union[str, bytes], index: Optional[int] = None,
             source: Optional[str] = None) -> Any:
        """
        Parses the document into a normalized tree.
        Returns None for documents that hold no data (comments only).
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise MalformedDocumentError(f"invalid UTF-8: {e}", index, source) from e

        try:
            data = self.yaml.load(raw)
        except YAMLError as e:
            mark = getattr(e, 'problem_mark', None) or getattr(e, 'context_mark', None)
            problem = str(e).strip()
            if mark is not None:
                problem = f"line {mark.line + 1} column {mark.column + 1}: {getattr(e, 'problem', None) or problem}"
            raise MalformedDocumentError(problem, index, source) from e

        try:
            return normalize(data)
        except KeyCollisionError as e:
            raise MalformedDocumentError(str(e), index, source) from e

    def decode(self, raw: Union[str, bytes], index: Optional[int] = None,
               source: Optional[str] = None) -> Optional[Manifest]:
        """
        Builds a Manifest from one document, or returns None for a null
        document. Identity failures propagate; no partial record is built.
        """
        obj = self.load(raw, index=index, source=source)
        if obj is None:
            logger.debug("Skipping null document %s in %s", index, source or "<stream>")
            return None

        try:
            canonical = canonicalize(obj)
        except ValueError as e:
            raise MalformedDocumentError(f"not representable as JSON: {e}", index, source) from e

        identity, gvk = resolve_identity(obj)
        logger.debug("Decoded %s (%s)", identity, gvk.api_version)
        return Manifest(identity=identity, raw=canonical, gvk=gvk, obj=obj)
