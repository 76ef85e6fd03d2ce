#!/usr/bin/env python3
"""
KUBEMANIFEST PARSING PIPELINE - Single-Stream Parse
---------------------------------------------------
Runs one stream through the strict sequence:

    split (---)  ->  decode (YAML -> canonical JSON)  ->  identity  ->  dedup

iter_manifests() walks the documents one by one and reports each failure
in place. parse_manifests() is the fail-fast entry point built on it: the
first malformed document, missing identity or duplicate resource aborts
the whole stream.

Author: KubeManifest Team
Date: 2026-10-18
"""

import logging
from dataclasses import dataclass
from typing import IO, Iterator, List, Optional, Set, Union

from kubemanifest.core.errors import DuplicateResourceError, MalformedDocumentError, ManifestError
from kubemanifest.core.models import Manifest, ResourceId
from kubemanifest.parsing.decoder import ManifestDecoder
from kubemanifest.parsing.splitter import DocumentSplitter

logger = logging.getLogger("kubemanifest.pipeline")

Stream = Union[str, bytes, IO[str], IO[bytes]]


def read_stream(stream: Stream, source: Optional[str] = None) -> str:
    """Accepts text, bytes or a readable file object (BOM-aware)."""
    data = stream.read() if hasattr(stream, "read") else stream
    if isinstance(data, (bytes, bytearray)):
        try:
            return bytes(data).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"invalid UTF-8: {e}", source=source) from e
    return data


@dataclass
class ParsedDocument:
    """
    Outcome of one non-empty document.

    Exactly one of manifest/error is set: the decoded record, or the
    ManifestError that stopped this document (and only this document).
    """
    index: int
    manifest: Optional[Manifest] = None
    error: Optional[ManifestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def iter_manifests(stream: Stream, source: Optional[str] = None,
                   decoder: Optional[ManifestDecoder] = None) -> Iterator[ParsedDocument]:
    """
    Decodes the documents of one stream one at a time, in document order.

    A malformed document or one missing its identity is reported in place and
    decoding carries on with the next document. Null documents yield nothing.
    Duplicates are not checked here.
    """
    decoder = decoder or ManifestDecoder()
    text = read_stream(stream, source)

    for doc in DocumentSplitter(text):
        try:
            manifest = decoder.decode(doc.text, index=doc.index, source=source)
        except ManifestError as e:
            logger.debug("Document %d of %s failed: %s", doc.index, source or "<stream>", e)
            yield ParsedDocument(index=doc.index, error=e)
            continue
        if manifest is not None:
            yield ParsedDocument(index=doc.index, manifest=manifest)


def parse_manifests(stream: Stream, source: Optional[str] = None,
                    decoder: Optional[ManifestDecoder] = None) -> List[Manifest]:
    """
    Parses every document of a single stream into Manifests, in document order.

    Raises:
        MalformedDocumentError: a document is not well-formed YAML
        MissingRequiredFieldError: a document lacks kind or metadata.name
        DuplicateResourceError: an identity repeats within the stream
    """
    manifests: List[Manifest] = []
    seen: Set[ResourceId] = set()

    for parsed in iter_manifests(stream, source=source, decoder=decoder):
        if parsed.error is not None:
            raise parsed.error
        manifest = parsed.manifest
        if manifest.identity in seen:
            raise DuplicateResourceError(manifest.identity)
        seen.add(manifest.identity)
        manifests.append(manifest)

    logger.debug("Parsed %d manifest(s) from %s", len(manifests), source or "<stream>")
    return manifests
