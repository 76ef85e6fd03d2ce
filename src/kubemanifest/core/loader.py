#!/usr/bin/env python3
"""
KUBEMANIFEST LOADER - Multi-Source Orchestrator
-----------------------------------------------
Merges manifests from many sources (files, in-memory streams) into one
de-duplicated set. Unlike the fail-fast single-stream parse, a load never
stops at the first problem: every source is processed and every error is
collected, in source order, into one ManifestLoadError. load_stream() applies
the same tolerance to the documents of a single stream.

Author: KubeManifest Team
Date: 2026-10-18
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from kubemanifest.core.errors import (DuplicateResourceError, ManifestError,
                                     ManifestLoadError, SourceError)
from kubemanifest.core.models import Manifest, ResourceId
from kubemanifest.parsing.decoder import ManifestDecoder
from kubemanifest.parsing.pipeline import Stream, iter_manifests, parse_manifests

logger = logging.getLogger("kubemanifest.loader")


@dataclass
class LoadResult:
    """
    Outcome of a multi-source load.

    manifests: first-seen-wins records, in document-then-source order
    error:     aggregate of every collected error, or None
    """
    manifests: List[Manifest] = field(default_factory=list)
    error: Optional[ManifestLoadError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_errors(self) -> List[Manifest]:
        if self.error is not None:
            raise self.error
        return self.manifests


class ManifestCollector:
    """
    Duplicate Tracker: keeps the first Manifest seen for each identity and
    an ordered report of every later collision. Map iteration order is
    never used for reporting; the explicit lists carry encounter order.
    """

    def __init__(self):
        self._first_seen: Dict[ResourceId, Manifest] = {}
        self._manifests: List[Manifest] = []
        self._duplicates: List[ResourceId] = []
        self._errors: List[Exception] = []

    def add(self, manifest: Manifest) -> bool:
        """Stores the manifest unless its identity was already seen."""
        if manifest.identity in self._first_seen:
            logger.warning("Duplicate resource %s", manifest.identity)
            self._duplicates.append(manifest.identity)
            self._errors.append(DuplicateResourceError(manifest.identity))
            return False
        self._first_seen[manifest.identity] = manifest
        self._manifests.append(manifest)
        return True

    def add_all(self, manifests: Iterable[Manifest]) -> int:
        return sum(1 for m in manifests if self.add(m))

    def record_error(self, error: Exception):
        self._errors.append(error)

    def get(self, identity: ResourceId) -> Optional[Manifest]:
        return self._first_seen.get(identity)

    @property
    def manifests(self) -> List[Manifest]:
        return list(self._manifests)

    @property
    def duplicates(self) -> List[ResourceId]:
        return list(self._duplicates)

    @property
    def errors(self) -> List[Exception]:
        return list(self._errors)

    def result(self) -> LoadResult:
        error = ManifestLoadError(self._errors) if self._errors else None
        return LoadResult(manifests=self.manifests, error=error)


def load_stream(stream: Stream, source: Optional[str] = None,
                decoder: Optional[ManifestDecoder] = None,
                collector: Optional[ManifestCollector] = None) -> LoadResult:
    """
    Tolerant single-stream load: keeps every good document.

    A malformed document or one missing its identity is recorded and the
    following documents are still decoded. Repeated identities are kept
    first-seen and reported as duplicates. A stream that cannot be read as
    UTF-8 yields no manifests and one error.
    """
    collector = collector or ManifestCollector()
    try:
        for parsed in iter_manifests(stream, source=source, decoder=decoder):
            if parsed.error is not None:
                logger.warning("Skipping document %d of %s: %s",
                               parsed.index, source or "<stream>", parsed.error)
                collector.record_error(parsed.error)
                continue
            if source is not None:
                parsed.manifest.original_filename = os.path.basename(source)
            collector.add(parsed.manifest)
    except ManifestError as e:
        logger.warning("Unable to read %s: %s", source or "<stream>", e)
        collector.record_error(e)
    return collector.result()


def load_manifests(sources: Iterable[Tuple[str, Stream]],
                   decoder: Optional[ManifestDecoder] = None,
                   collector: Optional[ManifestCollector] = None) -> LoadResult:
    """
    Parses every (name, data) source in order and merges the results.

    A source that fails to parse (malformed document, missing identity or an
    in-source duplicate) contributes no manifests; its error is recorded and
    the load moves on to the next source.
    """
    decoder = decoder or ManifestDecoder()
    collector = collector or ManifestCollector()

    for name, data in sources:
        try:
            parsed = parse_manifests(data, source=name, decoder=decoder)
        except ManifestError as e:
            logger.warning("Skipping %s: %s", name, e)
            collector.record_error(SourceError("parsing", name, e))
            continue

        for manifest in parsed:
            manifest.original_filename = os.path.basename(name)
            collector.add(manifest)

    result = collector.result()
    if result.error is not None:
        logger.warning("Loaded %d manifest(s) with %d error(s)",
                       len(result.manifests), len(result.error.errors))
    return result


def _read_sources(paths: Iterable[Union[str, Path]],
                  collector: ManifestCollector) -> Iterable[Tuple[str, bytes]]:
    """Yields (path, bytes) lazily so read failures keep their place in the order."""
    for path in paths:
        path = str(path)
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            logger.error("Unable to read %s: %s", path, e)
            collector.record_error(SourceError("opening", path, e))
            continue
        yield path, data


def manifests_from_files(paths: Iterable[Union[str, Path]], partial: bool = False,
                         decoder: Optional[ManifestDecoder] = None):
    """
    Loads manifests from files in the given order.

    By default the aggregate ManifestLoadError is raised and no manifests are
    returned when anything went wrong. With partial=True the LoadResult is
    returned instead, carrying both the de-duplicated manifests and the error.
    """
    collector = ManifestCollector()
    result = load_manifests(_read_sources(paths, collector), decoder=decoder, collector=collector)
    if partial:
        return result
    return result.raise_for_errors()
