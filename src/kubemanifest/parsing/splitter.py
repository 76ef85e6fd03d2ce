#!/usr/bin/env python3
"""
KUBEMANIFEST SPLITTER - Document Sharder (Phase 1)
--------------------------------------------------
Cuts a multi-document YAML stream into individual documents on `---`
separator lines. Blank documents are dropped silently.

Author: KubeManifest Team
Date: 2026-10-18
"""

from dataclasses import dataclass
from typing import Iterator, List

SEPARATOR = "---"


@dataclass(frozen=True)
class RawDocument:
    """One non-empty document cut out of a stream."""
    index: int      # Position among the non-empty documents, zero-based
    text: str


def clean_artifacts(text: str) -> str:
    """
    Removes invisible UTF-8 BOM markers and standardizes line endings.
    """
    text = text.lstrip('\ufeff')
    return text.replace('\r\n', '\n').replace('\r', '\n')


def is_separator(line: str) -> bool:
    """A separator is `---` at column 0 followed by nothing but whitespace."""
    return line.startswith(SEPARATOR) and not line[len(SEPARATOR):].strip()


class DocumentSplitter:
    """
    Restartable view over the documents of a stream.
    Every iteration re-splits the text, so the object can be walked twice.
    """

    def __init__(self, text: str):
        self.text = clean_artifacts(text)

    def __iter__(self) -> Iterator[RawDocument]:
        index = 0
        current: List[str] = []
        lines = self.text.split('\n')
        if lines and lines[-1] == "":
            lines.pop()     # final newline terminates the last line

        for line in lines:
            if is_separator(line):
                if self._has_content(current):
                    yield RawDocument(index, "\n".join(current) + "\n")
                    index += 1
                current = []
                continue
            current.append(line)

        if self._has_content(current):
            yield RawDocument(index, "\n".join(current) + "\n")

    @staticmethod
    def _has_content(lines: List[str]) -> bool:
        return any(line.strip() for line in lines)


def split_documents(text: str) -> DocumentSplitter:
    return DocumentSplitter(text)
