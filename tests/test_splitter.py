#!/usr/bin/env python3
"""
KUBEMANIFEST SPLITTER SUITE
---------------------------
Separator detection, blank document dropping and restartable iteration.
"""

import pytest

from kubemanifest.parsing.splitter import DocumentSplitter, clean_artifacts, is_separator, split_documents


@pytest.mark.parametrize("line,expected", [
    ("---", True),
    ("---   ", True),
    ("---\t", True),
    ("----", False),
    ("--- # comment", False),
    ("  ---", False),
    ("a: ---", False),
])
def test_is_separator(line, expected):
    assert is_separator(line) is expected


def test_blank_documents_are_dropped():
    text = "\n---\na: 1\n---\n---\n   \n---\nb: 2\n---\n"
    docs = list(split_documents(text))

    assert [d.text for d in docs] == ["a: 1\n", "b: 2\n"]
    assert [d.index for d in docs] == [0, 1]


def test_empty_input_yields_nothing():
    assert list(split_documents("")) == []
    assert list(split_documents("---\n---\n\n")) == []


def test_splitter_is_restartable():
    splitter = DocumentSplitter("a: 1\n---\nb: 2\n")
    assert list(splitter) == list(splitter)
    assert len(list(splitter)) == 2


def test_block_scalars_survive_split():
    text = "data:\n  conf: |\n    line1\n    line2\n---\nkind: Pod\n"
    docs = list(split_documents(text))
    assert docs[0].text == "data:\n  conf: |\n    line1\n    line2\n"


def test_clean_artifacts_strips_bom_and_crlf():
    assert clean_artifacts("\ufeffa: 1\r\nb: 2\r") == "a: 1\nb: 2\n"
    docs = list(split_documents("\ufeffa: 1\r\n---\r\nb: 2\r\n"))
    assert [d.text for d in docs] == ["a: 1\n", "b: 2\n"]
