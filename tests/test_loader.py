#!/usr/bin/env python3
"""
KUBEMANIFEST LOADER SUITE
-------------------------
Multi-source loading: source order, first-seen-wins, aggregated duplicates,
and tolerance of broken or missing sources.
"""

import pytest

from kubemanifest.core.errors import (DuplicateResourceError, MalformedDocumentError, ManifestLoadError,
                                     MissingRequiredFieldError, SourceError)
from kubemanifest.core.loader import (LoadResult, ManifestCollector, load_manifests, load_stream,
                                     manifests_from_files)
from kubemanifest.core.models import GroupVersionKind, Manifest, ResourceId

INGRESS = """
apiVersion: extensions/v1beta1
kind: Ingress
metadata:
  name: test-ingress
  namespace: test-namespace
spec:
  rules:
  - http:
      paths:
      - path: /testpath
        backend:
          serviceName: test
          servicePort: 80
"""


def configmap(name: str, namespace: str = "default", api_version: str = "v1") -> str:
    return (
        f"\napiVersion: {api_version}\nkind: ConfigMap\nmetadata:\n"
        f"  name: {name}\n  namespace: {namespace}\n"
        "data:\n  color: \"red\"\n  multi-line: |\n    hello world\n    how are you?\n"
    )


def ingress(namespace: str = "test-namespace", api_version: str = "extensions/v1") -> str:
    return (
        f"\napiVersion: {api_version}\nkind: Ingress\nmetadata:\n"
        f"  name: test-ingress\n  namespace: {namespace}\n"
    )


def write_files(root, files, dirname="a"):
    d = root / dirname
    d.mkdir()
    paths = []
    for name, contents in files:
        path = d / name
        path.write_text(contents)
        paths.append(path)
    return paths


def identities(manifests):
    return [(m.identity, m.gvk) for m in manifests]


INGRESS_ID = (ResourceId("extensions", "Ingress", "test-namespace", "test-ingress"),
              GroupVersionKind("extensions", "v1beta1", "Ingress"))


def cm_id(name):
    return ResourceId("", "ConfigMap", "default", name), GroupVersionKind("", "v1", "ConfigMap")


@pytest.mark.parametrize("files,want", [
    ([], []),
    ([("f0", INGRESS), ("f1", configmap("a-config"))], [INGRESS_ID, cm_id("a-config")]),
    ([("f0", INGRESS + "---" + configmap("a-config")), ("f1", configmap("b-config"))],
     [INGRESS_ID, cm_id("a-config"), cm_id("b-config")]),
], ids=["no-files", "all-files", "files-with-multiple-manifests"])
def test_manifests_from_files(tmp_path, files, want):
    paths = write_files(tmp_path, files)
    got = manifests_from_files(paths)
    assert identities(got) == want


def test_original_filename_is_recorded(tmp_path):
    paths = write_files(tmp_path, [("f0", INGRESS), ("f1", configmap("a-config"))])
    got = manifests_from_files(paths)
    assert [m.original_filename for m in got] == ["f0", "f1"]


MANY_DUPLICATES = [
    ("f0", configmap("cm1", "test1", "v1beta1") + "---" + configmap("cm1", "test1", "v1beta1")),
    ("f1", ingress() + "---" + "---".join(configmap(n, "test1", "v1beta1") for n in ["cm1", "cm2", "cm3", "cm4"])),
    ("f2", ingress() + "---" + configmap("cm4", "test1", "v1beta1")),
    ("fs", configmap("cm2", "test1", "v1beta1") + "---" + configmap("cm4", "test1", "v1beta1")),
]


@pytest.mark.parametrize("files,want,want_num", [
    ([("f0", ingress(api_version="extensions/v1beta1")), ("f1", ingress(namespace="default", api_version="v1"))],
     [], 0),
    ([("f0", ingress(api_version="extensions/v1beta1")), ("f1", ingress())],
     ['(Group: "extensions" Kind: "Ingress" Namespace: "test-namespace" Name: "test-ingress")'], 1),
    (MANY_DUPLICATES,
     ['(Group: "extensions" Kind: "Ingress" Namespace: "test-namespace" Name: "test-ingress")',
      '(Group: "" Kind: "ConfigMap" Namespace: "test1" Name: "cm1")',
      '(Group: "" Kind: "ConfigMap" Namespace: "test1" Name: "cm2")',
      '(Group: "" Kind: "ConfigMap" Namespace: "test1" Name: "cm4")'], 5),
], ids=["no-duplicates", "duplicate", "many-duplicates"])
def test_manifests_from_files_duplicates(tmp_path, files, want, want_num):
    paths = write_files(tmp_path, files)
    if not want:
        manifests_from_files(paths)
        return

    with pytest.raises(ManifestLoadError) as exc:
        manifests_from_files(paths)

    message = str(exc.value)
    assert message.count("Group:") == want_num, message
    assert "duplicate resource:" in message
    for s in want:
        assert s in message, f"Missing error for duplicate resource: {s}"


def test_partial_results_keep_first_seen(tmp_path):
    paths = write_files(tmp_path, MANY_DUPLICATES)
    result = manifests_from_files(paths, partial=True)

    assert isinstance(result, LoadResult)
    assert not result.ok
    # f0 failed on its in-file duplicate and contributes nothing
    assert [m.identity.name for m in result.manifests] == ["test-ingress", "cm1", "cm2", "cm3", "cm4"]
    assert [m.original_filename for m in result.manifests] == ["f1"] * 5
    assert [d.name for d in result.error.duplicates] == ["cm1", "test-ingress", "cm4", "cm2", "cm4"]


def test_aggregate_error_format(tmp_path):
    paths = write_files(tmp_path, [("f0", ingress()), ("f1", ingress())])
    with pytest.raises(ManifestLoadError) as exc:
        manifests_from_files(paths)
    assert str(exc.value) == (
        'error loading manifests: duplicate resource: (Group: "extensions" Kind: "Ingress" '
        'Namespace: "test-namespace" Name: "test-ingress")'
    )

    paths = write_files(tmp_path, [("f0", ingress()), ("f1", ingress()), ("f2", ingress())], dirname="b")
    with pytest.raises(ManifestLoadError) as exc:
        manifests_from_files(paths)
    assert str(exc.value).startswith("error loading manifests: [duplicate resource:")
    assert len(exc.value.errors) == 2


def test_missing_file_is_collected(tmp_path):
    paths = write_files(tmp_path, [("f0", configmap("a-config"))])
    missing = tmp_path / "a" / "nope.yaml"
    result = manifests_from_files([missing] + paths, partial=True)

    assert [m.identity.name for m in result.manifests] == ["a-config"]
    assert len(result.error.errors) == 1
    err = result.error.errors[0]
    assert isinstance(err, SourceError)
    assert str(err).startswith(f"error opening {missing}")


def test_broken_source_does_not_stop_the_load():
    sources = [
        ("good-0", configmap("a")),
        ("bad", "kind: Pod\nmetadata: [unclosed\n"),
        ("good-1", configmap("b")),
    ]
    result = load_manifests(sources)

    assert [m.identity.name for m in result.manifests] == ["a", "b"]
    assert "error parsing bad: " in str(result.error)
    with pytest.raises(ManifestLoadError):
        result.raise_for_errors()


def test_clean_load_has_no_error():
    result = load_manifests([("x", configmap("a")), ("y", configmap("b"))])
    assert result.ok
    assert result.raise_for_errors() == result.manifests


def test_collector_tracks_encounter_order():
    collector = ManifestCollector()
    a = Manifest(identity=ResourceId("", "ConfigMap", "ns", "a"))
    b = Manifest(identity=ResourceId("", "ConfigMap", "ns", "b"))
    a_again = Manifest(identity=ResourceId("", "ConfigMap", "ns", "a"), raw=b"{}")

    assert collector.add_all([a, b, a_again, b]) == 2
    assert collector.manifests == [a, b]
    assert collector.get(a.identity) is a
    assert [d.name for d in collector.duplicates] == ["a", "b"]
    assert all(isinstance(e, DuplicateResourceError) for e in collector.errors)
    assert collector.result().error.duplicates == collector.duplicates


def test_load_stream_keeps_good_siblings():
    raw = ("a: [\n---" + configmap("a")
           + "---\napiVersion: v1\nkind: ConfigMap\nmetadata:\n  namespace: default\n"
           + "---" + configmap("a", api_version="v2")
           + "---" + configmap("b"))
    result = load_stream(raw, source="manifests/stream.yaml")

    assert [m.identity.name for m in result.manifests] == ["a", "b"]
    assert [m.gvk.version for m in result.manifests] == ["v1", "v1"]
    assert {m.original_filename for m in result.manifests} == {"stream.yaml"}
    assert [type(e) for e in result.error.errors] == [
        MalformedDocumentError, MissingRequiredFieldError, DuplicateResourceError,
    ]
    assert result.error.errors[0].index == 0
    assert result.error.duplicates == [ResourceId("", "ConfigMap", "default", "a")]


def test_load_stream_clean():
    result = load_stream(configmap("a") + "---\n# comment only\n---" + configmap("b"))
    assert result.ok
    assert [m.identity.name for m in result.manifests] == ["a", "b"]
    assert result.manifests[0].original_filename is None


def test_load_stream_undecodable_bytes():
    result = load_stream(b"\xff\xfe\x00kind: Pod\n", source="bin.yaml")
    assert result.manifests == []
    assert len(result.error.errors) == 1
    assert isinstance(result.error.errors[0], MalformedDocumentError)


def test_load_manifests_stays_fail_fast_per_source():
    result = load_manifests([("mixed", "a: [\n---" + configmap("a"))])
    assert result.manifests == []
    assert str(result.error).startswith("error loading manifests: error parsing mixed: ")
