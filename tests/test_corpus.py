"""Tests for corpus loading."""

import pytest

from eipbrowser.corpus import discover_files, load_corpus, resolve_base_path
from eipbrowser.documents import Kind
from eipbrowser.errors import MissingConfigurationError


def test_load_corpus_sorted_and_filtered(repos):
    corpus = load_corpus(repos)
    assert [d.id for d in corpus] == ["EIP-1", "ERC-20", "EIP-1559", "EIP-3198"]


def test_no_moved_documents(repos):
    assert all(d.status != "Moved" for d in load_corpus(repos))


def test_malformed_file_is_skipped(repos, caplog):
    corpus = load_corpus(repos)
    assert 999 not in {d.number for d in corpus}
    assert "eip-999.md" in caplog.text


def test_moved_dropped_between_neighbours(tmp_path, make_doc):
    eips = tmp_path / "EIPs" / "EIPS"
    make_doc(eips / "eip-1.md", "eip: 1\nstatus: Draft")
    make_doc(eips / "eip-2.md", "eip: 2\nstatus: Moved")
    make_doc(eips / "eip-3.md", "eip: 3\nstatus: Final")
    assert [d.number for d in load_corpus(tmp_path)] == [1, 3]


def test_numeric_not_lexical_order(tmp_path, make_doc):
    eips = tmp_path / "EIPs" / "EIPS"
    for n in (100, 9, 20):
        make_doc(eips / f"eip-{n}.md", f"eip: {n}\nstatus: Final")
    numbers = [d.number for d in load_corpus(tmp_path)]
    assert numbers == [9, 20, 100]


def test_duplicate_number_loaded_once(tmp_path, make_doc):
    eips = tmp_path / "EIPs" / "EIPS"
    make_doc(eips / "eip-5.md", "eip: 5\ntitle: Original")
    make_doc(eips / "eip-5-copy.md", "eip: 5\ntitle: Copy")
    corpus = load_corpus(tmp_path)
    assert [d.id for d in corpus] == ["EIP-5"]


def test_same_number_in_both_kinds(repos):
    corpus = load_corpus(repos)
    twenty = [d for d in corpus if d.number == 20]
    assert [d.kind for d in twenty] == [Kind.ERC]  # the EIP copy is Moved


def test_reload_does_not_duplicate(repos):
    assert len(load_corpus(repos)) == len(load_corpus(repos))


def test_empty_base_path(tmp_path):
    assert load_corpus(tmp_path) == []


def test_missing_base_path_yields_empty(tmp_path):
    assert load_corpus(tmp_path / "nope") == []
    assert load_corpus(None) == []


def test_resolve_base_path(tmp_path):
    assert resolve_base_path(str(tmp_path)) == tmp_path
    with pytest.raises(MissingConfigurationError):
        resolve_base_path("")
    with pytest.raises(MissingConfigurationError):
        resolve_base_path(tmp_path / "missing")


def test_discover_files_ignores_other_markdown(repos):
    (repos / "EIPs" / "README.md").write_text("# readme")
    (repos / "EIPs" / "EIPS" / "notes.md").write_text("# notes")
    names = {p.name for p in discover_files(repos)}
    assert "README.md" not in names
    assert "notes.md" not in names
    assert "erc-20.md" in names


def test_base_directory_named_like_an_eip(tmp_path, make_doc):
    base = tmp_path / "eip-work"
    make_doc(base / "EIPs" / "EIPS" / "eip-20.md", "eip: 20\nstatus: Final")
    make_doc(base / "ERCs" / "ERCS" / "erc-20.md", "eip: 20\nstatus: Final")
    assert [d.id for d in load_corpus(base)] == ["EIP-20", "ERC-20"]


def test_moved_document_with_bom_is_dropped(tmp_path, make_doc):
    eips = tmp_path / "EIPs" / "EIPS"
    make_doc(eips / "eip-1.md", "eip: 1\nstatus: Final")
    (eips / "eip-7.md").write_bytes("\ufeff---\neip: 7\nstatus: Moved\n---\nMoved.\n".encode("utf-8"))
    assert [d.id for d in load_corpus(tmp_path)] == ["EIP-1"]
