"""Tests for the browsing session."""

import pytest

from eipbrowser.corpus import load_corpus
from eipbrowser.search import BASIC_FIELDS
from eipbrowser.session import BrowserOptions, Session
from eipbrowser.storage import FAVORITES_KEY, Favorites, MemoryStorage
from eipbrowser.view import FAVORITES_SECTION, OTHER_SECTION


def _session(repos, storage=None, **options):
    return Session(load_corpus(repos), Favorites(storage or MemoryStorage()), BrowserOptions(**options))


def test_idle_to_searching_and_back(repos):
    session = _session(repos)
    assert not session.is_searching
    idle = session.view()
    assert [s.title for s in idle] == [FAVORITES_SECTION, OTHER_SECTION]

    searching = session.set_query("1559")
    assert session.is_searching
    assert len(searching) == 1
    assert searching[0].ids[0] == "EIP-1559"

    idle_again = session.set_query("")
    assert not session.is_searching
    assert idle_again == idle


def test_idle_view_ascending(repos):
    other = _session(repos).view()[1]
    numbers = [row.document.number for row in other.rows]
    assert numbers == sorted(numbers)


def test_favorite_moves_to_favorites_section(repos):
    session = _session(repos)
    assert session.toggle_favorite("eip-3198") == ("EIP-3198", True)
    favorites, other = session.view()
    assert favorites.ids == ["EIP-3198"]
    assert "EIP-3198" not in other.ids


def test_toggle_favorite_not_in_corpus(repos):
    storage = MemoryStorage()
    session = _session(repos, storage)
    assert session.toggle_favorite("EIP-424242") == ("EIP-424242", True)
    assert session.toggle_favorite("31337") == ("31337", True)
    assert set(storage.get(FAVORITES_KEY)) == {"EIP-424242", 31337}


def test_find(repos):
    session = _session(repos)
    assert session.find("EIP-1559").title == "Fee market change for ETH 1.0 chain"
    assert session.find("erc20").id == "ERC-20"
    assert session.find("3198").id == "EIP-3198"
    assert session.find("EIP-20") is None  # moved
    assert session.find("not an id") is None


def test_search_fields_option(repos):
    session = _session(repos, search_fields=BASIC_FIELDS)
    assert session.index.fields == BASIC_FIELDS


def test_reload_picks_up_new_files(repos, make_doc):
    session = _session(repos)
    before = len(session.corpus)
    make_doc(repos / "EIPs" / "EIPS" / "eip-4844.md", "eip: 4844\ntitle: Shard Blob Transactions\nstatus: Final")
    session.reload(repos)
    assert len(session.corpus) == before + 1
    assert session.set_query("4844")[0].ids[0] == "EIP-4844"


def test_toggle_favorite_rejects_non_ids(repos):
    storage = MemoryStorage()
    session = _session(repos, storage)
    for bad in ("foo", "", "EIP-"):
        with pytest.raises(ValueError):
            session.toggle_favorite(bad)
    assert storage.get(FAVORITES_KEY) is None


def test_find_and_search_accept_the_same_id_forms(repos):
    session = _session(repos)
    for text in ("ERC #20", "erc20", "erc-20"):
        assert session.find(text).id == "ERC-20"
        assert session.index.search(text)[0].id == "ERC-20"
