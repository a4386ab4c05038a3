"""Shared fixtures: a small EIPs/ERCs checkout layout on disk."""

from pathlib import Path
from textwrap import dedent

import pytest


def write_doc(path: Path, front_matter: str, body: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{dedent(front_matter).strip()}\n---\n{dedent(body)}", encoding="utf-8")
    return path


@pytest.fixture
def repos(tmp_path):
    """Base directory holding EIPs/EIPS and ERCs/ERCS with a handful of documents."""
    eips = tmp_path / "EIPs" / "EIPS"
    ercs = tmp_path / "ERCs" / "ERCS"

    write_doc(
        eips / "eip-1.md",
        """
        eip: 1
        title: EIP Purpose and Guidelines
        status: Living
        type: Meta
        author: Martin Becze, Hudson Jameson
        created: 2015-10-27
        """,
        """
        ## What is an EIP?

        EIP stands for Ethereum Improvement Proposal.
        """,
    )
    write_doc(
        eips / "eip-20.md",
        """
        eip: 20
        title: Token Standard
        status: Moved
        type: Standards Track
        category: ERC
        author: Fabian Vogelsteller
        created: 2015-11-19
        """,
        "Moved to ERC-20.\n",
    )
    write_doc(
        eips / "eip-1559.md",
        """
        eip: 1559
        title: Fee market change for ETH 1.0 chain
        author: Vitalik Buterin, Eric Conner
        discussions-to: https://ethereum-magicians.org/t/eip-1559-fee-market-change-for-eth-1-0-chain/2783
        status: Final
        type: Standards Track
        category: Core
        created: 2019-04-13
        """,
        """
        ## Simple Summary

        A transaction pricing mechanism with a fixed-per-block network fee.
        """,
    )
    write_doc(
        eips / "eip-3198.md",
        """
        eip: 3198
        title: BASEFEE opcode
        author: Abdelhamid Bakhta, Vitalik Buterin
        status: Final
        type: Standards Track
        category: Core
        created: 2021-01-13
        """,
        """
        Adds an opcode that returns the base fee introduced by EIP-1559.
        """,
    )
    write_doc(
        ercs / "erc-20.md",
        """
        eip: 20
        title: Token Standard
        author: Fabian Vogelsteller, Vitalik Buterin
        status: Final
        type: Standards Track
        category: ERC
        created: 2015-11-19
        """,
        "A standard interface for tokens.\n",
    )
    # Unparseable front-matter: skipped by the loader
    write_doc(
        eips / "eip-999.md",
        """
        eip: 999
        title: [unclosed
        """,
        "broken\n",
    )
    return tmp_path


@pytest.fixture
def make_doc():
    """The write_doc helper, for tests that build their own layout."""
    return write_doc
