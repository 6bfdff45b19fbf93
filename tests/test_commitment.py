"""
Tests for secret commitments.
"""

from numguess.commitment import commit, matches


def test_commit_is_deterministic():
    assert commit("1234") == commit("1234")


def test_commit_differs_for_different_secrets():
    assert commit("1234") != commit("1243")
    assert commit("0000") != commit("00000")


def test_commit_does_not_contain_secret():
    digest = commit("98765")
    assert "98765" not in digest
    assert len(digest) == 64


def test_matches_correct_guess():
    assert matches("4321", commit("4321"))


def test_matches_wrong_guess():
    assert not matches("4320", commit("4321"))


def test_matches_without_digest():
    assert not matches("1234", None)
    assert not matches("1234", "")
