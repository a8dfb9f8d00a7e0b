"""
Unit tests for the version history.
"""

import pytest

from pixshop.editing import ImageVersion, OperationKind, VersionHistory
from pixshop.errors import ValidationError


def version(origin=OperationKind.FILTER, tag=b"x"):
    return ImageVersion(data=tag, origin=origin)


def test_empty_history():
    """An empty history has no current or original version."""
    history = VersionHistory()

    assert len(history) == 0
    assert history.cursor == -1
    assert history.current() is None
    assert history.original() is None
    assert history.can_undo is False
    assert history.can_redo is False


def test_append_at_tail_grows_by_one():
    """Each append at the tail adds exactly one version and tracks the tail."""
    history = VersionHistory(version(OperationKind.UPLOAD))

    for expected_length in range(2, 7):
        cursor = history.append(version())
        assert len(history) == expected_length
        assert cursor == expected_length - 1
        assert history.cursor == cursor


def test_branch_cut_scenario():
    """[A, B, C] at 2 -> undo -> append D gives [A, B, D] at 2."""
    a, b, c, d = (version(tag=t) for t in (b"A", b"B", b"C", b"D"))
    history = VersionHistory(a)
    history.append(b)
    history.append(c)

    assert history.undo() == 1
    assert history.append(d) == 2

    assert history.versions == (a, b, d)
    assert history.current() is d
    assert history.can_redo is False


def test_branch_cut_truncates_to_cursor_plus_one():
    """Appending from the middle discards every undone version."""
    history = VersionHistory(version(OperationKind.UPLOAD))
    for _ in range(4):
        history.append(version())
    history.undo()
    history.undo()
    history.undo()
    kept = history.versions[:history.cursor + 1]

    new = version(tag=b"new")
    history.append(new)

    assert history.versions == kept + (new,)


def test_undo_redo_round_trip():
    """undo then redo from an interior cursor returns to the same version."""
    history = VersionHistory(version(OperationKind.UPLOAD))
    for _ in range(3):
        history.append(version())
    history.undo()
    before = (history.cursor, history.current())

    history.undo()
    history.redo()

    assert (history.cursor, history.current()) == before


def test_redo_moves_forward():
    """Redo advances the cursor towards the tail."""
    history = VersionHistory(version(OperationKind.UPLOAD))
    latest = version()
    history.append(latest)
    history.undo()

    assert history.redo() == 1
    assert history.current() is latest


def test_undo_at_original_fails():
    history = VersionHistory(version(OperationKind.UPLOAD))

    with pytest.raises(ValidationError, match="Nothing to undo"):
        history.undo()
    assert history.cursor == 0


def test_redo_at_tail_fails():
    history = VersionHistory(version(OperationKind.UPLOAD))
    history.append(version())

    with pytest.raises(ValidationError, match="Nothing to redo"):
        history.redo()
    assert history.cursor == 1


def test_undo_redo_do_not_change_sequence():
    """Only the cursor moves on undo/redo."""
    history = VersionHistory(version(OperationKind.UPLOAD))
    history.append(version())
    history.append(version())
    snapshot = history.versions

    history.undo()
    history.undo()
    history.redo()

    assert history.versions == snapshot


def test_original_survives_everything():
    """Index 0 is never removed, even by a branch-cut from the original."""
    original = version(OperationKind.UPLOAD)
    history = VersionHistory(original)
    history.append(version())
    history.undo()
    history.append(version())

    assert history.original() is original
    assert len(history) == 2


def test_reset_replaces_history():
    history = VersionHistory(version(OperationKind.UPLOAD))
    history.append(version())
    fresh = version(OperationKind.UPLOAD, b"fresh")

    history.reset(fresh)

    assert history.versions == (fresh,)
    assert history.cursor == 0


def test_version_identity_is_unique():
    """Equal payloads still produce distinct, increasing identities."""
    first = version(tag=b"same")
    second = version(tag=b"same")

    assert second.sequence > first.sequence
    assert first != second
