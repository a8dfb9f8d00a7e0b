"""
Version History

Ordered, append-biased sequence of image versions with a movable cursor.
"""

from typing import List, Optional, Tuple
import logging

from ..errors import ValidationError
from .models import ImageVersion

logger = logging.getLogger(__name__)


class VersionHistory:
    """
    Undo/redo history of image versions.

    Index 0 is the original upload and is never removed. `append` is the
    only operation that changes the sequence: committing a version while
    the cursor is not at the tail first discards everything after the
    cursor (branch-cut). `undo`/`redo` only move the cursor.
    """

    def __init__(self, initial: Optional[ImageVersion] = None):
        self._versions: List[ImageVersion] = []
        self._cursor: int = -1

        if initial is not None:
            self.reset(initial)

    def __len__(self) -> int:
        return len(self._versions)

    @property
    def cursor(self) -> int:
        """Index of the current version, -1 while empty."""
        return self._cursor

    @property
    def versions(self) -> Tuple[ImageVersion, ...]:
        return tuple(self._versions)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._versions) - 1

    def append(self, version: ImageVersion) -> int:
        """
        Commit a new version after the cursor.

        Args:
            version: Version to commit

        Returns:
            New cursor (always the tail)
        """
        discarded = len(self._versions) - (self._cursor + 1)
        if discarded > 0:
            del self._versions[self._cursor + 1:]
            logger.info(f"Branch-cut discarded {discarded} redo-able version(s)")

        self._versions.append(version)
        self._cursor = len(self._versions) - 1
        return self._cursor

    def undo(self) -> int:
        if not self.can_undo:
            raise ValidationError("Nothing to undo", "undo")
        self._cursor -= 1
        return self._cursor

    def redo(self) -> int:
        if not self.can_redo:
            raise ValidationError("Nothing to redo", "redo")
        self._cursor += 1
        return self._cursor

    def current(self) -> Optional[ImageVersion]:
        if not self._versions:
            return None
        return self._versions[self._cursor]

    def original(self) -> Optional[ImageVersion]:
        if not self._versions:
            return None
        return self._versions[0]

    def reset(self, version: ImageVersion) -> None:
        """Replace the whole history with a single version (new upload)."""
        self._versions = [version]
        self._cursor = 0
