"""
Resource Lifecycle Manager

Display handles are short-lived URLs through which the frontend renders a
version's bytes. A session owns two slots, `current` and `original`; each
slot always holds the handle for the version it shows, and every minted
handle is released exactly once, either when its slot moves to another
version or when the session is torn down.
"""

from dataclasses import dataclass
from typing import Dict, Optional
import uuid
import logging

from .models import ImageVersion

logger = logging.getLogger(__name__)

HANDLE_URL_PREFIX = "/api/images"

SLOT_CURRENT = "current"
SLOT_ORIGINAL = "original"
SLOTS = (SLOT_CURRENT, SLOT_ORIGINAL)


@dataclass(frozen=True)
class DisplayHandle:
    token: str
    version_sequence: int

    @property
    def url(self) -> str:
        return f"{HANDLE_URL_PREFIX}/{self.token}"


class HandleRegistry:
    """Resolves live handle tokens to the versions they display."""

    def __init__(self):
        self._live: Dict[str, ImageVersion] = {}
        self.minted = 0
        self.released = 0

    def mint(self, version: ImageVersion) -> DisplayHandle:
        handle = DisplayHandle(token=uuid.uuid4().hex, version_sequence=version.sequence)
        self._live[handle.token] = version
        self.minted += 1
        logger.debug(f"Minted handle {handle.token} for version {version.sequence}")
        return handle

    def release(self, handle: DisplayHandle) -> None:
        if self._live.pop(handle.token, None) is None:
            raise KeyError(f"Handle already released: {handle.token}")
        self.released += 1
        logger.debug(f"Released handle {handle.token}")

    def resolve(self, token: str) -> Optional[ImageVersion]:
        return self._live.get(token)

    @property
    def live_count(self) -> int:
        return len(self._live)


class SessionHandles:
    """The `current`/`original` handle slots of one session."""

    def __init__(self, registry: HandleRegistry):
        self.registry = registry
        self._slots: Dict[str, Optional[DisplayHandle]] = {slot: None for slot in SLOTS}

    def get(self, slot: str) -> Optional[DisplayHandle]:
        return self._slots[slot]

    def url(self, slot: str) -> Optional[str]:
        handle = self._slots[slot]
        return handle.url if handle else None

    def sync(self, current: Optional[ImageVersion], original: Optional[ImageVersion]) -> None:
        """Point each slot at its version, minting and releasing as needed."""
        self._assign(SLOT_CURRENT, current)
        self._assign(SLOT_ORIGINAL, original)

    def _assign(self, slot: str, version: Optional[ImageVersion]) -> None:
        previous = self._slots[slot]
        if previous is not None and version is not None and previous.version_sequence == version.sequence:
            return

        # Mint before release so the slot is never left without a live handle
        self._slots[slot] = self.registry.mint(version) if version is not None else None
        if previous is not None:
            self.registry.release(previous)

    def close(self) -> None:
        """Release every handle held by this session."""
        for slot in SLOTS:
            handle = self._slots[slot]
            if handle is not None:
                self._slots[slot] = None
                self.registry.release(handle)
