"""
Value types shared by the edit session engine.
"""

from dataclasses import dataclass, field
from enum import Enum
import itertools
import time

# Process-wide version sequence; identities never repeat
_sequence = itertools.count(1)


class OperationKind(str, Enum):
    """Where an image version came from."""
    UPLOAD = "upload"
    RETOUCH = "retouch"
    FILTER = "filter"
    ADJUST = "adjust"
    BACKGROUND = "background"
    FREESTYLE = "freestyle"
    CROP = "crop"


# Operations delegated to the generative service
GENERATIVE_OPERATIONS = (
    OperationKind.RETOUCH,
    OperationKind.FILTER,
    OperationKind.ADJUST,
    OperationKind.BACKGROUND,
    OperationKind.FREESTYLE,
)


class Tab(str, Enum):
    """Editor tabs. The tab decides what a click on the image does."""
    RETOUCH = "retouch"
    FREESTYLE = "freestyle"
    BACKGROUND = "background"
    ADJUST = "adjust"
    FILTERS = "filters"
    CROP = "crop"
    CHAT = "chat"


@dataclass(frozen=True)
class Size:
    """Width/height pair in pixels."""
    width: float
    height: float


@dataclass(frozen=True)
class ImageVersion:
    """
    One immutable image in a session's history.

    `sequence` is the stable identity: two versions with equal bytes are
    still different versions.
    """
    data: bytes = field(repr=False)
    origin: OperationKind
    mime_type: str = "image/png"
    filename: str = ""
    sequence: int = field(default_factory=lambda: next(_sequence))
    created_at: float = field(default_factory=time.time)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Hotspot:
    """Retouch target in natural pixels, plus where it was drawn on screen."""
    natural_x: int
    natural_y: int
    display_x: float
    display_y: float


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def result_filename(kind: OperationKind) -> str:
    """File name for an operation result, e.g. `retouch-1700000000000.png`."""
    return f"{kind.value}-{timestamp_ms()}.png"
