"""Plan data structures passed from validation to execution."""

from dataclasses import dataclass, field
from enum import Enum

from trackmv.core.errors import RejectReason
from trackmv.schemas import PairSummary


class MoveMode(str, Enum):
    """How a pair is carried out.

    Attributes:
        DIRECT: Tracked file; rename on disk and update the index
        DIRECTORY_RENAME: Tracked directory prefix; rename on disk only
        PRE_MOVED: Child of a renamed directory; update the index only
    """

    DIRECT = "direct"
    DIRECTORY_RENAME = "directory_rename"
    PRE_MOVED = "pre_moved"


@dataclass
class MovePair:
    """A (source, destination) pair of tracked paths."""

    source: str
    destination: str
    mode: MoveMode = MoveMode.DIRECT

    @property
    def renames_on_disk(self) -> bool:
        return self.mode is not MoveMode.PRE_MOVED

    @property
    def updates_index(self) -> bool:
        return self.mode is not MoveMode.DIRECTORY_RENAME

    def summary(self, reason: str | None = None) -> PairSummary:
        return PairSummary(
            source=self.source,
            destination=self.destination,
            mode=self.mode.value,
            reason=reason,
        )


@dataclass
class Rejection:
    """A pair dropped by validation while ignoring errors."""

    pair: MovePair
    reason: RejectReason


@dataclass
class Plan:
    """Validated pairs in processing order.

    Attributes:
        pairs: Accepted pairs, directory expansions appended after their parent
        overwritten: Destinations authorized to replace an existing file
        rejected: Pairs dropped under ignore-errors, in detection order
    """

    pairs: list[MovePair] = field(default_factory=list)
    overwritten: set[str] = field(default_factory=set)
    rejected: list[Rejection] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pairs)
