"""Domain enumerations for strong typing & validation."""
from enum import Enum
from typing import Optional


class VoteStatus(str, Enum):
    PREFERRED = "preferred"
    NON_PREFERRED = "non-preferred"
    IMPOSSIBLE = "impossible"

    @property
    def wire_code(self) -> str:
        # day endpoint vocabulary: first letter, upper-cased
        return self.value[0].upper()

    @classmethod
    def parse(cls, raw) -> Optional["VoteStatus"]:
        """Accept enum members, values, camelCase names and one-letter wire codes."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        text = raw.strip()
        return _STATUS_ALIASES.get(text) or _STATUS_ALIASES.get(text.lower())


_STATUS_ALIASES = {
    "preferred": VoteStatus.PREFERRED,
    "non-preferred": VoteStatus.NON_PREFERRED,
    "nonpreferred": VoteStatus.NON_PREFERRED,
    "nonPreferred": VoteStatus.NON_PREFERRED,
    "non_preferred": VoteStatus.NON_PREFERRED,
    "impossible": VoteStatus.IMPOSSIBLE,
    "P": VoteStatus.PREFERRED,
    "N": VoteStatus.NON_PREFERRED,
    "I": VoteStatus.IMPOSSIBLE,
}


class SlotMode(str, Enum):
    """Editing modes on the half-hour grid."""
    POSSIBLE = "possible"
    IMPOSSIBLE = "impossible"


class GridKind(str, Enum):
    DAY = "day"
    SLOT = "slot"


class TimeKeyDomain(str, Enum):
    DAY = "day"
    SLOT = "slot"


# Modes a participant can paint with, per editing screen
DAY_MODES = (VoteStatus.PREFERRED, VoteStatus.NON_PREFERRED, VoteStatus.IMPOSSIBLE)
SLOT_MODES = (SlotMode.POSSIBLE, SlotMode.IMPOSSIBLE)
