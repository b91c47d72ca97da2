from enum import Enum


class NumberStatus(str, Enum):
    """Inventory lifecycle states."""

    AVAILABLE = "available"
    USED = "used"
    RESERVED = "reserved"
    AGING = "aging"


class NumberType(str, Enum):
    DID = "did"
    EXTENSION = "extension"
    TOLL_FREE = "toll-free"
    MAILBOX = "mailbox"


AGING_PERIOD_DAYS = 90
AGING_EXPIRING_SOON_DAYS = 7
LIFECYCLE_ACTOR = "lifecycle-manager"
TEAMS_SYNC_ACTOR = "teams-sync"
