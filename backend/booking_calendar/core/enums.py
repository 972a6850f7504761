# Famiglie chiuse di stati/codici prodotte dal motore (non legate a una tabella)
import enum


class ResolvedStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    PENDING = "pending"
    BLOCKED = "blocked"
    TENTATIVE = "tentative"
    OPEN_GIG = "open_gig"
    # solo da default_status delle impostazioni
    UNAVAILABLE = "unavailable"
    REQUEST_ONLY = "request_only"


class StatusSource(str, enum.Enum):
    ENTRY = "entry"
    BOOKING = "booking"
    BLOCKED_RANGE = "blocked_range"
    SETTINGS = "settings"
    DEFAULT = "default"


class Decision(str, enum.Enum):
    ADMIT = "admit"
    DENY = "deny"
    REVIEW = "review"


class ReasonCode(str, enum.Enum):
    AVAILABLE = "available"
    TOO_FAR_OUT = "too_far_out"
    INSUFFICIENT_NOTICE = "insufficient_notice"
    DATE_BLOCKED = "date_blocked"
    TIME_CONFLICT = "time_conflict"
    TIME_CONFLICT_NEEDS_APPROVAL = "time_conflict_needs_approval"
    NOT_AVAILABLE = "not_available"
    REQUIRES_APPROVAL = "requires_approval"


class Outcome(str, enum.Enum):
    APPLIED = "applied"
    REJECTED = "rejected"


class RejectReason(str, enum.Enum):
    PAST_DATE = "past_date"
    STORAGE_ERROR = "storage_error"
