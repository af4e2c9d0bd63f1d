"""Domain models for the lead capture pipeline."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ErrorCode(str, Enum):
    """Error codes carried by domain exceptions."""

    VALIDATION_ERROR = "validation_error"
    REMOTE_PERMANENT_ERROR = "remote_permanent_error"
    REMOTE_TRANSIENT_ERROR = "remote_transient_error"
    QUEUE_IO_ERROR = "queue_io_error"
    INVALID_TRANSITION = "invalid_transition"
    INTERNAL_ERROR = "internal_error"


class RemoteErrorKind(str, Enum):
    """Classification of a failed remote operation."""

    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    AUTHORIZATION = "authorization"
    TRANSIENT = "transient"

    @property
    def is_permanent(self) -> bool:
        """Permanent errors recur identically on retry."""
        return self is not RemoteErrorKind.TRANSIENT


class SubmissionSource(str, Enum):
    """How a record entered the pipeline."""

    DIRECT = "direct"
    TIMEOUT_FALLBACK = "timeout_fallback"
    RETRY_EXHAUSTED_FALLBACK = "retry_exhausted_fallback"
    UNCONFIGURED_FALLBACK = "unconfigured_fallback"
    LEGACY_MIGRATION = "legacy_migration"


SYNCED_SOURCE_SUFFIX = "_synced"


class SubmissionState(str, Enum):
    """States of a single form submission."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    DEGRADED_SUCCESS = "degraded_success"
    REJECTED_INPUT = "rejected_input"


class SubmissionStatus(str, Enum):
    """Outcome reported to the caller."""

    SUCCESS = "success"
    DEGRADED_SUCCESS = "degraded_success"
    REJECTED_INPUT = "rejected_input"


# Base Models
class FrozenModel(BaseModel):
    """Immutable base model."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ContactForm(BaseModel):
    """User-entered lead fields plus capture metadata."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    company: str | None = None
    title: str | None = None
    phone: str | None = None
    industry_segment: str | None = None
    aum: str | None = None
    active_borrowers: str | None = None
    ai_readiness: str | None = None
    monthly_debt: str | None = None
    current_system: str | None = None
    pain_point: str | None = None
    timeline: str | None = None
    message: str | None = None
    hear_about_us: str | None = None
    consent_given: bool = False

    # Capture metadata
    user_agent: str | None = None
    referrer: str | None = None
    page_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def split_full_name(cls, data: Any) -> Any:
        """Accept a single ``name`` field and split it into first and last."""
        if not isinstance(data, dict) or "name" not in data:
            return data

        data = dict(data)
        full_name = str(data.pop("name") or "").strip()
        if not full_name:
            return data

        first, _, rest = full_name.partition(" ")
        if not (data.get("first_name") or data.get("firstName")):
            data["first_name"] = first
        if not (data.get("last_name") or data.get("lastName")):
            data["last_name"] = rest.strip()
        return data

    def to_payload(self) -> dict[str, Any]:
        """Field values for the remote record, unset fields omitted."""
        return self.model_dump(exclude_none=True)


class SubmissionRecord(FrozenModel):
    """A captured form submission.

    The identifier is assigned once, at capture, and is the only key used to
    detect duplicates. It doubles as the remote primary key.
    """

    id: UUID = Field(default_factory=uuid4)
    captured_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: str = SubmissionSource.DIRECT.value
    form: ContactForm

    def with_source(self, source: str) -> "SubmissionRecord":
        """Copy of the record with a different source tag and the same id."""
        return self.model_copy(update={"source": source})

    def to_remote_payload(self) -> dict[str, Any]:
        """Row sent to the remote data service."""
        return {
            "id": str(self.id),
            "created_at": self.captured_at.isoformat(),
            "source": self.source,
            **self.form.to_payload(),
        }


class QueueEntry(FrozenModel):
    """A record held in the fallback queue."""

    record: SubmissionRecord
    synced: bool = False

    @property
    def id(self) -> UUID:
        return self.record.id


class HealthState(FrozenModel):
    """Snapshot of perceived remote service health."""

    is_healthy: bool = False
    last_checked_at: datetime | None = None
    consecutive_failure_count: int = Field(default=0, ge=0)
    last_error: str | None = None


class InsertResult(FrozenModel):
    """Result of a single remote insert."""

    success: bool
    stored_record: dict[str, Any] | None = None
    error_message: str | None = None
    error_kind: RemoteErrorKind | None = None

    @classmethod
    def ok(cls, stored_record: dict[str, Any]) -> "InsertResult":
        return cls(success=True, stored_record=stored_record)

    @classmethod
    def failed(cls, message: str, kind: RemoteErrorKind) -> "InsertResult":
        return cls(success=False, error_message=message, error_kind=kind)


class RetryResult(BaseModel):
    """Result of an operation run through the retry executor."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    value: Any = None
    error: str | None = None
    error_kind: RemoteErrorKind | None = None
    attempts: int = 0


class FieldError(FrozenModel):
    """Validation error for a single form field."""

    field: str
    message: str


class SubmissionOutcome(FrozenModel):
    """What the caller gets back from a submission."""

    status: SubmissionStatus
    user_message: str
    field_errors: list[FieldError] = Field(default_factory=list)
    submission_id: UUID | None = None
    state_history: list[SubmissionState] = Field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.status != SubmissionStatus.REJECTED_INPUT


class ReconciliationReport(BaseModel):
    """Summary of one reconciliation pass."""

    synced: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
    skipped: bool = False
