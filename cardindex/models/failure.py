"""
Import failure classification.

Every problem the import pipeline meets is classified into one of four kinds.

Non-fatal (logged, counted, processing continues):
- VALIDATION_WARNING: card is missing its name, type or description
- UNKNOWN_SET: set name is absent from the set-name table

Fatal (propagate to the pipeline, which aborts the whole batch):
- LOOKUP_FAILURE: store read error during an existence check
- WRITE_FAILURE: insert, upsert or printing append error

There are no retries: a transient store error is treated as fatal.
Writes already applied when the batch aborts are left in place.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ImportFailureKind(str, Enum):
    """Classification of import problems."""

    # Non-fatal
    VALIDATION_WARNING = "validation_warning"
    UNKNOWN_SET = "unknown_set"

    # Fatal
    LOOKUP_FAILURE = "lookup_failure"
    WRITE_FAILURE = "write_failure"

class FailureDetail(BaseModel):
    """Structured description of a fatal import failure."""

    kind: ImportFailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="What went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Underlying store error, when there is one",
    )
    record_index: int | None = Field(
        default=None,
        description="Position of the failing record in the catalog",
    )


class CardImportError(Exception):
    """
    Base class for fatal import errors.

    Carries the failure kind so the pipeline and job can report it without
    inspecting the wrapped store exception.
    """

    def __init__(
        self,
        kind: ImportFailureKind,
        message: str,
        detail: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        # Set by the pipeline once the failing record is known
        self.record_index: int | None = None
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            record_index=self.record_index,
        )


class LookupFailure(CardImportError):
    """A store read failed while checking whether a card or set exists."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(ImportFailureKind.LOOKUP_FAILURE, message, detail)


class WriteFailure(CardImportError):
    """A store insert, upsert or append failed."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(ImportFailureKind.WRITE_FAILURE, message, detail)


class ImportAbortedError(Exception):
    """
    Raised by the pipeline when a workflow fails fatally.

    The batch stops at the first fatal error. Writes completed before the
    failure are not rolled back.
    """

    def __init__(self, failure: FailureDetail, completed: int):
        self.failure = failure
        self.completed = completed
        super().__init__(
            f"Card import aborted after {completed} cards: {failure.message}"
        )
