from cardindex.models.card import CanonicalCard, Printing, RawCardRecord
from cardindex.models.failure import (
    CardImportError,
    FailureDetail,
    ImportAbortedError,
    ImportFailureKind,
    LookupFailure,
    WriteFailure,
)
from cardindex.models.import_result import ImportSummary

__all__ = [
    "CanonicalCard",
    "CardImportError",
    "FailureDetail",
    "ImportAbortedError",
    "ImportFailureKind",
    "ImportSummary",
    "LookupFailure",
    "Printing",
    "RawCardRecord",
    "WriteFailure",
]
