"""Status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of failure kinds surfaced to the calling layer.

    Every LitepadError carries exactly one of these. The UI layer switches
    on the kind; the message is only for display.
    """

    IO = "io"
    NOT_FOUND = "not_found"
    HASH_MISMATCH = "hash_mismatch"
    CONFIG = "config"
    PERMISSION = "permission"
    ARCHIVE_FORMAT = "archive_format"


class PathErrorCode(StrEnum):
    """Reason a candidate backup directory was rejected.

    Serialized verbatim into PathValidationResult.error_code.
    """

    NO_WRITE_PERMISSION = "NO_WRITE_PERMISSION"
    PATH_NOT_ACCESSIBLE = "PATH_NOT_ACCESSIBLE"
