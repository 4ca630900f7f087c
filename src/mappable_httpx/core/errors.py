"""Error types and error-code mapping."""

from __future__ import annotations

from enum import Enum, IntEnum

ERROR_DOMAIN = "mappable_httpx.error"

NO_DATA_REASON = "Data could not be serialized. Input data was nil."
MAPPING_FAILED_REASON = "ObjectMapper failed to serialize response."


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    NO_DATA = "no_data"
    MAPPING_FAILED = "mapping_failed"
    PERSISTENCE = "persistence"
    CLIENT_CLOSED = "client_closed"


class ErrorCode(IntEnum):
    NO_DATA = 1
    DATA_SERIALIZATION_FAILED = 2
    PERSISTENCE = 3


class ConfigurationError(ValueError):
    """Invalid client configuration."""


class ObjectStoreError(Exception):
    """Raised by object stores when a transaction cannot be opened or closed."""


class MappableError(Exception):
    """Base exception for this package."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        code: ErrorCode | None = None,
        http_status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.code = code
        self.domain = ERROR_DOMAIN
        self.http_status = http_status
        self.cause = cause

    @property
    def failure_reason(self) -> str:
        return str(self)


class MappableTransportError(MappableError):
    """Transport-level failure reported by the HTTP client."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            kind=ErrorKind.TRANSPORT,
            http_status=http_status,
            cause=cause,
        )


class MappableNoDataError(MappableError):
    """The exchange completed but carried no body."""

    def __init__(self, message: str = NO_DATA_REASON, *, http_status: int | None = None) -> None:
        super().__init__(
            message,
            kind=ErrorKind.NO_DATA,
            code=ErrorCode.NO_DATA,
            http_status=http_status,
        )


class MappableMappingError(MappableError):
    """JSON was absent or could not be converted to the target shape."""

    def __init__(
        self,
        message: str = MAPPING_FAILED_REASON,
        *,
        http_status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            kind=ErrorKind.MAPPING_FAILED,
            code=ErrorCode.DATA_SERIALIZATION_FAILED,
            http_status=http_status,
            cause=cause,
        )


class MappablePersistenceError(MappableError):
    """The object store transaction could not be opened or committed."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            kind=ErrorKind.PERSISTENCE,
            code=ErrorCode.PERSISTENCE,
            http_status=http_status,
            cause=cause,
        )


class ClientClosedError(MappableError):
    """Raised when a client is used after close."""

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.CLIENT_CLOSED)


def new_error(code: ErrorCode, failure_reason: str, *, http_status: int | None = None) -> MappableError:
    """Build the error matching an adapter error code."""

    if code is ErrorCode.NO_DATA:
        return MappableNoDataError(failure_reason, http_status=http_status)
    if code is ErrorCode.DATA_SERIALIZATION_FAILED:
        return MappableMappingError(failure_reason, http_status=http_status)
    return MappablePersistenceError(failure_reason, http_status=http_status)


__all__ = [
    "ERROR_DOMAIN",
    "NO_DATA_REASON",
    "MAPPING_FAILED_REASON",
    "ErrorKind",
    "ErrorCode",
    "ConfigurationError",
    "ObjectStoreError",
    "MappableError",
    "MappableTransportError",
    "MappableNoDataError",
    "MappableMappingError",
    "MappablePersistenceError",
    "ClientClosedError",
    "new_error",
]
