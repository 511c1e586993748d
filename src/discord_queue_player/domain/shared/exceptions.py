"""Base exception classes for domain-level errors."""

from __future__ import annotations

from enum import Enum

from discord_queue_player.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class QueueNotFoundError(DomainError):
    """Raised when a command targets a guild with no active queue."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(ErrorMessages.QUEUE_NOT_FOUND, code="QUEUE_NOT_FOUND")
        self.guild_id = guild_id


class TrackNotFoundError(DomainError):
    """Raised when a removal selector matches no track in the queue."""

    def __init__(self, selector: int | str) -> None:
        super().__init__(
            ErrorMessages.TRACK_NOT_FOUND.format(value=selector), code="TRACK_NOT_FOUND"
        )
        self.selector = selector


class InvalidVolumeError(DomainError):
    def __init__(self, value: object) -> None:
        super().__init__(ErrorMessages.INVALID_VOLUME.format(value=value), code="INVALID_VOLUME")
        self.value = value


class UnknownFilterError(DomainError):
    def __init__(self, name: object) -> None:
        super().__init__(ErrorMessages.UNKNOWN_FILTER.format(name=name), code="UNKNOWN_FILTER")
        self.name = name


class InvalidFilterTypeError(DomainError):
    def __init__(self, value: object) -> None:
        super().__init__(
            ErrorMessages.INVALID_FILTER_TYPE.format(value=value), code="INVALID_FILTER_TYPE"
        )
        self.value = value


class SelectionTimeoutError(DomainError):
    """Raised when the user does not pick a search result in time."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            ErrorMessages.SELECTION_TIMEOUT.format(seconds=timeout_seconds),
            code="SELECTION_TIMEOUT",
        )
        self.timeout_seconds = timeout_seconds


class InvalidSelectionError(DomainError):
    """Raised when the picked search result index is out of range or not a number."""

    def __init__(self, value: object, maximum: int) -> None:
        super().__init__(
            ErrorMessages.INVALID_SELECTION.format(value=value, maximum=maximum),
            code="INVALID_SELECTION",
        )
        self.value = value
        self.maximum = maximum


class PlaybackErrorKind(Enum):
    """Failure kinds reported by the audio transport."""

    FORBIDDEN = "forbidden"
    OTHER = "other"


class PlaybackError(DomainError):
    """Wraps a transport failure while starting or streaming a track."""

    def __init__(
        self,
        message: str,
        kind: PlaybackErrorKind = PlaybackErrorKind.OTHER,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, code="PLAYBACK_ERROR")
        self.kind = kind
        self.cause = cause

    @property
    def is_forbidden(self) -> bool:
        return self.kind is PlaybackErrorKind.FORBIDDEN

    @classmethod
    def wrap(cls, error: BaseException) -> PlaybackError:
        """Classify an arbitrary transport exception.

        HTTP 403 responses from the media host surface as messages mentioning
        the status code, so any such message is treated as forbidden.
        """
        if isinstance(error, PlaybackError):
            return error
        text = str(error)
        kind = PlaybackErrorKind.FORBIDDEN if "403" in text else PlaybackErrorKind.OTHER
        return cls(text or error.__class__.__name__, kind=kind, cause=error)


class AlreadyConnectedError(DomainError):
    def __init__(self, guild_id: int) -> None:
        super().__init__(ErrorMessages.ALREADY_CONNECTED, code="ALREADY_CONNECTED")
        self.guild_id = guild_id


class NotConnectedError(DomainError):
    def __init__(self, message: str = ErrorMessages.NOT_CONNECTED) -> None:
        super().__init__(message, code="NOT_CONNECTED")


class ResolutionErrorKind(Enum):
    NOT_FOUND = "not_found"
    SOURCE_UNAVAILABLE = "source_unavailable"


class TrackResolutionError(DomainError):
    """Raised by resolvers when a query or URL yields nothing playable."""

    def __init__(self, query: str, kind: ResolutionErrorKind = ResolutionErrorKind.NOT_FOUND) -> None:
        template = (
            ErrorMessages.SOURCE_UNAVAILABLE
            if kind is ResolutionErrorKind.SOURCE_UNAVAILABLE
            else ErrorMessages.NO_SEARCH_RESULTS
        )
        super().__init__(template.format(query=query), code="TRACK_RESOLUTION_ERROR")
        self.query = query
        self.kind = kind


class LyricsNotFoundError(DomainError):
    def __init__(self, title: str) -> None:
        super().__init__(ErrorMessages.LYRICS_NOT_FOUND.format(title=title), code="LYRICS_NOT_FOUND")
        self.title = title
