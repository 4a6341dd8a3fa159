from __future__ import annotations

__all__ = (
    "InlinedError",
    "InlinedFileNotFoundError",
    "InlinedInvalidBinaryError",
    "InlinedDebugInfoError",
    "InlinedRangeDecodeError",
    "InlinedNameResolutionError",
)


class InlinedError(Exception):
    """
    Base class for errors raised by inlined.
    """

    pass


class InlinedFileNotFoundError(InlinedError):
    """
    Error raised when a file does not exist.
    """

    pass


class InlinedInvalidBinaryError(InlinedError):
    """
    Error raised when a file is not a readable ELF object.
    """

    pass


class InlinedDebugInfoError(InlinedError):
    """
    Error raised when the DWARF information of a binary is missing or cannot be decoded.
    """

    pass


class InlinedRangeDecodeError(InlinedError):
    """
    Error raised when the .debug_ranges section is truncated or malformed.
    """

    pass


class InlinedNameResolutionError(InlinedError):
    """
    Error raised when the name of a subprogram cannot be resolved, either because a specification chain points to
    an unknown DIE or because it loops back on itself.
    """

    def __init__(self, offset, message=None):
        self.offset = offset
        super().__init__(message or f"could not find name or specification for subprogram {offset:#x}")
