"""
Error taxonomy and tagged results for darkroom

Every public session operation returns a Result: either Ok(value) or
Err(kind, message). ProcessingError is only raised between internal
components and is converted to an Err at the session boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Status codes shared with host applications"""
    SUCCESS = 0
    FILE_NOT_FOUND = -1
    INVALID_FORMAT = -2
    MEMORY_ALLOCATION = -3
    PROCESSING_FAILED = -4
    INVALID_PARAMETERS = -5
    DECODE_LIBRARY_ERROR = -6
    PRIMITIVES_LIBRARY_ERROR = -7
    UNKNOWN = -999


class ProcessingError(Exception):
    """Internal failure carrying an ErrorKind"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ProcessingError({self.kind.name}, {self.message!r})"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Tagged result of a boundary operation

    Exactly one of ``value`` (on success) or ``message`` (on failure) is
    meaningful. Build instances with ``Result.ok`` / ``Result.err``.
    """
    kind: ErrorKind
    value: Optional[T] = None
    message: str = ""

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(kind=ErrorKind.SUCCESS, value=value)

    @classmethod
    def err(cls, kind: ErrorKind, message: str) -> "Result[T]":
        if kind is ErrorKind.SUCCESS:
            raise ValueError("An error result needs a failure kind")
        return cls(kind=kind, message=message)

    @classmethod
    def from_error(cls, error: ProcessingError) -> "Result[T]":
        return cls.err(error.kind, error.message)

    @property
    def is_success(self) -> bool:
        return self.kind is ErrorKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.kind is not ErrorKind.SUCCESS

    @property
    def code(self) -> int:
        return self.kind.value

    def unwrap(self) -> T:
        """Return the value or raise the contained error"""
        if self.is_error:
            raise ProcessingError(self.kind, self.message)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """Wire form used by host bridges and the CLI"""
        if self.is_error:
            return {"code": self.code, "error": self.message}
        value = self.value
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        return {"code": self.code, "data": value}


def Ok(value: T) -> Result[T]:
    return Result.ok(value)


def Err(kind: ErrorKind, message: str) -> Result[Any]:
    return Result.err(kind, message)


# Payload-specific aliases, for annotations
ImageResult = Result["RasterImage"]
MetadataResult = Result["RawMetadata"]
BoolResult = Result[bool]
StringResult = Result[str]
