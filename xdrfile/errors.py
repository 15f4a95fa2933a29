#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
xdrfile Exception Hierarchy

Every native status code and every failed boundary conversion is translated
into one of the exceptions below before it reaches the caller. Raw libxdrfile
codes are only available through the ``code`` accessor.
"""

from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union


class ErrorCode(IntEnum):
    """Status codes returned by libxdrfile"""

    OK = 0
    HEADER = 1
    STRING = 2
    DOUBLE = 3
    INT = 4
    FLOAT = 5
    UINT = 6
    COMPRESSED_3DX = 7
    CLOSE = 8
    MAGIC = 9
    NOMEM = 10
    ENDOFFILE = 11
    FILENOTFOUND = 12

    @classmethod
    def lookup(cls, code: int) -> Union["ErrorCode", int]:
        """Return the enum member for ``code``, or the plain int if unknown"""
        try:
            return cls(code)
        except ValueError:
            return int(code)


_CODE_MESSAGES = {
    ErrorCode.HEADER: "header read/write failed",
    ErrorCode.STRING: "string read/write failed",
    ErrorCode.DOUBLE: "double read/write failed",
    ErrorCode.INT: "integer read/write failed",
    ErrorCode.FLOAT: "float read/write failed",
    ErrorCode.UINT: "unsigned integer read/write failed",
    ErrorCode.COMPRESSED_3DX: "compressed coordinates read/write failed",
    ErrorCode.CLOSE: "could not close file",
    ErrorCode.MAGIC: "bad magic number, not a trajectory of this format",
    ErrorCode.NOMEM: "native layer ran out of memory",
    ErrorCode.ENDOFFILE: "end of file",
    ErrorCode.FILENOTFOUND: "file not found",
}


class ErrorKind(Enum):
    """Kinds of failure, independent of the concrete exception class"""

    COULD_NOT_OPEN = "could_not_open"
    INVALID_PATH = "invalid_path"
    WRONG_SIZE_FRAME = "wrong_size_frame"
    OUT_OF_RANGE = "out_of_range"
    NATIVE_FAILURE = "native_failure"
    COULD_NOT_CHECK_ATOM_COUNT = "could_not_check_atom_count"
    CLOSED = "closed"
    NATIVE_LIBRARY = "native_library"


class ErrorTask(Enum):
    """The trajectory operation during which an error happened"""

    READ = "read"
    WRITE = "write"
    SEEK = "seek"
    FLUSH = "flush"
    READ_NUM_ATOMS = "read_num_atoms"


class XDRError(Exception):
    """
    Base exception for all xdrfile errors.

    Parameters
    ----------
    message : str
        Human-readable error message
    kind : ErrorKind
        Kind of failure for programmatic handling
    task : ErrorTask, optional
        Operation that failed
    context : dict, optional
        Additional context information
    """

    kind = None

    def __init__(
        self,
        message: str,
        task: Optional[ErrorTask] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.task = task
        self.context = context or {}
        super().__init__(message)

    @property
    def code(self) -> Optional[Union[ErrorCode, int]]:
        """Native status code behind this error, if any"""
        return None

    def is_eof(self) -> bool:
        """True if this error marks the regular end of a trajectory"""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization"""
        code = self.code
        return {
            'error': type(self).__name__,
            'kind': self.kind.value if self.kind else None,
            'message': self.message,
            'task': self.task.value if self.task else None,
            'code': int(code) if code is not None else None,
            'context': self.context,
        }

    def __str__(self):
        if self.task is not None:
            return f"{self.message} (during {self.task.value})"
        return self.message


class CouldNotOpenError(XDRError, OSError):
    """The native open returned NULL; libxdrfile gives no further detail"""

    kind = ErrorKind.COULD_NOT_OPEN

    def __init__(self, path, mode):
        self.path = path
        self.mode = mode
        super().__init__(
            f"Could not open file {path!s} in mode {mode.name.lower()}",
            context={'path': str(path), 'mode': mode.name},
        )


class InvalidPathError(XDRError, ValueError):
    """The path has no native (null-terminated byte string) representation"""

    kind = ErrorKind.INVALID_PATH

    def __init__(self, message: str, path):
        self.path = path
        super().__init__(message, context={'path': repr(path)})


class UnrepresentablePathError(InvalidPathError):
    """Path text cannot be encoded to bytes (detected before construction)"""

    def __init__(self, path, reason: str = ""):
        detail = f": {reason}" if reason else ""
        super().__init__(f"Path {path!r} cannot be encoded for the native layer{detail}", path)


class NullInPathError(InvalidPathError):
    """Path contains a NUL byte (detected during construction)"""

    def __init__(self, path, position: int):
        self.position = position
        super().__init__(f"Path {path!r} contains a NUL byte at position {position}", path)
        self.context['position'] = position


class WrongSizeFrameError(XDRError, ValueError):
    """A frame's coordinate buffer does not match the trajectory's atom count"""

    kind = ErrorKind.WRONG_SIZE_FRAME

    def __init__(self, expected: int, actual: int, task: Optional[ErrorTask] = ErrorTask.READ):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Frame holds {actual} atoms but the trajectory has {expected}",
            task=task,
            context={'expected': expected, 'actual': actual},
        )


class OutOfRangeError(XDRError, OverflowError):
    """A value does not fit the native width required for a task"""

    kind = ErrorKind.OUT_OF_RANGE

    def __init__(self, field: str, value: int, target: str, task: ErrorTask):
        self.field = field
        self.value = value
        self.target = target
        super().__init__(
            f"Value {value} of '{field}' cannot be represented as {target}",
            task=task,
            context={'field': field, 'value': value, 'target': target},
        )


class NativeError(XDRError):
    """libxdrfile returned a non-zero status"""

    kind = ErrorKind.NATIVE_FAILURE

    def __init__(self, code: int, task: Optional[ErrorTask] = None):
        self._code = ErrorCode.lookup(code)
        reason = _CODE_MESSAGES.get(self._code, "unknown native error")
        super().__init__(f"Native error {int(code)}: {reason}", task=task)

    @property
    def code(self) -> Union[ErrorCode, int]:
        return self._code

    def is_eof(self) -> bool:
        return self._code == ErrorCode.ENDOFFILE


class EndOfFileError(NativeError, EOFError):
    """The regular end of a trajectory was reached while reading a record"""

    def __init__(self, task: Optional[ErrorTask] = ErrorTask.READ):
        super().__init__(ErrorCode.ENDOFFILE, task=task)


class CouldNotCheckAtomCountError(XDRError):
    """The atom count needed by ``read`` could not be determined"""

    kind = ErrorKind.COULD_NOT_CHECK_ATOM_COUNT

    def __init__(self, cause: XDRError, task: Optional[ErrorTask] = ErrorTask.READ):
        self.cause = cause
        super().__init__(f"Could not check the number of atoms: {cause.message}", task=task)

    @property
    def code(self):
        return self.cause.code

    def is_eof(self) -> bool:
        return self.cause.is_eof()


class ClosedFileError(XDRError, ValueError):
    """An operation was attempted on a closed file or trajectory"""

    kind = ErrorKind.CLOSED

    def __init__(self, path=None, task: Optional[ErrorTask] = None):
        self.path = path
        super().__init__(f"I/O operation on closed trajectory file {path!s}", task=task)


class NativeLibraryError(XDRError, ImportError):
    """The shared libxdrfile library could not be loaded"""

    kind = ErrorKind.NATIVE_LIBRARY


def check_code(code: int, task: ErrorTask) -> None:
    """
    Translate a native status into an exception.

    Zero is success. The end-of-file code raises :class:`EndOfFileError`,
    anything else a :class:`NativeError` tagged with ``task``.
    """
    if code == ErrorCode.OK:
        return
    if code == ErrorCode.ENDOFFILE:
        raise EndOfFileError(task=task)
    raise NativeError(code, task=task)
