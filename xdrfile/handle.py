#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Owned native file handles.

:class:`XDRFile` holds exactly one libxdrfile ``XDRFILE*`` together with the
path it was opened from. The handle is closed exactly once: by ``close()``,
on leaving a ``with`` block, or when the object is garbage collected.
"""

import os
from contextlib import contextmanager
from enum import Enum, IntEnum
from pathlib import Path
from typing import Iterator, Union

from .conversions import to_int64
from .errors import (ClosedFileError, CouldNotOpenError, ErrorTask, NullInPathError,
                     OutOfRangeError, UnrepresentablePathError, check_code)
from .native import SEEK_CUR, SEEK_END, SEEK_SET, get_codec
from .utils.log import get_logger

logger = get_logger(__name__)

PathType = Union[str, bytes, os.PathLike]


class FileMode(Enum):
    """File modes understood by libxdrfile"""
    READ = "r"
    WRITE = "w"
    APPEND = "a"

    @property
    def token(self) -> bytes:
        """Single-character native mode string"""
        return self.value.encode('ascii')


class Whence(IntEnum):
    """Reference point of a seek offset"""
    START = SEEK_SET
    CURRENT = SEEK_CUR
    END = SEEK_END


def path_to_native(path: PathType) -> bytes:
    """
    Convert a path to the byte string handed to the native layer.

    Raises
    ------
    UnrepresentablePathError
        The path text cannot be encoded with the filesystem encoding.
    NullInPathError
        The encoded path contains a NUL byte, which would silently truncate
        it on the C side.
    """
    try:
        raw = os.fsencode(path)
    except (UnicodeEncodeError, TypeError) as e:
        raise UnrepresentablePathError(path, str(e)) from e
    position = raw.find(b'\0')
    if position != -1:
        raise NullInPathError(path, position)
    return raw


@contextmanager
def native_path(path: PathType) -> Iterator[bytes]:
    """Native path bytes, dropped as soon as the block exits"""
    yield path_to_native(path)


class XDRFile:
    """A safe wrapper around a libxdrfile XDRFILE handle"""

    def __init__(self, path: PathType, mode: FileMode = FileMode.READ, codec=None):
        """
        Open ``path`` in ``mode``.

        Args:
            path: Trajectory file path
            mode: One of :class:`FileMode`
            codec: Native codec to use (default: :func:`xdrfile.native.get_codec`)

        Raises:
            InvalidPathError: the path has no native representation
            CouldNotOpenError: libxdrfile refused to open the file
        """
        self._handle = None
        self.mode = mode = FileMode(mode)
        self._codec = codec = codec if codec is not None else get_codec()

        with native_path(path) as raw_path:
            self.path = Path(os.fsdecode(raw_path))
            handle = codec.xdrfile_open(raw_path, mode.token)
        if not handle:
            # Something went wrong, but the C API does not tell us what
            raise CouldNotOpenError(path, mode)

        self._handle = handle
        logger.debug(f"Opened {self.path} in mode '{mode.value}'")

    @property
    def codec(self):
        return self._codec

    @property
    def closed(self) -> bool:
        return self._handle is None

    @property
    def handle(self):
        """The raw native handle; raises if the file is closed"""
        if self._handle is None:
            raise ClosedFileError(self.path)
        return self._handle

    def tell(self) -> int:
        """Current absolute byte offset"""
        return int(self._codec.xdr_tell(self.handle))

    def seek(self, offset: int, whence: Whence = Whence.START) -> int:
        """
        Move the file cursor.

        Args:
            offset: Signed byte offset relative to ``whence``
            whence: :class:`Whence` reference point

        Returns:
            The new absolute byte offset
        """
        whence = Whence(whence)
        if whence is Whence.START and offset < 0:
            raise OutOfRangeError('offset', offset, 'non-negative int64', ErrorTask.SEEK)
        native_offset = to_int64(offset, 'offset', ErrorTask.SEEK)
        code = self._codec.xdr_seek(self.handle, native_offset, int(whence))
        check_code(code, ErrorTask.SEEK)
        return self.tell()

    def close(self) -> None:
        """Close the native handle. Calling this more than once is harmless."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        self._codec.xdrfile_close(handle)
        logger.debug(f"Closed {self.path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __del__(self):
        if getattr(self, '_handle', None) is not None:
            logger.warning(f"{self.path} was not closed explicitly; closing it now")
            self.close()

    def __repr__(self):
        state = "closed" if self.closed else "open"
        return f"<XDRFile {str(self.path)!r} mode='{self.mode.value}' {state}>"
