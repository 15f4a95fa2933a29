#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
XTC and TRR trajectories.

Both formats share one contract, :class:`Trajectory`: ``read`` / ``write`` /
``flush`` / ``get_num_atoms`` plus ``seek`` / ``tell`` on the owned
:class:`~xdrfile.handle.XDRFile`. The subclasses only choose the native
record entry points.

Usage:
    from xdrfile import Frame, XTCTrajectory

    with XTCTrajectory.open_read("traj.xtc") as trj:
        frame = Frame.with_capacity(trj.get_num_atoms())
        trj.read(frame)
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from .conversions import from_native_count, to_int32, to_native_count
from .errors import (ClosedFileError, CouldNotCheckAtomCountError, ErrorCode, ErrorTask,
                     WrongSizeFrameError, XDRError, check_code)
from .frame import Frame
from .handle import FileMode, PathType, Whence, XDRFile, native_path
from .iterator import FrameIterator
from .utils.log import get_logger

logger = get_logger(__name__)

# Precision handed to write_xtc (1000 = 0.001 nm)
XTC_PRECISION = 1000.0

_UNSET = object()


def _native_buffers(frame: Frame) -> Tuple[np.ndarray, np.ndarray]:
    """
    Make sure the frame's arrays can be handed to C as float pointers.

    Arrays that are not C-contiguous, writable float32 are replaced on the
    frame by converted copies, so native reads still land in ``frame``.
    """
    for name in ('box_vector', 'coords'):
        array = getattr(frame, name)
        if not (isinstance(array, np.ndarray) and array.dtype == np.float32
                and array.flags.c_contiguous and array.flags.writeable):
            setattr(frame, name, np.array(array, dtype=np.float32, order='C'))
    return _check_shapes(frame.box_vector, frame.coords)


def _write_buffers(frame: Frame) -> Tuple[np.ndarray, np.ndarray]:
    """Float32 C-contiguous views or copies of the frame's arrays; ``frame`` is untouched"""
    box = np.ascontiguousarray(frame.box_vector, dtype=np.float32)
    coords = np.ascontiguousarray(frame.coords, dtype=np.float32)
    return _check_shapes(box, coords)


def _check_shapes(box: np.ndarray, coords: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    if box.shape != (3, 3):
        raise ValueError(f"Box vector must be 3x3, got {box.shape}")
    if coords.ndim != 2 or coords.shape[1] != 3:
        raise ValueError(f"Coordinates must be (n_atoms, 3), got {coords.shape}")
    return box, coords


class Trajectory(ABC):
    """Shared read/write contract of XTC and TRR trajectories"""

    format_name = None

    def __init__(self, path: PathType, mode: FileMode = FileMode.READ, codec=None):
        self._xdr = XDRFile(path, mode, codec)
        self._num_atoms = _UNSET

    @classmethod
    def open(cls, path: PathType, mode: FileMode = FileMode.READ, codec=None):
        return cls(path, mode, codec)

    @classmethod
    def open_read(cls, path: PathType, codec=None):
        """Open a file in read mode"""
        return cls(path, FileMode.READ, codec)

    @classmethod
    def open_write(cls, path: PathType, codec=None):
        """Open a file in write mode, truncating it"""
        return cls(path, FileMode.WRITE, codec)

    @classmethod
    def open_append(cls, path: PathType, codec=None):
        """Open a file in append mode"""
        return cls(path, FileMode.APPEND, codec)

    @property
    def path(self):
        return self._xdr.path

    @property
    def mode(self) -> FileMode:
        return self._xdr.mode

    @property
    def codec(self):
        return self._xdr.codec

    @property
    def closed(self) -> bool:
        return self._xdr.closed

    def _check_open(self, task: ErrorTask) -> None:
        if self._xdr.closed:
            raise ClosedFileError(self.path, task=task)

    # Native entry points, one set per format

    @abstractmethod
    def _read_natoms(self, raw_path: bytes) -> Tuple[int, int]:
        """Returns (status, natoms)"""

    @abstractmethod
    def _read_record(self, natoms: int, box: np.ndarray, coords: np.ndarray) -> Tuple[int, int, float]:
        """Returns (status, step, time)"""

    @abstractmethod
    def _write_record(self, natoms: int, step: int, time: float,
                      box: np.ndarray, coords: np.ndarray) -> int:
        """Returns the native status"""

    # Public contract

    def get_num_atoms(self) -> int:
        """
        Number of atoms per frame.

        The first call scans the file header through the native metadata
        entry point. The outcome, count or exception, is kept for the
        lifetime of this object: later calls return the same count or raise
        the same exception without touching the file again.
        """
        self._check_open(ErrorTask.READ_NUM_ATOMS)
        if self._num_atoms is _UNSET:
            try:
                self._num_atoms = self._scan_num_atoms()
            except XDRError as e:
                self._num_atoms = e
        if isinstance(self._num_atoms, XDRError):
            # fresh traceback, so repeated calls do not keep extending it
            raise self._num_atoms.with_traceback(None)
        return self._num_atoms

    def _scan_num_atoms(self) -> int:
        with native_path(self.path) as raw_path:
            code, natoms = self._read_natoms(raw_path)
        check_code(code, ErrorTask.READ_NUM_ATOMS)
        natoms = from_native_count(natoms, 'num_atoms', ErrorTask.READ_NUM_ATOMS)
        logger.debug(f"{self.path} ({self.format_name}): {natoms} atoms per frame")
        return natoms

    def read(self, frame: Frame) -> None:
        """
        Read the next frame of the trajectory into ``frame`` in place.

        Raises:
            CouldNotCheckAtomCountError: the atom count could not be determined
            WrongSizeFrameError: ``frame`` does not hold exactly one coordinate
                triple per atom; nothing is read
            EndOfFileError: no frame left
            NativeError: the record is corrupt or could not be read
            OutOfRangeError: the stored step is negative
        """
        self._check_open(ErrorTask.READ)
        try:
            num_atoms = self.get_num_atoms()
        except XDRError as e:
            raise CouldNotCheckAtomCountError(e) from e

        if frame.num_atoms != num_atoms:
            raise WrongSizeFrameError(num_atoms, frame.num_atoms, task=ErrorTask.READ)

        natoms = to_int32(num_atoms, 'num_atoms', ErrorTask.READ)
        box, coords = _native_buffers(frame)
        code, step, time = self._read_record(natoms, box, coords)
        check_code(code, ErrorTask.READ)

        frame.step = from_native_count(step, 'step', ErrorTask.READ)
        frame.time = np.float32(time)

    def write(self, frame: Frame) -> None:
        """
        Append ``frame`` to the trajectory.

        Atom count and step must be non-negative and fit the native int32
        width; otherwise :class:`OutOfRangeError` is raised and nothing is
        written. The frame itself is not modified.
        """
        self._check_open(ErrorTask.WRITE)
        natoms = to_native_count(frame.num_atoms, 'num_atoms', ErrorTask.WRITE)
        step = to_native_count(frame.step, 'step', ErrorTask.WRITE)
        box, coords = _write_buffers(frame)

        code = self._write_record(natoms, step, float(frame.time), box, coords)
        check_code(code, ErrorTask.WRITE)

    def flush(self) -> None:
        """Flush buffered records to disk"""
        self._check_open(ErrorTask.FLUSH)
        code = self.codec.xdr_flush(self._xdr.handle)
        check_code(code, ErrorTask.FLUSH)

    def tell(self) -> int:
        """Current absolute byte offset"""
        self._check_open(ErrorTask.SEEK)
        return self._xdr.tell()

    def seek(self, offset: int, whence: Whence = Whence.START) -> int:
        """Move the file cursor; returns the new absolute byte offset"""
        self._check_open(ErrorTask.SEEK)
        return self._xdr.seek(offset, whence)

    def close(self) -> None:
        self._xdr.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __iter__(self) -> FrameIterator:
        """Iterate over the remaining frames; the iterator takes ownership"""
        return FrameIterator(self)

    def __repr__(self):
        state = "closed" if self.closed else "open"
        return f"<{type(self).__name__} {str(self.path)!r} mode='{self.mode.value}' {state}>"


class XTCTrajectory(Trajectory):
    """Read/Write XTC (compressed coordinate) trajectories"""

    format_name = "xtc"

    def __init__(self, path: PathType, mode: FileMode = FileMode.READ, codec=None):
        super().__init__(path, mode, codec)
        # precision reported by the last successful read
        self.precision = XTC_PRECISION

    def _read_natoms(self, raw_path):
        return self.codec.read_xtc_natoms(raw_path)

    def _read_record(self, natoms, box, coords):
        code, step, time, precision = self.codec.read_xtc(self._xdr.handle, natoms, box, coords)
        if code == ErrorCode.OK:
            self.precision = precision
        return code, step, time

    def _write_record(self, natoms, step, time, box, coords):
        return self.codec.write_xtc(self._xdr.handle, natoms, step, time, box, coords, XTC_PRECISION)


class TRRTrajectory(Trajectory):
    """Read/Write TRR (full precision) trajectories"""

    format_name = "trr"

    def _read_natoms(self, raw_path):
        return self.codec.read_trr_natoms(raw_path)

    def _read_record(self, natoms, box, coords):
        # the lambda channel is not part of Frame
        code, step, time, _lambda = self.codec.read_trr(self._xdr.handle, natoms, box, coords)
        return code, step, time

    def _write_record(self, natoms, step, time, box, coords):
        return self.codec.write_trr(self._xdr.handle, natoms, step, time, 0.0, box, coords)
