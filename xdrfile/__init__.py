#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
xdrfile - Read and write GROMACS XTC and TRR trajectories

A safe wrapper around the libxdrfile codec:

- owned native file handles that are always closed exactly once
- one read/write/seek contract for both trajectory formats
- lazily cached atom counts
- frame iteration that reuses buffers the caller no longer holds
- exceptions that tell end of file, corrupt data and range errors apart

Basic usage:
    from xdrfile import Frame, XTCTrajectory

    with XTCTrajectory.open_read("traj.xtc") as trj:
        frame = Frame.with_capacity(trj.get_num_atoms())
        trj.read(frame)

    for frame in XTCTrajectory.open_read("traj.xtc"):
        print(frame.step, frame.time)
"""

__version__ = "0.3.0"
__license__ = "LGPL-3.0-only"

from .errors import (
    ClosedFileError,
    CouldNotCheckAtomCountError,
    CouldNotOpenError,
    EndOfFileError,
    ErrorCode,
    ErrorKind,
    ErrorTask,
    InvalidPathError,
    NativeError,
    NativeLibraryError,
    NullInPathError,
    OutOfRangeError,
    UnrepresentablePathError,
    WrongSizeFrameError,
    XDRError,
)
from .frame import Frame
from .handle import FileMode, Whence, XDRFile, path_to_native
from .iterator import FrameIterator
from .trajectory import TRRTrajectory, Trajectory, XTCTrajectory, XTC_PRECISION

__all__ = [
    # Trajectories
    'Trajectory',
    'XTCTrajectory',
    'TRRTrajectory',
    'Frame',
    'FrameIterator',
    'XDRFile',
    'FileMode',
    'Whence',
    'path_to_native',
    'XTC_PRECISION',
    # Errors
    'XDRError',
    'ErrorCode',
    'ErrorKind',
    'ErrorTask',
    'CouldNotOpenError',
    'InvalidPathError',
    'UnrepresentablePathError',
    'NullInPathError',
    'WrongSizeFrameError',
    'OutOfRangeError',
    'NativeError',
    'EndOfFileError',
    'CouldNotCheckAtomCountError',
    'ClosedFileError',
    'NativeLibraryError',
]
