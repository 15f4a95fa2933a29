#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Frame iteration with buffer reuse.

:class:`FrameIterator` reads every remaining frame of a trajectory. A yielded
frame that the caller has let go of is reused for the next read; a frame the
caller still holds is left untouched and a fresh one is allocated instead.
Holding is detected through CPython reference counts on the frame and on its
``coords`` and ``box_vector`` arrays, so keeping only an array (or a numpy
view of one) also protects it. On interpreters without ``sys.getrefcount``
every step allocates a new frame.
"""

import sys

from .errors import CouldNotCheckAtomCountError, XDRError
from .frame import Frame
from .utils.log import get_logger

logger = get_logger(__name__)

_HAS_REFCOUNT = hasattr(sys, 'getrefcount')


class FrameIterator:
    """
    Lazy, finite, non-restartable sequence of frames.

    End of file stops the iteration, including an empty trajectory whose
    atom count lookup already hits the end of file. Any other error is
    raised once from ``__next__``; after that the iterator is exhausted. The
    iterator owns the trajectory and closes it when iteration ends.
    """

    def __init__(self, trajectory):
        self._trajectory = trajectory
        self._frame = None
        # arrays of the current frame, kept to notice if they are swapped out
        self._coords = None
        self._box = None
        self._baseline_refs = ()
        self._num_atoms = None
        self._done = False

    @property
    def trajectory(self):
        return self._trajectory

    def __iter__(self):
        return self

    def _refs(self) -> tuple:
        return (
            sys.getrefcount(self._frame),
            sys.getrefcount(self._coords),
            sys.getrefcount(self._box),
        )

    def _frame_is_shared(self) -> bool:
        if not _HAS_REFCOUNT:
            return True
        if self._frame.coords is not self._coords or self._frame.box_vector is not self._box:
            return True
        return any(now > base for now, base in zip(self._refs(), self._baseline_refs))

    def _next_buffer(self) -> Frame:
        if self._frame is None or self._frame_is_shared():
            self._frame = Frame.with_capacity(self._num_atoms)
            self._coords = self._frame.coords
            self._box = self._frame.box_vector
            if _HAS_REFCOUNT:
                self._baseline_refs = self._refs()
            logger.debug(f"Allocated frame buffer for {self._num_atoms} atoms")
        return self._frame

    def __next__(self) -> Frame:
        if self._done:
            raise StopIteration
        try:
            if self._num_atoms is None:
                try:
                    self._num_atoms = self._trajectory.get_num_atoms()
                except XDRError as e:
                    raise CouldNotCheckAtomCountError(e) from e
            self._trajectory.read(self._next_buffer())
        except XDRError as e:
            self.close()
            if e.is_eof():
                raise StopIteration from None
            raise
        except Exception:
            self.close()
            raise
        return self._frame

    def close(self) -> None:
        """Stop iterating and close the owned trajectory"""
        self._done = True
        self._frame = self._coords = self._box = None
        self._trajectory.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
