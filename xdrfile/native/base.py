#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Abstract native codec interface.

Methods mirror the libxdrfile C functions one to one. C out-parameters are
returned as extra tuple members after the status code; frame buffers
(``box``, ``coords``) are float32 numpy arrays that the codec fills or reads
in place.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

import numpy as np

# stdio whence codes expected by xdr_seek
SEEK_SET = 0
SEEK_CUR = 1
SEEK_END = 2


class NativeCodec(ABC):
    """Record-oriented ABI of the XDR trajectory codec"""

    @abstractmethod
    def xdrfile_open(self, path: bytes, mode: bytes) -> Optional[Any]:
        """Open ``path``; returns an opaque handle or None on failure"""
        pass

    @abstractmethod
    def xdrfile_close(self, handle) -> int:
        pass

    @abstractmethod
    def read_xtc_natoms(self, path: bytes) -> Tuple[int, int]:
        """Returns (status, natoms)"""
        pass

    @abstractmethod
    def read_xtc(self, handle, natoms: int, box: np.ndarray,
                 coords: np.ndarray) -> Tuple[int, int, float, float]:
        """Returns (status, step, time, precision)"""
        pass

    @abstractmethod
    def write_xtc(self, handle, natoms: int, step: int, time: float,
                  box: np.ndarray, coords: np.ndarray, precision: float) -> int:
        pass

    @abstractmethod
    def read_trr_natoms(self, path: bytes) -> Tuple[int, int]:
        """Returns (status, natoms)"""
        pass

    @abstractmethod
    def read_trr(self, handle, natoms: int, box: np.ndarray,
                 coords: np.ndarray) -> Tuple[int, int, float, float]:
        """Returns (status, step, time, lambda)"""
        pass

    @abstractmethod
    def write_trr(self, handle, natoms: int, step: int, time: float,
                  lambda_: float, box: np.ndarray, coords: np.ndarray) -> int:
        pass

    @abstractmethod
    def xdr_seek(self, handle, offset: int, whence: int) -> int:
        pass

    @abstractmethod
    def xdr_tell(self, handle) -> int:
        pass

    @abstractmethod
    def xdr_flush(self, handle) -> int:
        pass
