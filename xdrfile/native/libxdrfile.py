#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ctypes binding of the shared libxdrfile library.

The library is located through, in order: an explicit path, the
``XDRFILE_LIBRARY`` environment variable, the ``native.library`` config key
and finally :func:`ctypes.util.find_library` over ``native.search_names``.
"""

import ctypes
import ctypes.util
import os
from typing import Optional

import numpy as np

from ..errors import NativeLibraryError
from ..utils.config import get_config
from ..utils.log import get_logger
from .base import NativeCodec

logger = get_logger(__name__)

LIBRARY_ENV_VAR = "XDRFILE_LIBRARY"

_c_float_p = ctypes.POINTER(ctypes.c_float)
_c_int_p = ctypes.POINTER(ctypes.c_int)

# name: (restype, argtypes)
_PROTOTYPES = {
    'xdrfile_open': (ctypes.c_void_p, [ctypes.c_char_p, ctypes.c_char_p]),
    'xdrfile_close': (ctypes.c_int, [ctypes.c_void_p]),
    'read_xtc_natoms': (ctypes.c_int, [ctypes.c_char_p, _c_int_p]),
    'read_xtc': (ctypes.c_int, [ctypes.c_void_p, ctypes.c_int, _c_int_p, _c_float_p,
                                _c_float_p, _c_float_p, _c_float_p]),
    'write_xtc': (ctypes.c_int, [ctypes.c_void_p, ctypes.c_int, ctypes.c_int, ctypes.c_float,
                                 _c_float_p, _c_float_p, ctypes.c_float]),
    'read_trr_natoms': (ctypes.c_int, [ctypes.c_char_p, _c_int_p]),
    'read_trr': (ctypes.c_int, [ctypes.c_void_p, ctypes.c_int, _c_int_p, _c_float_p, _c_float_p,
                                _c_float_p, _c_float_p, _c_float_p, _c_float_p]),
    'write_trr': (ctypes.c_int, [ctypes.c_void_p, ctypes.c_int, ctypes.c_int, ctypes.c_float,
                                 ctypes.c_float, _c_float_p, _c_float_p, _c_float_p, _c_float_p]),
    'xdr_seek': (ctypes.c_int, [ctypes.c_void_p, ctypes.c_int64, ctypes.c_int]),
    'xdr_tell': (ctypes.c_int64, [ctypes.c_void_p]),
    'xdr_flush': (ctypes.c_int, [ctypes.c_void_p]),
}


def find_library(path=None) -> Optional[str]:
    """Resolve the location of the shared library, or None if not found"""
    if path:
        return str(path)
    env_path = os.environ.get(LIBRARY_ENV_VAR)
    if env_path:
        return env_path
    config = get_config()
    configured = config.get('native.library')
    if configured:
        return str(configured)
    for name in config.get('native.search_names', []):
        found = ctypes.util.find_library(name)
        if found:
            return found
    return None


def _float_ptr(array: np.ndarray):
    return array.ctypes.data_as(_c_float_p)


class LibXDRFile(NativeCodec):
    """libxdrfile loaded with ctypes"""

    def __init__(self, path=None):
        location = find_library(path)
        if location is None:
            raise NativeLibraryError(
                "libxdrfile not found. Install it or point "
                f"{LIBRARY_ENV_VAR} / native.library at the shared library."
            )
        try:
            self._lib = ctypes.CDLL(location)
        except OSError as e:
            raise NativeLibraryError(f"Could not load libxdrfile from {location}: {e}") from e
        self.location = location

        for name, (restype, argtypes) in _PROTOTYPES.items():
            try:
                func = getattr(self._lib, name)
            except AttributeError as e:
                raise NativeLibraryError(f"{location} does not export {name}") from e
            func.restype = restype
            func.argtypes = argtypes
        logger.debug(f"Loaded libxdrfile from {location}")

    def xdrfile_open(self, path, mode):
        return self._lib.xdrfile_open(path, mode)

    def xdrfile_close(self, handle):
        return self._lib.xdrfile_close(handle)

    def read_xtc_natoms(self, path):
        natoms = ctypes.c_int(0)
        code = self._lib.read_xtc_natoms(path, ctypes.byref(natoms))
        return code, natoms.value

    def read_xtc(self, handle, natoms, box, coords):
        step = ctypes.c_int(0)
        time = ctypes.c_float(0.0)
        precision = ctypes.c_float(0.0)
        code = self._lib.read_xtc(handle, natoms, ctypes.byref(step), ctypes.byref(time),
                                  _float_ptr(box), _float_ptr(coords), ctypes.byref(precision))
        return code, step.value, time.value, precision.value

    def write_xtc(self, handle, natoms, step, time, box, coords, precision):
        return self._lib.write_xtc(handle, natoms, step, time,
                                   _float_ptr(box), _float_ptr(coords), precision)

    def read_trr_natoms(self, path):
        natoms = ctypes.c_int(0)
        code = self._lib.read_trr_natoms(path, ctypes.byref(natoms))
        return code, natoms.value

    def read_trr(self, handle, natoms, box, coords):
        step = ctypes.c_int(0)
        time = ctypes.c_float(0.0)
        lambda_ = ctypes.c_float(0.0)
        # velocities and forces are not requested
        code = self._lib.read_trr(handle, natoms, ctypes.byref(step), ctypes.byref(time),
                                  ctypes.byref(lambda_), _float_ptr(box), _float_ptr(coords),
                                  None, None)
        return code, step.value, time.value, lambda_.value

    def write_trr(self, handle, natoms, step, time, lambda_, box, coords):
        return self._lib.write_trr(handle, natoms, step, time, lambda_,
                                   _float_ptr(box), _float_ptr(coords), None, None)

    def xdr_seek(self, handle, offset, whence):
        return self._lib.xdr_seek(handle, offset, whence)

    def xdr_tell(self, handle):
        return self._lib.xdr_tell(handle)

    def xdr_flush(self, handle):
        return self._lib.xdr_flush(handle)
