#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Native codec ABI.

The byte-level encoding of XTC/TRR records (including the lossy XTC
compression) lives in libxdrfile. This package talks to it only through the
record-oriented entry points declared by :class:`NativeCodec`: opaque
handles in, status codes and out-values back. :class:`LibXDRFile` binds the
ABI to the shared library with ctypes; any other object implementing
:class:`NativeCodec` can be injected instead.
"""

from .base import NativeCodec, SEEK_SET, SEEK_CUR, SEEK_END
from .libxdrfile import LibXDRFile, find_library

_default_codec = None


def get_codec() -> NativeCodec:
    """Process-wide default codec, loaded on first use"""
    global _default_codec
    if _default_codec is None:
        _default_codec = LibXDRFile()
    return _default_codec


def set_codec(codec):
    """Replace the default codec; returns the previous one (may be None)"""
    global _default_codec
    previous = _default_codec
    _default_codec = codec
    return previous


__all__ = [
    'NativeCodec',
    'LibXDRFile',
    'find_library',
    'get_codec',
    'set_codec',
    'SEEK_SET',
    'SEEK_CUR',
    'SEEK_END',
]
