#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Checked integer conversions at the native boundary.

ctypes truncates Python ints silently when they are passed as C ints, so
every value that crosses into or out of libxdrfile goes through one of these
helpers first. A value that does not fit raises :class:`OutOfRangeError`
carrying the field name, the offending value, the target width and the task.
"""

from .errors import ErrorTask, OutOfRangeError

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_WIDTHS = {
    'int32': (INT32_MIN, INT32_MAX),
    'int64': (INT64_MIN, INT64_MAX),
}


def to_native(value, field: str, task: ErrorTask, target: str = 'int32') -> int:
    """Narrow a Python int to a signed native width"""
    low, high = _WIDTHS[target]
    value = int(value)
    if not low <= value <= high:
        raise OutOfRangeError(field, value, target, task)
    return value


def to_int32(value, field: str, task: ErrorTask) -> int:
    return to_native(value, field, task, 'int32')


def to_int64(value, field: str, task: ErrorTask) -> int:
    return to_native(value, field, task, 'int64')


def from_native_count(value, field: str, task: ErrorTask) -> int:
    """
    Widen a native signed value into a non-negative Python int.

    Steps and atom counts are unsigned on the Python side; a negative native
    value cannot be represented and is reported as out of range.
    """
    value = int(value)
    if value < 0:
        raise OutOfRangeError(field, value, 'non-negative int', task)
    return value


def to_native_count(value, field: str, task: ErrorTask) -> int:
    """
    Narrow a non-negative Python int to a native int32.

    The inverse of :func:`from_native_count`: a negative value is rejected as
    well, so nothing is written that could not be read back.
    """
    value = int(value)
    if value < 0:
        raise OutOfRangeError(field, value, 'int32', task)
    return to_int32(value, field, task)
