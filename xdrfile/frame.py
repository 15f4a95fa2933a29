#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Trajectory frame data structure.
"""

from dataclasses import dataclass, field

import numpy as np


def _zero_box() -> np.ndarray:
    return np.zeros((3, 3), dtype=np.float32)


def _no_coords() -> np.ndarray:
    return np.zeros((0, 3), dtype=np.float32)


@dataclass(eq=False)
class Frame:
    """
    One trajectory snapshot.

    ``box_vector`` and ``coords`` are float32 C-contiguous arrays so the
    native layer can read and write them in place. A frame is reused across
    reads; use :meth:`copy` to keep a snapshot.
    """

    step: int = 0
    time: float = 0.0
    box_vector: np.ndarray = field(default_factory=_zero_box)
    coords: np.ndarray = field(default_factory=_no_coords)

    def __post_init__(self):
        self.step = int(self.step)
        if self.step < 0:
            raise ValueError(f"Step must be non-negative, got {self.step}")
        self.time = np.float32(self.time)
        self.box_vector = np.ascontiguousarray(self.box_vector, dtype=np.float32)
        if self.box_vector.shape != (3, 3):
            raise ValueError(f"Box vector must be 3x3, got {self.box_vector.shape}")
        self.coords = np.ascontiguousarray(self.coords, dtype=np.float32)
        if self.coords.size == 0:
            self.coords = self.coords.reshape(0, 3)
        if self.coords.ndim != 2 or self.coords.shape[1] != 3:
            raise ValueError(f"Coordinates must be (n_atoms, 3), got {self.coords.shape}")

    @classmethod
    def with_capacity(cls, num_atoms: int) -> "Frame":
        """Frame with a zero-filled coordinate buffer for ``num_atoms`` atoms"""
        if num_atoms < 0:
            raise ValueError(f"Number of atoms must be non-negative, got {num_atoms}")
        return cls(coords=np.zeros((num_atoms, 3), dtype=np.float32))

    @property
    def num_atoms(self) -> int:
        return len(self.coords)

    def copy(self) -> "Frame":
        return Frame(
            step=self.step,
            time=self.time,
            box_vector=self.box_vector.copy(),
            coords=self.coords.copy(),
        )

    __copy__ = copy

    def __deepcopy__(self, memo):
        return self.copy()

    def __eq__(self, other):
        if not isinstance(other, Frame):
            return NotImplemented
        return (
            self.step == other.step
            and self.time == other.time
            and np.array_equal(self.box_vector, other.box_vector)
            and np.array_equal(self.coords, other.coords)
        )

    __hash__ = None
