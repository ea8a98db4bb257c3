# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import struct
from enum import Enum
from functools import total_ordering
from typing import Sequence, Union

import numpy as np


ArrayLike = Union[np.ndarray, Sequence[float]]


class FailureReason(Enum):
    EXCEPTION = 'EXCEPTION'
    INPUT_MUTATED = 'INPUT_MUTATED'
    NONDETERMINISTIC = 'NONDETERMINISTIC'
    RESULT_MISMATCH = 'RESULT_MISMATCH'
    PERMUTATION_MISMATCH = 'PERMUTATION_MISMATCH'


@total_ordering
class StatusLevel(Enum):
    OFF = 0
    BAR_ONLY = 1
    DEBUG = 2
    VERBOSE = 3

    def __lt__(self, other):
        if self.__class__ is other.__class__:
            return self.value < other.value
        raise ValueError('Cannot compare StatusLevel to', str(other.__class__))


def as_readonly_view(data: ArrayLike) -> np.ndarray:
    """
    Borrow a read-only, one-dimensional float64 view over `data`.

    A contiguous float64 buffer is not copied, and the caller's own array
    keeps its flags: only the returned view is marked non-writeable. Any other
    input is converted to float64 once.
    """
    arr = np.asarray(data, dtype=np.float64)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    view = arr.view()
    view.flags.writeable = False
    return view


def float_bits(value: float) -> bytes:
    return struct.pack('<d', float(value))


def bits_equal(a: float, b: float) -> bool:
    # NaN payloads are not part of the contract, any NaN matches any NaN.
    if np.isnan(a) and np.isnan(b):
        return True
    return float_bits(a) == float_bits(b)


def sequence_bits_equal(a: np.ndarray, b: np.ndarray) -> bool:
    if a.shape != b.shape:
        return False
    return np.array_equal(
        np.ascontiguousarray(a, dtype=np.float64).view(np.uint64),
        np.ascontiguousarray(b, dtype=np.float64).view(np.uint64)
    )


def check_bounds(n: int, view: np.ndarray) -> None:
    if n > view.shape[0]:
        raise IndexError(
            'index ' + str(view.shape[0]) + ' is out of bounds for ' +
            'a sequence of length ' + str(view.shape[0])
        )


def format_sum(result: float) -> str:
    return 'C-computed Sum = %.2f' % result
