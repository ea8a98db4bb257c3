# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import numpy as np

from seqsum.util import ArrayLike, as_readonly_view, check_bounds


def summation(n: int, data: ArrayLike) -> float:
    """
    Sum the first `n` values of `data` strictly from left to right.

    The accumulator starts at 0.0 and every element is added with plain
    IEEE-754 double addition, so NaN and infinities propagate as usual. Asking
    for more elements than `data` holds raises the `IndexError` of the
    underlying view.
    """
    view = as_readonly_view(data)
    res = 0.0
    for i in range(n):
        res += float(view[i])
    return res


def reference_summation(n: int, data: ArrayLike) -> float:
    view = as_readonly_view(data)
    check_bounds(n, view)
    if n <= 0:
        return 0.0
    # np.add.accumulate is sequential, unlike np.sum which sums pairwise.
    padded = np.concatenate((np.zeros(1, dtype=np.float64), view[:n]))
    with np.errstate(all='ignore'):
        partials = np.add.accumulate(padded)
    return float(partials[-1])
