# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import dace

N = dace.symbol('N')


@dace.program
def naive_summation(data: dace.float64[N]):
    res = 0.0
    for i in range(N):
        res += data[i]
    return res
