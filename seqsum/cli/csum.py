# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import argparse

import numpy as np

from seqsum.backend import SumBackend, get_kernel
from seqsum.util import format_sum


DEFAULT_VALUES = [1, 2, 3, 4, 5]


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Sequential double-precision summation'
    )

    parser.add_argument(
        'values',
        type=float,
        nargs='*',
        help='<values to sum, defaults to 1 2 3 4 5>',
    )

    parser.add_argument(
        '-b',
        '--backend',
        type=SumBackend,
        choices=list(SumBackend),
        help='Kernel implementation to run',
        default=SumBackend.PYTHON
    )

    parser.add_argument(
        '--build-dir',
        type=str,
        help='<PATH TO BUILD CACHE FOLDER FOR NATIVE BACKENDS>',
        default='buildcache'
    )

    args = parser.parse_args(argv)

    x = np.array(
        args.values if args.values else DEFAULT_VALUES, dtype=np.float64
    )
    n = x.shape[0]

    kernel = get_kernel(args.backend, build_dir_base_path=args.build_dir)
    result = kernel(n, x)

    print(format_sum(result))
    return 0


if __name__ == '__main__':
    exit(main())
