# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import argparse
import json
import os
import warnings
from typing import Optional, Tuple

from seqsum.backend import SumBackend, get_kernel
from seqsum.util import StatusLevel
from seqsum.verification.sampling import SamplingStrategy
from seqsum.verification.verifier import KernelVerifier


def load_data_constraints(path: str) -> Optional[Tuple[float, float]]:
    with open(path, 'r') as dc_file:
        constraints = json.load(dc_file)
    if 'data' not in constraints:
        return None
    low, high = constraints['data']
    return float(low), float(high)


def main():
    parser = argparse.ArgumentParser(
        description='Fuzzing-Based Summation Kernel Verifier'
    )

    parser.add_argument(
        '-b',
        '--backend',
        type=SumBackend,
        choices=list(SumBackend),
        help='Kernel implementation to verify',
        default=SumBackend.PYTHON
    )

    parser.add_argument(
        '-r',
        '--runs',
        type=int,
        help='<number of validation runs to perform>',
        default=200
    )

    parser.add_argument(
        '--maxn',
        type=int,
        help='<Maximum sequence length>',
        default=128
    )

    parser.add_argument(
        '-o',
        '--output',
        type=str,
        help='<PATH TO OUTPUT FOLDER>',
    )

    parser.add_argument(
        '--success-dir',
        type=str,
        help='<PATH TO SUCCESS CASE FOLDER>',
    )

    parser.add_argument(
        '--build-dir',
        type=str,
        help='<PATH TO BUILD CACHE FOLDER FOR NATIVE BACKENDS>',
        default='buildcache'
    )

    parser.add_argument(
        '--enforce-finiteness',
        action=argparse.BooleanOptionalAction,
        help='Resample inputs whose sum is not finite',
    )

    parser.add_argument(
        '-s',
        '--sampling-strategy',
        type=SamplingStrategy,
        choices=list(SamplingStrategy),
        help='Strategy to use for sampling testing data',
        default=SamplingStrategy.SIMPLE_UNIFORM
    )

    parser.add_argument(
        '--data-constraints-file',
        type=str,
        help='<Path to constraints file for the input sequence>'
    )

    args = parser.parse_args()

    data_constraints = None
    dc_file_path = args.data_constraints_file
    if dc_file_path is not None:
        if not os.path.isfile(dc_file_path):
            print('Constraints file', dc_file_path, 'not found')
            exit(1)
        data_constraints = load_data_constraints(dc_file_path)

    if args.output is not None:
        if not os.path.exists(args.output):
            os.makedirs(args.output, exist_ok=True)
    output_dir = args.output if (
        args.output is not None and os.path.exists(args.output)
    ) else None

    if args.success_dir is not None:
        if not os.path.exists(args.success_dir):
            os.makedirs(args.success_dir, exist_ok=True)
    success_dir = args.success_dir if (
        args.success_dir is not None and os.path.exists(args.success_dir)
    ) else None

    warnings.filterwarnings(
        'ignore', message='.*already loaded, renaming file.*'
    )

    kernel = get_kernel(
        args.backend, build_dir_base_path=args.build_dir,
        status=StatusLevel.BAR_ONLY
    )
    verifier = KernelVerifier(
        kernel, args.sampling_strategy, output_dir=output_dir,
        success_dir=success_dir, status=StatusLevel.BAR_ONLY
    )

    enforce_finiteness = True if args.enforce_finiteness else False
    valid, dt = verifier.verify(
        args.runs, maximum_length=args.maxn,
        enforce_finiteness=enforce_finiteness,
        data_constraints=data_constraints
    )

    print('Kernel is valid' if valid else 'INVALID Kernel!')
    print('Time taken (s):', dt / 1e9)
    exit(0 if valid else 1)


if __name__ == '__main__':
    main()
