# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import argparse
import os
from typing import Dict, Tuple

from alive_progress import alive_bar

from seqsum.backend import SumBackend, get_kernel
from seqsum.util import StatusLevel
from seqsum.verification.sampling import SamplingStrategy
from seqsum.verification.verifier import KernelVerifier


def verify_all(
    backends, runs: int = 100, maximum_length: int = 128,
    output_base: str = os.path.join('.testdata', 'kernels'),
    build_dir: str = 'buildcache'
) -> Dict[Tuple[str, str], bool]:
    verify_dict = dict()
    n_total = len(backends) * len(SamplingStrategy)
    with alive_bar(n_total, title='Verifying kernels') as bar:
        for backend in backends:
            kernel = get_kernel(backend, build_dir_base_path=build_dir)
            for strategy in SamplingStrategy:
                bar.text = str(backend) + ' / ' + str(strategy)
                out_dir = os.path.join(
                    output_base, str(backend), 'fails', str(strategy)
                )
                verifier = KernelVerifier(
                    kernel, strategy, output_dir=out_dir,
                    status=StatusLevel.OFF
                )
                valid, _ = verifier.verify(
                    n_samples=runs, maximum_length=maximum_length
                )
                verify_dict[(str(backend), str(strategy))] = valid
                bar()
    return verify_dict


def print_report(verify_dict: Dict[Tuple[str, str], bool]) -> None:
    print('+---------------------------------------+')
    print('| Verification completed                |')
    print('+---------------------------------------+')
    row_format = ('| {:<30} {:>6} |')
    for (backend, strategy), valid in verify_dict.items():
        print(row_format.format(
            backend + ' ' + strategy, ('valid' if valid else 'FAIL')
        ))
    print('+---------------------------------------+')


def main():
    parser = argparse.ArgumentParser(
        description='Verify every summation backend with every sampling ' +
            'strategy'
    )

    parser.add_argument(
        '-b',
        '--backend',
        type=SumBackend,
        choices=list(SumBackend),
        action='append',
        help='Kernel implementation to verify, may be repeated',
    )

    parser.add_argument(
        '-r',
        '--runs',
        type=int,
        help='<number of validation runs per strategy>',
        default=100
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
        default=os.path.join('.testdata', 'kernels')
    )

    parser.add_argument(
        '--build-dir',
        type=str,
        help='<PATH TO BUILD CACHE FOLDER FOR NATIVE BACKENDS>',
        default='buildcache'
    )

    args = parser.parse_args()

    backends = args.backend if args.backend else list(SumBackend)
    verify_dict = verify_all(
        backends, runs=args.runs, maximum_length=args.maxn,
        output_base=args.output, build_dir=args.build_dir
    )
    print_report(verify_dict)
    exit(0 if all(verify_dict.values()) else 1)


if __name__ == '__main__':
    main()
