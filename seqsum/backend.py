# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import os
import tempfile
import warnings
from enum import Enum
from typing import Callable, Optional

import numpy as np
from dace import config
from dace.codegen.compiled_sdfg import CompiledSDFG

from seqsum.kernel import summation
from seqsum.programs import naive_summation
from seqsum.util import ArrayLike, StatusLevel, as_readonly_view, check_bounds


# No -ffast-math: the compiler must not reassociate the accumulation.
COMPILER_ARGS = (
    '-std=c++14 -fPIC -Wall -Wextra -O2 ' +
    '-Wno-unused-parameter -Wno-unused-label'
)


SumKernel = Callable[[int, ArrayLike], float]


class SumBackend(Enum):
    PYTHON = 'PYTHON'
    DACE = 'DACE'

    def __str__(self):
        return self.value


class DaceSumKernel:

    _build_dir_base_path: str = 'buildcache'
    _build_dir: Optional[tempfile.TemporaryDirectory] = None
    _compiled: Optional[CompiledSDFG] = None
    status: StatusLevel = StatusLevel.OFF

    def __init__(
        self, build_dir_base_path: str = 'buildcache',
        status: StatusLevel = StatusLevel.OFF
    ):
        self._build_dir_base_path = build_dir_base_path
        self.status = status


    @property
    def is_compiled(self) -> bool:
        return self._compiled is not None


    def compile(self) -> CompiledSDFG:
        if self._compiled is not None:
            return self._compiled

        os.makedirs(self._build_dir_base_path, exist_ok=True)
        self._build_dir = tempfile.TemporaryDirectory(
            prefix='seqsum_dacecache_', dir=self._build_dir_base_path
        )
        with config.temporary_config():
            config.Config.set('compiler', 'cpu', 'args', value=COMPILER_ARGS)
            config.Config.set('compiler', 'allow_view_arguments', value=True)
            config.Config.set('profiling', value=False)
            config.Config.set('debugprint', value=False)
            config.Config.set('cache', value='name')
            config.Config.set(
                'default_build_folder', value=self._build_dir.name
            )
            with warnings.catch_warnings():
                warnings.filterwarnings(
                    'ignore', message='.*already loaded, renaming file.*'
                )
                if self.status >= StatusLevel.DEBUG:
                    print('Compiling summation program')
                sdfg = naive_summation.to_sdfg()
                self._compiled = sdfg.compile()
                if self.status >= StatusLevel.DEBUG:
                    print('Compiled into', self._build_dir.name)
        return self._compiled


    def __call__(self, n: int, data: ArrayLike) -> float:
        view = as_readonly_view(data)
        check_bounds(n, view)
        if n <= 0:
            return 0.0
        program = self.compile()
        ret = program(data=np.ascontiguousarray(view[:n]), N=n)
        return float(np.asarray(ret).reshape(-1)[0])


def get_kernel(
    backend: SumBackend, build_dir_base_path: str = 'buildcache',
    status: StatusLevel = StatusLevel.OFF
) -> SumKernel:
    if backend == SumBackend.PYTHON:
        return summation
    elif backend == SumBackend.DACE:
        return DaceSumKernel(build_dir_base_path, status=status)
    raise NotImplementedError(
        'No kernel available for backend ' + str(backend)
    )
