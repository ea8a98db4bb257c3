# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import os
import pickle
import traceback
from typing import Optional

import numpy as np

from seqsum.util import FailureReason, StatusLevel
from seqsum.verification.sampling import DataSampler


class TestCaseGenerator:

    _status: StatusLevel
    _sampler: DataSampler
    _success_dir: Optional[str]
    _failure_dir: Optional[str]


    def __init__(
        self, success_dir: Optional[str], failure_dir: Optional[str],
        status: StatusLevel, sampler: Optional[DataSampler] = None
    ) -> None:
        self._success_dir = success_dir
        self._failure_dir = failure_dir
        self._status = status
        if sampler:
            self._sampler = sampler
        else:
            self._sampler = DataSampler(seed=12121)


    def _save_inputs_dbg(
        self, dir: str, inputs: Optional[dict] = None,
        data_constraints: Optional[tuple] = None
    ) -> None:
        if self._status >= StatusLevel.VERBOSE:
            print('Saving inputs for debugging purposes')
        if inputs is not None:
            with open(os.path.join(dir, 'inputs'), 'wb') as f:
                pickle.dump(inputs, f, protocol=pickle.HIGHEST_PROTOCOL)
            if 'data' in inputs:
                np.save(os.path.join(dir, 'data.npy'), inputs['data'])
        if data_constraints is not None:
            with open(os.path.join(dir, 'constraints'), 'wb') as f:
                pickle.dump(
                    data_constraints, f, protocol=pickle.HIGHEST_PROTOCOL
                )


    def save_failure_case(
        self, reason: FailureReason, details: str,
        iteration: Optional[int] = None,
        exception: Optional[Exception] = None,
        inputs: Optional[dict] = None,
        data_constraints: Optional[tuple] = None
    ) -> None:
        if self._failure_dir is None:
            return
        os.makedirs(self._failure_dir, exist_ok=True)

        # Save additional information about the failure.
        with open(os.path.join(self._failure_dir, reason.value), 'w') as f:
            if details:
                f.writelines([
                    'Reason: ' + reason.value + '\n', 'Details: \n',
                    details, '\n'
                ])
            else:
                f.writelines([
                    'Reason: ' + reason.value + '\n', 'Details: \n-\n'
                ])

            if iteration is not None:
                f.writelines(['Iteration: ' + str(iteration) + '\n'])

            if exception is not None:
                traceback.print_tb(exception.__traceback__, file=f)

        self._save_inputs_dbg(self._failure_dir, inputs, data_constraints)


    def save_success_case(
        self, maximum_length: int = 128,
        data_constraints: Optional[tuple] = None
    ) -> None:
        if self._success_dir is None:
            return
        os.makedirs(self._success_dir, exist_ok=True)
        if self._status >= StatusLevel.VERBOSE:
            print('Sampling a new input set to save for test cases.')
        n = self._sampler.sample_length(maximum_length)
        inputs = {
            'n': n,
            'data': self._sampler.sample_sequence(
                n, constraints=data_constraints
            ),
        }
        self._save_inputs_dbg(self._success_dir, inputs, data_constraints)
