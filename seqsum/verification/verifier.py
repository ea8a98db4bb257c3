# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import time
from typing import Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from seqsum.backend import SumKernel
from seqsum.kernel import reference_summation
from seqsum.util import (FailureReason, StatusLevel, bits_equal,
                         sequence_bits_equal)
from seqsum.verification.sampling import DataSampler, SamplingStrategy
from seqsum.verification.testcase_generator import TestCaseGenerator


# Draws per sample before a non-finite result is accepted.
MAX_SAMPLING_ATTEMPTS = 12


class KernelVerifier:

    kernel: SumKernel = None
    reference: SumKernel = None
    sampling_strategy: SamplingStrategy = SamplingStrategy.SIMPLE_UNIFORM
    output_dir: Optional[str] = None
    success_dir: Optional[str] = None
    sampler: DataSampler = None
    tc_generator: TestCaseGenerator = None
    status: StatusLevel = StatusLevel.BAR_ONLY

    _time_measurements: Dict[str, List[int]] = None

    def __init__(
        self,
        kernel: SumKernel,
        sampling_strategy: SamplingStrategy = SamplingStrategy.SIMPLE_UNIFORM,
        output_dir: Optional[str] = None, success_dir: Optional[str] = None,
        status: StatusLevel = StatusLevel.BAR_ONLY,
        reference: SumKernel = reference_summation, seed: int = 12121
    ):
        self.kernel = kernel
        self.reference = reference
        self.sampling_strategy = sampling_strategy
        self.output_dir = output_dir
        self.success_dir = success_dir
        self.sampler = DataSampler(sampling_strategy, seed=seed)
        self.status = status
        self.tc_generator = TestCaseGenerator(
            self.success_dir, self.output_dir, self.status, self.sampler
        )
        self._time_measurements = {
            'sampling': [],
            'running': [],
            'reference': [],
            'comparing': [],
        }


    def _fail(
        self, reason: FailureReason, details: str, iteration: int,
        inputs: dict, data_constraints: Optional[Tuple[float, float]],
        bar: tqdm, exception: Optional[Exception] = None
    ) -> bool:
        if self.status >= StatusLevel.VERBOSE:
            bar.write(reason.value + ': ' + details)
        self.tc_generator.save_failure_case(
            reason, details, iteration=iteration, exception=exception,
            inputs=inputs, data_constraints=data_constraints
        )
        return False


    def _do_verify(
        self, n_samples: int = 1, maximum_length: int = 128,
        enforce_finiteness: bool = False,
        data_constraints: Optional[Tuple[float, float]] = None
    ) -> bool:
        if self.status >= StatusLevel.DEBUG:
            print(
                'Verifying kernel over', n_samples,
                'sampling run' + ('s' if n_samples > 1 else '')
            )

        with tqdm(
            total=n_samples, disable=(self.status == StatusLevel.OFF)
        ) as bar:
            i = 0
            resample_attempt = 0
            decay_by = 0
            decays = []
            full_resampling_failures = 0
            last_decay = 0
            while i < n_samples:
                if self.status >= StatusLevel.VERBOSE:
                    bar.write('Sampling inputs')
                t0 = time.perf_counter_ns()
                n = self.sampler.sample_length(maximum_length)
                data = self.sampler.sample_sequence(
                    n, decay_by, constraints=data_constraints
                )
                inputs_save = {'n': n, 'data': data.copy()}
                self._time_measurements['sampling'].append(
                    time.perf_counter_ns() - t0
                )

                if self.status >= StatusLevel.VERBOSE:
                    bar.write('Running kernel on ' + str(n) + ' values')
                t0 = time.perf_counter_ns()
                try:
                    result = self.kernel(n, data)
                    repeated = self.kernel(n, data)
                except Exception as e:
                    return self._fail(
                        FailureReason.EXCEPTION, str(e), i, inputs_save,
                        data_constraints, bar, exception=e
                    )
                self._time_measurements['running'].append(
                    time.perf_counter_ns() - t0
                )

                t0 = time.perf_counter_ns()
                expected = self.reference(n, inputs_save['data'])
                self._time_measurements['reference'].append(
                    time.perf_counter_ns() - t0
                )

                t0 = time.perf_counter_ns()
                if self.status >= StatusLevel.VERBOSE:
                    bar.write('Comparing results')
                if not sequence_bits_equal(data, inputs_save['data']):
                    return self._fail(
                        FailureReason.INPUT_MUTATED,
                        'Kernel modified its input sequence',
                        i, inputs_save, data_constraints, bar
                    )
                if not bits_equal(result, repeated):
                    return self._fail(
                        FailureReason.NONDETERMINISTIC,
                        f'Repeated runs returned {result!r} and {repeated!r}',
                        i, inputs_save, data_constraints, bar
                    )
                if not bits_equal(result, expected):
                    return self._fail(
                        FailureReason.RESULT_MISMATCH,
                        f'Kernel returned {result!r}, expected {expected!r}',
                        i, inputs_save, data_constraints, bar
                    )
                if (self.sampling_strategy == SamplingStrategy.INTEGRAL and
                    data_constraints is None):
                    permuted = data[:n].copy()
                    self.sampler.random_state.shuffle(permuted)
                    try:
                        permuted_result = self.kernel(n, permuted)
                    except Exception as e:
                        return self._fail(
                            FailureReason.EXCEPTION, str(e), i, inputs_save,
                            data_constraints, bar, exception=e
                        )
                    if not bits_equal(result, permuted_result):
                        return self._fail(
                            FailureReason.PERMUTATION_MISMATCH,
                            f'Exact sum {result!r} changed to ' +
                            f'{permuted_result!r} after reordering',
                            i, inputs_save, data_constraints, bar
                        )
                self._time_measurements['comparing'].append(
                    time.perf_counter_ns() - t0
                )

                resample = enforce_finiteness and not np.isfinite(expected)
                if resample and self.status >= StatusLevel.VERBOSE:
                    bar.write('Non-finite results, resampling')

                # The draw just made is attempt number resample_attempt + 1.
                gave_up = (
                    resample and resample_attempt + 1 >= MAX_SAMPLING_ATTEMPTS
                )
                if not resample or gave_up:
                    if gave_up:
                        full_resampling_failures += 1
                        last_decay = decay_by
                    resample_attempt = 0
                    if enforce_finiteness and decay_by > 0:
                        decays.append(decay_by)
                    decay_by = 0
                    i += 1
                    bar.update(1)
                else:
                    if resample_attempt >= 2:
                        if decay_by == 0:
                            decay_by = 1
                        else:
                            decay_by *= 2
                    resample_attempt += 1

            n_decayed = len(decays)
            if enforce_finiteness and n_decayed > 0:
                print(
                    'Decayed on', str(n_decayed), 'out of', str(n_samples),
                    'samples with a median decay factor of',
                    str((2 ** -np.median(decays)))
                )
            if full_resampling_failures:
                print(
                    'Failed to obtain finite results even with a decay ' +
                    'factor of', str((2.0 ** -last_decay)),
                    str(full_resampling_failures), 'times'
                )

        self.tc_generator.save_success_case(
            maximum_length=maximum_length, data_constraints=data_constraints
        )
        return True


    def verify(
        self, n_samples: int = 1, maximum_length: int = 128,
        enforce_finiteness: bool = False,
        data_constraints: Optional[Tuple[float, float]] = None
    ) -> Tuple[bool, int]:
        start_validate = time.perf_counter_ns()
        try:
            retval = self._do_verify(
                n_samples, maximum_length, enforce_finiteness,
                data_constraints
            )
        except Exception as e:
            self.tc_generator.save_failure_case(
                FailureReason.EXCEPTION, str(e), exception=e
            )
            return False, time.perf_counter_ns() - start_validate
        dt = time.perf_counter_ns() - start_validate
        if self.status >= StatusLevel.DEBUG:
            for k, v in self._time_measurements.items():
                if not v:
                    continue
                print(
                    k + ': median ', str(np.median(v) / 1e9),
                    's, mean ', str(np.mean(v) / 1e9),
                    's, std ', str(np.std(v) / 1e9), 's'
                )
        return retval, dt
