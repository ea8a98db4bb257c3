# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

import random
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class SamplingStrategy(Enum):
    SIMPLE_UNIFORM = 'SIMPLE_UNIFORM'
    SPLIT_MAGNITUDE = 'SPLIT_MAGNITUDE'
    INTEGRAL = 'INTEGRAL'
    SPECIAL_VALUES = 'SPECIAL_VALUES'

    def __str__(self):
        return self.value


# Integers up to this magnitude sum exactly for any realistic length.
INTEGRAL_BOUND = 2 ** 20

SPECIAL_VALUES = np.array([
    np.nan, np.inf, -np.inf, -0.0, 0.0,
    np.finfo(np.float64).tiny / 2, -np.finfo(np.float64).tiny / 4,
], dtype=np.float64)


class DataSampler:

    strategy: SamplingStrategy = None
    random_state: np.random.RandomState = None
    tiny_percentage: float = 10.0

    def __init__(
        self,
        strategy: SamplingStrategy = SamplingStrategy.SIMPLE_UNIFORM,
        seed: int = None, tiny_percentage: float = 10.0
    ):
        self.strategy = strategy
        self.tiny_percentage = tiny_percentage
        if seed is not None:
            np.random.seed(seed)
            random.seed(seed)
        self.random_state = np.random.RandomState(seed)


    def _uniform_sampling(
        self, n: int, decay_by: int = 0,
        constraints: Optional[Tuple[float, float]] = None
    ) -> np.ndarray:
        # `np.uniform` overflows over [float64.min, float64.max], so the
        # undecayed draw stays within the float32 range. Any decay halves the
        # bounds at least once, which makes the float64 range safe to use.
        sample_dtype = np.float64
        if decay_by == 0:
            sample_dtype = np.float32

        low = float(np.finfo(sample_dtype).min) * (2.0 ** -decay_by)
        high = float(np.finfo(sample_dtype).max) * (2.0 ** -decay_by)
        if constraints is not None:
            low, high = constraints
        if low == high:
            return np.full(n, low, dtype=np.float64)
        return self.random_state.uniform(
            low=low, high=high, size=(n,)
        ).astype(np.float64)


    def _split_sampling(
        self, n: int, decay_by: int = 0,
        tiny_low: float = 1e-30, tiny_high: float = 1e-10,
        regular_low: float = 1e0, regular_high: float = 1e10
    ) -> np.ndarray:
        n_tiny = round((self.tiny_percentage / 100) * n)
        n_regular = n - n_tiny
        scale = 2.0 ** -decay_by
        tiny_sample = self.random_state.uniform(
            tiny_low * scale, tiny_high * scale, n_tiny
        )
        large_sample = self.random_state.uniform(
            regular_low * scale, regular_high * scale, n_regular
        )
        conc = np.concatenate((tiny_sample, large_sample)).astype(np.float64)
        self.random_state.shuffle(conc)
        return conc


    def _integral_sampling(self, n: int) -> np.ndarray:
        return self.random_state.randint(
            -INTEGRAL_BOUND, INTEGRAL_BOUND + 1, size=(n,)
        ).astype(np.float64)


    def _special_sampling(self, n: int, decay_by: int = 0) -> np.ndarray:
        data = self._uniform_sampling(n, decay_by)
        if n == 0:
            return data
        n_special = self.random_state.randint(1, max(2, n // 4 + 1))
        positions = self.random_state.randint(0, n, size=(n_special,))
        picks = self.random_state.randint(
            0, len(SPECIAL_VALUES), size=(n_special,)
        )
        data[positions] = SPECIAL_VALUES[picks]
        return data


    def sample_length(self, maxval: int = 128) -> int:
        return random.randint(0, maxval)


    def sample_sequence(
        self, n: int, decay_by: int = 0,
        constraints: Optional[Tuple[float, float]] = None
    ) -> np.ndarray:
        if constraints is not None:
            return self._uniform_sampling(n, decay_by, constraints)

        if self.strategy == SamplingStrategy.SIMPLE_UNIFORM:
            return self._uniform_sampling(n, decay_by)
        elif self.strategy == SamplingStrategy.SPLIT_MAGNITUDE:
            return self._split_sampling(n, decay_by)
        elif self.strategy == SamplingStrategy.INTEGRAL:
            return self._integral_sampling(n)
        elif self.strategy == SamplingStrategy.SPECIAL_VALUES:
            return self._special_sampling(n, decay_by)
        else:
            raise NotImplementedError()
