import numpy as np

from seqsum.verification.sampling import (INTEGRAL_BOUND, SPECIAL_VALUES,
                                          DataSampler, SamplingStrategy)


def test_lengths_within_bounds():
    sampler = DataSampler(seed=1)
    lengths = [sampler.sample_length(16) for _ in range(200)]
    assert min(lengths) >= 0
    assert max(lengths) <= 16


def test_seeded_samplers_agree():
    a = DataSampler(SamplingStrategy.SIMPLE_UNIFORM, seed=5)
    b = DataSampler(SamplingStrategy.SIMPLE_UNIFORM, seed=5)
    assert np.array_equal(a.sample_sequence(64), b.sample_sequence(64))


def test_undecayed_uniform_stays_in_float32_range():
    sampler = DataSampler(SamplingStrategy.SIMPLE_UNIFORM, seed=2)
    data = sampler.sample_sequence(256)
    assert data.dtype == np.float64
    assert np.all(np.abs(data) <= np.finfo(np.float32).max)


def test_decayed_uniform_covers_float64_range():
    sampler = DataSampler(SamplingStrategy.SIMPLE_UNIFORM, seed=2)
    f64_max = float(np.finfo(np.float64).max)
    data = sampler.sample_sequence(256, decay_by=1)
    assert np.all(np.isfinite(data))
    assert np.all(np.abs(data) <= f64_max / 2)
    assert np.abs(data).max() > np.finfo(np.float32).max
    data = sampler.sample_sequence(256, decay_by=64)
    assert np.all(np.abs(data) <= f64_max * 2.0 ** -64)
    assert np.abs(data).max() > np.finfo(np.float32).max


def test_constraints():
    sampler = DataSampler(SamplingStrategy.INTEGRAL, seed=3)
    data = sampler.sample_sequence(100, constraints=(-1.0, 1.0))
    assert np.all(data >= -1.0)
    assert np.all(data <= 1.0)
    filled = sampler.sample_sequence(10, constraints=(2.5, 2.5))
    assert np.all(filled == 2.5)


def test_split_magnitude():
    sampler = DataSampler(
        SamplingStrategy.SPLIT_MAGNITUDE, seed=4, tiny_percentage=25.0
    )
    data = sampler.sample_sequence(100)
    assert data.shape == (100,)
    assert np.count_nonzero(data < 1.0) == 25
    assert np.count_nonzero(data >= 1.0) == 75


def test_integral():
    sampler = DataSampler(SamplingStrategy.INTEGRAL, seed=6)
    data = sampler.sample_sequence(500)
    assert np.array_equal(data, np.round(data))
    assert np.all(np.abs(data) <= INTEGRAL_BOUND)


def test_special_values_injected():
    sampler = DataSampler(SamplingStrategy.SPECIAL_VALUES, seed=7)
    tiny = np.finfo(np.float64).tiny
    for n in [1, 2, 17, 128]:
        data = sampler.sample_sequence(n)
        special = (
            ~np.isfinite(data) | (data == 0.0) | (np.abs(data) < tiny)
        )
        assert special.any()
    assert sampler.sample_sequence(0).shape == (0,)
    assert len(SPECIAL_VALUES) == 7
