import itertools
import os

import numpy as np
import pytest

from seqsum import (FailureReason, KernelVerifier, SamplingStrategy,
                    StatusLevel, summation)
from seqsum.verification.verifier import MAX_SAMPLING_ATTEMPTS


@pytest.mark.parametrize('strategy', list(SamplingStrategy))
def test_kernel_is_valid(strategy, tmp_path):
    verifier = KernelVerifier(
        summation, strategy, output_dir=str(tmp_path / 'fails'),
        status=StatusLevel.OFF
    )
    valid, dt = verifier.verify(n_samples=30, maximum_length=64)
    assert valid
    assert dt > 0
    assert not os.path.exists(tmp_path / 'fails')


def test_enforce_finiteness_resamples():
    verifier = KernelVerifier(
        summation, SamplingStrategy.SPECIAL_VALUES, status=StatusLevel.OFF
    )
    valid, _ = verifier.verify(
        n_samples=10, maximum_length=256, enforce_finiteness=True
    )
    assert valid


def _force_non_finite_draws(monkeypatch, verifier, n_draws=None):
    decays = []
    sample_sequence = verifier.sampler.sample_sequence

    def recording(n, decay_by=0, constraints=None):
        data = sample_sequence(n, decay_by, constraints=constraints)
        if n_draws is None or len(decays) < n_draws:
            data[0] = np.inf
        decays.append(decay_by)
        return data

    monkeypatch.setattr(verifier.sampler, 'sample_sequence', recording)
    monkeypatch.setattr(
        verifier.sampler, 'sample_length', lambda maxval=128: 4
    )
    return decays


def test_non_finite_sums_decay_until_finite(monkeypatch):
    verifier = KernelVerifier(
        summation, SamplingStrategy.SIMPLE_UNIFORM, status=StatusLevel.OFF
    )
    decays = _force_non_finite_draws(monkeypatch, verifier, n_draws=4)
    valid, _ = verifier.verify(n_samples=2, enforce_finiteness=True)
    assert valid
    assert decays == [0, 0, 0, 1, 2, 0]


def test_resampling_gives_up(monkeypatch, capsys):
    verifier = KernelVerifier(
        summation, SamplingStrategy.SIMPLE_UNIFORM, status=StatusLevel.OFF
    )
    decays = _force_non_finite_draws(monkeypatch, verifier)
    valid, _ = verifier.verify(n_samples=1, enforce_finiteness=True)
    assert valid
    assert len(decays) == MAX_SAMPLING_ATTEMPTS
    assert decays == [0, 0, 0, 1, 2, 4, 8, 16, 32, 64, 128, 256]
    out = capsys.readouterr().out
    assert 'Failed to obtain finite results' in out
    assert str(2.0 ** -256) in out


def test_non_finite_sums_accepted_without_enforcement(monkeypatch):
    verifier = KernelVerifier(
        summation, SamplingStrategy.SIMPLE_UNIFORM, status=StatusLevel.OFF
    )
    decays = _force_non_finite_draws(monkeypatch, verifier)
    valid, _ = verifier.verify(n_samples=3)
    assert valid
    assert decays == [0, 0, 0]


def test_success_case_saved(tmp_path):
    success_dir = tmp_path / 'successes'
    verifier = KernelVerifier(
        summation, SamplingStrategy.INTEGRAL, success_dir=str(success_dir),
        status=StatusLevel.OFF
    )
    valid, _ = verifier.verify(n_samples=5, maximum_length=16)
    assert valid
    assert os.path.isfile(success_dir / 'inputs')
    data = np.load(success_dir / 'data.npy')
    assert data.ndim == 1


def _run_broken(kernel, tmp_path, strategy=SamplingStrategy.INTEGRAL):
    out_dir = tmp_path / 'fails'
    verifier = KernelVerifier(
        kernel, strategy, output_dir=str(out_dir), status=StatusLevel.OFF
    )
    valid, _ = verifier.verify(n_samples=20, maximum_length=64)
    return valid, out_dir


def test_detects_wrong_result(tmp_path):
    def off_by_one(n, data):
        return summation(n, data) + 1.0

    valid, out_dir = _run_broken(off_by_one, tmp_path)
    assert not valid
    reason_file = out_dir / FailureReason.RESULT_MISMATCH.value
    assert os.path.isfile(reason_file)
    with open(reason_file, 'r') as f:
        contents = f.read()
    assert 'Reason: RESULT_MISMATCH' in contents
    assert 'Iteration: 0' in contents
    assert os.path.isfile(out_dir / 'data.npy')


def test_detects_exceptions(tmp_path):
    def crashing(n, data):
        raise RuntimeError('kernel crashed')

    valid, out_dir = _run_broken(crashing, tmp_path)
    assert not valid
    with open(out_dir / FailureReason.EXCEPTION.value, 'r') as f:
        assert 'kernel crashed' in f.read()


def test_detects_mutation(tmp_path):
    def clobbering(n, data):
        res = summation(n, data)
        data[:] = 1.0
        return res

    valid, out_dir = _run_broken(clobbering, tmp_path)
    assert not valid
    assert os.path.isfile(out_dir / FailureReason.INPUT_MUTATED.value)


def test_detects_nondeterminism(tmp_path):
    counter = itertools.count()

    def drifting(n, data):
        return summation(n, data) + next(counter)

    valid, out_dir = _run_broken(drifting, tmp_path)
    assert not valid
    assert os.path.isfile(out_dir / FailureReason.NONDETERMINISTIC.value)


def test_detects_order_dependence(tmp_path):
    seen = []

    def order_dependent(n, data):
        if not seen:
            seen.append(data)
        res = summation(n, data)
        return res if data is seen[0] else res + 1.0

    valid, out_dir = _run_broken(order_dependent, tmp_path)
    assert not valid
    assert os.path.isfile(out_dir / FailureReason.PERMUTATION_MISMATCH.value)


def test_reordering_kernel_caught(tmp_path):
    def reversed_order(n, data):
        return summation(n, np.asarray(data)[:n][::-1])

    valid, out_dir = _run_broken(
        reversed_order, tmp_path, SamplingStrategy.SPLIT_MAGNITUDE
    )
    assert not valid
    assert os.path.isfile(out_dir / FailureReason.RESULT_MISMATCH.value)
