import numpy as np
import pytest
import torch

from summarynet import ExpertStatistics, concat_statistics, samplesize
from summarynet.expert import as_statistic_vector, evaluate_expert


def test_samplesize_single_and_collection():
    z = torch.randn(7, 3, dtype=torch.float64)
    s = samplesize(z)
    assert s.shape == (1,)
    assert s.dtype == torch.float64
    assert s.item() == 7.0

    S = samplesize([torch.randn(2, 3), torch.randn(5, 3)])
    assert S.shape == (2, 1)
    assert S[:, 0].tolist() == [2.0, 5.0]


def test_concatenation_in_order():
    S = concat_statistics(samplesize, lambda z: z.max(dim=0).values)
    z = torch.arange(6.0).reshape(3, 2)
    out = S(z)
    assert out.tolist() == [3.0, 4.0, 5.0]
    assert len(S) == 2
    assert S.output_dim is None


def test_output_dim_from_members():
    def second_moment(z):
        return (z ** 2).mean(dim=0)

    second_moment.output_dim = 4
    S = ExpertStatistics(samplesize, second_moment)
    assert S.output_dim == 5
    assert S(torch.randn(3, 4)).shape == (5,)


def test_numpy_and_scalar_statistics_are_coerced():
    assert as_statistic_vector(np.array([1.0, 2.0])).shape == (2,)
    assert as_statistic_vector(3.0).shape == (1,)
    S = ExpertStatistics(lambda z: float(z.shape[0]), lambda z: np.ones(2))
    assert S(torch.randn(4, 2)).tolist() == [4.0, 1.0, 1.0]


def test_evaluate_expert_is_detached():
    Z = [torch.randn(3, 2, requires_grad=True)]
    out = evaluate_expert(lambda z: z.sum(dim=0), Z, dtype=torch.float32)
    assert out[0].requires_grad is False
    assert out[0].shape == (2,)


def test_invalid_members():
    with pytest.raises(ValueError):
        ExpertStatistics()
    with pytest.raises(TypeError):
        ExpertStatistics(samplesize, 3)
