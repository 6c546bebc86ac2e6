import numpy as np
import pytest
import torch

from summarynet import DimensionMismatch, InputKind, numberreplicates, parse_inputs, resolve_covariates


def test_single_tensor_is_one_set():
    p = parse_inputs(torch.randn(5, 3))
    assert p.kind is InputKind.ARRAY
    assert p.single
    assert len(p) == 1
    assert p.covariates is None


def test_one_dimensional_tensor_is_single_replicate():
    p = parse_inputs(torch.randn(3))
    assert p.sets[0].shape == (1, 3)


def test_list_is_collection():
    p = parse_inputs([torch.randn(2, 3), torch.randn(4, 3), torch.randn(3)])
    assert p.kind is InputKind.ARRAY
    assert not p.single
    assert [z.shape[0] for z in p.sets] == [2, 4, 1]


def test_tuple_carries_covariates():
    p = parse_inputs(([torch.randn(2, 3), torch.randn(4, 3)], torch.randn(2, 5)))
    assert p.covariates.shape == (2, 5)
    assert p.covariate_dim == 5


def test_shared_covariate_is_broadcast():
    v = torch.randn(4)
    p = parse_inputs(([torch.randn(2, 3)] * 3, v))
    assert p.covariates.shape == (3, 4)
    for row in p.covariates:
        assert torch.equal(row, v)

    p = parse_inputs(([torch.randn(2, 3)] * 3, [v]))
    assert p.covariates.shape == (3, 4)


def test_covariate_count_mismatch():
    sets = [torch.randn(2, 3) for _ in range(3)]
    with pytest.raises(DimensionMismatch):
        parse_inputs((sets, [torch.randn(2), torch.randn(2)]))
    with pytest.raises(DimensionMismatch):
        parse_inputs((sets, torch.randn(2, 2)))


def test_covariates_from_numbers_and_arrays():
    X = resolve_covariates([0.5, 1.5], n_sets=2)
    assert X.shape == (2, 2)
    X = resolve_covariates(np.ones((2, 3), dtype=np.float32), n_sets=2)
    assert X.shape == (2, 3)
    with pytest.raises(DimensionMismatch):
        resolve_covariates([torch.randn(2), torch.randn(3)], n_sets=2)


def test_unsupported_inputs():
    with pytest.raises(TypeError):
        parse_inputs("not data")
    with pytest.raises(TypeError):
        parse_inputs([])
    with pytest.raises(TypeError):
        parse_inputs([torch.randn(2, 3), "x"])
    with pytest.raises(TypeError):
        parse_inputs((torch.randn(2, 3), torch.randn(2), torch.randn(2)))
    with pytest.raises(TypeError):
        parse_inputs(((torch.randn(2, 3), torch.randn(2)), torch.randn(2)))


def test_numberreplicates():
    assert numberreplicates(torch.randn(6, 2)) == 6
    assert numberreplicates(torch.randn(2)) == 1
    assert numberreplicates([torch.randn(3, 2), torch.randn(1, 2)]) == [3, 1]
    assert numberreplicates(np.zeros((4, 2))) == 4
