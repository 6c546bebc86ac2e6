import pytest
import torch

from summarynet import AGG_NAMES, Aggregator, ConfigurationError


def test_builtin_reductions_collapse_replicate_axis():
    torch.manual_seed(0)
    x = torch.randn(5, 3, 4)
    for name in AGG_NAMES:
        out = Aggregator(name)(x)
        assert out.shape == (1, 3, 4)

    assert torch.allclose(Aggregator("mean")(x)[0], x.mean(dim=0))
    assert torch.allclose(Aggregator("sum")(x)[0], x.sum(dim=0))
    assert torch.allclose(Aggregator("logsumexp")(x)[0], torch.logsumexp(x, dim=0))


def test_other_axis():
    x = torch.randn(2, 6, 3)
    out = Aggregator("sum", dim=1)(x)
    assert out.shape == (2, 1, 3)
    assert torch.allclose(out[:, 0], x.sum(dim=1))


def test_custom_reduction_that_drops_axis_is_reexpanded():
    x = torch.randn(7, 4)
    agg = Aggregator(torch.amax)
    out = agg(x)
    assert out.shape == (1, 4)
    assert torch.allclose(out[0], x.max(dim=0).values)
    assert agg.is_custom
    assert agg.name == "amax"


def test_custom_reduction_with_keepdim():
    agg = Aggregator(lambda x, dim: x.std(dim=dim, keepdim=True))
    x = torch.randn(9, 2)
    assert agg(x).shape == (1, 2)


def test_unknown_reduction_rejected_at_construction():
    with pytest.raises(ConfigurationError):
        Aggregator("median")
    with pytest.raises(ConfigurationError):
        Aggregator(3)


def test_reduction_is_differentiable():
    x = torch.randn(4, 3, requires_grad=True)
    Aggregator("logsumexp")(x).sum().backward()
    assert x.grad is not None
    assert torch.allclose(x.grad.sum(dim=0), torch.ones(3), atol=1e-6)
