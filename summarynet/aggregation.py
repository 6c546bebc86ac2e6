# summarynet/aggregation.py
"""
Permutation-invariant reductions over the replicate axis.

An aggregator collapses one axis of its input to size 1 and leaves every
other axis untouched. The caller drops the collapsed axis.
"""
from __future__ import annotations

from typing import Callable, Tuple, Union

import torch
import torch.nn as nn

from .errors import ConfigurationError

Reduction = Callable[..., torch.Tensor]

AGG_NAMES: Tuple[str, ...] = ("mean", "sum", "logsumexp")


def mean_reduce(x: torch.Tensor, dim: int = 0) -> torch.Tensor:
    return x.mean(dim=dim, keepdim=True)


def sum_reduce(x: torch.Tensor, dim: int = 0) -> torch.Tensor:
    return x.sum(dim=dim, keepdim=True)


def logsumexp_reduce(x: torch.Tensor, dim: int = 0) -> torch.Tensor:
    return torch.logsumexp(x, dim=dim, keepdim=True)


_REDUCTIONS = {
    "mean": mean_reduce,
    "sum": sum_reduce,
    "logsumexp": logsumexp_reduce,
}


class Aggregator(nn.Module):
    """
    Wraps a reduction that collapses axis `dim` (the replicate axis) to size 1.

    `reduction` is one of AGG_NAMES or a callable ``fn(x, dim=...)``.
    Custom reductions may drop the axis (e.g. ``torch.amax``); it is put back
    so the output always has size 1 along `dim`.
    """

    def __init__(self, reduction: Union[str, Reduction] = "mean", dim: int = 0) -> None:
        super().__init__()
        self.dim = int(dim)
        if isinstance(reduction, str):
            name = reduction.lower()
            if name not in _REDUCTIONS:
                raise ConfigurationError(
                    f"Unknown aggregation '{reduction}'; expected one of {AGG_NAMES} or a callable."
                )
            self.name = name
            self.fn: Reduction = _REDUCTIONS[name]
        elif callable(reduction):
            self.name = getattr(reduction, "__name__", "custom")
            self.fn = reduction
        else:
            raise ConfigurationError(f"Aggregation must be a string or a callable, got {type(reduction).__name__}.")

    @property
    def is_custom(self) -> bool:
        return self.fn not in _REDUCTIONS.values()

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        out = self.fn(x, dim=self.dim)
        if out.dim() == x.dim() - 1:
            out = out.unsqueeze(self.dim)
        return out

    def extra_repr(self) -> str:
        return f"reduction={self.name}, dim={self.dim}"
