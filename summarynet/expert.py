# summarynet/expert.py
"""
Expert (hand-crafted, non-learned) summary statistics.

An expert statistic maps one raw replicate set to a fixed-length vector. It is
evaluated on the untransformed data and treated as a constant during
differentiation.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import numpy as np
import torch

from .inputs import numberreplicates

ExpertFn = Callable[..., object]


def samplesize(Z) -> torch.Tensor:
    """
    Number of replicates of a set as a float tensor of shape [1].

    A list of sets gives a [K, 1] tensor. The dtype follows the data when the
    data is a floating point tensor.
    """
    if isinstance(Z, list):
        return torch.stack([samplesize(z) for z in Z], dim=0)
    dtype = torch.get_default_dtype()
    device = None
    if isinstance(Z, torch.Tensor):
        device = Z.device
        if Z.is_floating_point():
            dtype = Z.dtype
    return torch.tensor([float(numberreplicates(Z))], dtype=dtype, device=device)


samplesize.output_dim = 1


def as_statistic_vector(value, dtype: Optional[torch.dtype] = None, device=None) -> torch.Tensor:
    """Coerce a statistic (tensor, array, scalar, sequence) to a detached 1-D tensor."""
    if isinstance(value, torch.Tensor):
        t = value.detach()
    else:
        t = torch.as_tensor(np.asarray(value, dtype=np.float64))
    if dtype is not None or device is not None:
        t = t.to(dtype=dtype if dtype is not None else t.dtype, device=device)
    return t.reshape(-1)


def statistic_width(fn) -> Optional[int]:
    width = getattr(fn, "output_dim", None)
    return None if width is None else int(width)


class ExpertStatistics:
    """
    Ordered application of several statistics with the results concatenated.

        S = ExpertStatistics(samplesize, my_variance)
        S(Z) == torch.cat([samplesize(Z), my_variance(Z)])

    output_dim is the sum of member widths when every member declares one
    (via an ``output_dim`` attribute), unless given explicitly.
    """

    def __init__(self, *fns: ExpertFn, output_dim: Optional[int] = None) -> None:
        if len(fns) == 0:
            raise ValueError("ExpertStatistics needs at least one function.")
        for f in fns:
            if not callable(f):
                raise TypeError(f"Expert statistic {f!r} is not callable.")
        self.fns: List[ExpertFn] = list(fns)
        if output_dim is None:
            widths = [statistic_width(f) for f in self.fns]
            output_dim = None if any(w is None for w in widths) else int(sum(widths))
        self.output_dim = output_dim

    def __call__(self, Z) -> torch.Tensor:
        parts = [as_statistic_vector(f(Z)) for f in self.fns]
        dtype = parts[0].dtype
        for p in parts[1:]:
            dtype = torch.promote_types(dtype, p.dtype)
        return torch.cat([p.to(dtype) for p in parts], dim=0)

    def __len__(self) -> int:
        return len(self.fns)

    def __repr__(self) -> str:
        names = ", ".join(getattr(f, "__name__", repr(f)) for f in self.fns)
        return f"ExpertStatistics({names})"


def concat_statistics(*fns: ExpertFn, output_dim: Optional[int] = None) -> ExpertStatistics:
    return ExpertStatistics(*fns, output_dim=output_dim)


def evaluate_expert(
    expert_fn: ExpertFn,
    sets: Sequence,
    dtype: Optional[torch.dtype] = None,
    device=None,
) -> List[torch.Tensor]:
    """Expert statistic of every raw set, detached and outside the autograd graph."""
    with torch.no_grad():
        return [as_statistic_vector(expert_fn(z), dtype=dtype, device=device) for z in sets]
