# summarynet/outer.py
"""
Outer map applied to the fused summary, with a construction-time width check.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import torch
import torch.nn as nn

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _end_linear(net, last: bool) -> Optional[nn.Linear]:
    # only Linear layers whose position in the call order is known
    if isinstance(net, nn.Linear) and not isinstance(net, nn.LazyLinear):
        return net
    if isinstance(net, nn.Sequential) and len(net) > 0:
        return _end_linear(net[-1] if last else net[0], last)
    return None


def infer_input_width(net) -> Optional[int]:
    """Input width of a network: `input_dim` attribute, a Linear, or a Sequential starting with one."""
    if net is None:
        return None
    width = getattr(net, "input_dim", None)
    if width is not None:
        return int(width)
    lin = _end_linear(net, last=False)
    return None if lin is None else int(lin.in_features)


def infer_output_width(net) -> Optional[int]:
    """Output width of a network: `output_dim` attribute, a Linear, or a Sequential ending with one."""
    if net is None:
        return None
    width = getattr(net, "output_dim", None)
    if width is not None:
        return int(width)
    lin = _end_linear(net, last=True)
    return None if lin is None else int(lin.out_features)


class OuterMap(nn.Module):
    """
    Downstream network applied to [K, summary_dim + expert_dim + covariate_dim].

    `expected_width` overrides the width inferred from `net`. When every part
    of the check is known and disagrees, construction fails. When a block
    width is unknown, the fused width is checked on each call before `net` runs.
    """

    def __init__(
        self,
        net: Optional[Callable[[torch.Tensor], torch.Tensor]],
        summary_dim: Optional[int],
        expert_dim: Optional[int] = 0,
        covariate_dim: Optional[int] = 0,
        expected_width: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.net = nn.Identity() if net is None else net
        self.summary_dim = summary_dim
        self.expert_dim = expert_dim
        self.covariate_dim = covariate_dim

        if expected_width is None and net is not None:
            expected_width = infer_input_width(net)
        self.expected_width = expected_width

        parts = (summary_dim, expert_dim, covariate_dim)
        if expected_width is None or any(p is None for p in parts):
            logger.debug(
                "skipping outer width check (expected=%s, summary=%s, expert=%s, covariates=%s)",
                expected_width, summary_dim, expert_dim, covariate_dim,
            )
            self.fused_width = None if any(p is None for p in parts) else int(sum(parts))
            return

        self.fused_width = int(sum(parts))
        if self.fused_width != int(expected_width):
            raise ConfigurationError(
                f"Outer network expects {expected_width} inputs but the fused summary has "
                f"{self.fused_width} (learned {summary_dim} + expert {expert_dim} + covariates {covariate_dim})."
            )

    def forward(self, u: torch.Tensor) -> torch.Tensor:
        if self.expected_width is not None and u.shape[-1] != int(self.expected_width):
            raise ConfigurationError(
                f"Outer network expects {self.expected_width} inputs but the fused summary has "
                f"{u.shape[-1]} (learned {self.summary_dim} + expert {self.expert_dim} + covariates {self.covariate_dim})."
            )
        return self.net(u)
