# summarynet/architectures.py
"""
DeepSet architecture:

    out(Z) = outer([ agg({inner(Z_i)}) , S(Z) , x ])

inner  per-replicate network (array or graph replicates), may be None
agg    permutation-invariant reduction over the replicate axis
S      optional expert statistic, computed on the raw set
x      optional set-level covariates
outer  downstream network on the fused summary

Call shapes
-----------
model(Z)               single set      -> [out_dim]
model([Z1, Z2, ...])   collection      -> [K, out_dim]
model((Z, x))          with covariates (x: one vector per set or one shared vector)
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Union

import torch
import torch.nn as nn

from .aggregation import Aggregator, Reduction
from .errors import ConfigurationError, DimensionMismatch
from .expert import statistic_width
from .inputs import ParsedInput, parse_inputs
from .outer import OuterMap, infer_output_width
from .summary import SummaryComputer

logger = logging.getLogger(__name__)


class DeepSet(nn.Module):
    """
    Permutation-invariant summary network over sets of exchangeable replicates.

    Parameters
    ----------
    inner : per-replicate network mapping [m, ...] -> [m, F]; None to use only
        the expert statistic. For graph replicates use GraphPropagatePool.
    outer : network on the fused summary; None returns the fused summary.
    aggregation : "mean", "sum", "logsumexp" or a callable ``fn(x, dim=...)``.
    expert : callable on one raw set returning a vector (see expert.samplesize,
        expert.ExpertStatistics). Not trained.
    summary_dim, expert_dim : widths of the learned and expert blocks; inferred
        from `inner` / `expert` when omitted.
    covariate_dim : width of the set-level covariates the model will receive.

    The outer input width is checked against
    summary_dim + expert_dim + covariate_dim at construction time, or on each
    call when a block width cannot be inferred.
    """

    def __init__(
        self,
        inner: Optional[nn.Module],
        outer: Optional[Callable[[torch.Tensor], torch.Tensor]],
        aggregation: Union[str, Reduction] = "mean",
        expert: Optional[Callable] = None,
        summary_dim: Optional[int] = None,
        expert_dim: Optional[int] = None,
        covariate_dim: Optional[int] = 0,
        outer_input_dim: Optional[int] = None,
    ) -> None:
        super().__init__()
        if inner is None and expert is None:
            raise ConfigurationError("DeepSet needs an inner network, an expert statistic, or both.")
        if expert is not None and not callable(expert):
            raise ConfigurationError(f"Expert statistic {expert!r} is not callable.")

        self.inner = inner
        self.aggregator = Aggregator(aggregation, dim=0)
        # evaluated under no_grad; never trained
        self._expert = expert

        if inner is None:
            summary_dim = 0
        elif summary_dim is None:
            summary_dim = infer_output_width(inner)
        if expert is None:
            expert_dim = 0
        elif expert_dim is None:
            expert_dim = statistic_width(expert)

        self.summary_dim = summary_dim
        self.expert_dim = expert_dim
        self.covariate_dim = covariate_dim
        self.outer = OuterMap(
            outer,
            summary_dim=summary_dim,
            expert_dim=expert_dim,
            covariate_dim=covariate_dim,
            expected_width=outer_input_dim,
        )
        self._computer = SummaryComputer()
        logger.debug(
            "DeepSet(aggregation=%s, summary_dim=%s, expert_dim=%s, covariate_dim=%s)",
            self.aggregator.name, summary_dim, expert_dim, covariate_dim,
        )

    @property
    def aggregation(self) -> str:
        return self.aggregator.name

    @property
    def expert(self) -> Optional[Callable]:
        return self._expert

    def _parse(self, inputs) -> ParsedInput:
        parsed = inputs if isinstance(inputs, ParsedInput) else parse_inputs(inputs)
        if parsed.covariates is not None and self.covariate_dim is not None:
            if parsed.covariate_dim != self.covariate_dim:
                raise DimensionMismatch(
                    f"Got covariates of width {parsed.covariate_dim}, model was built for {self.covariate_dim}."
                )
        elif parsed.covariates is None and self.covariate_dim:
            raise DimensionMismatch(
                f"Model was built for covariates of width {self.covariate_dim} but none were given."
            )
        return parsed

    def summarise(self, inputs) -> torch.Tensor:
        """Fused summary [learned | expert | covariates] without the outer network."""
        parsed = self._parse(inputs)
        return self._computer.compute(self.inner, self.aggregator, parsed, expert_fn=self.expert)

    def forward(self, inputs) -> torch.Tensor:
        return self.outer(self.summarise(inputs))

    def with_expert(
        self,
        outer: Optional[Callable[[torch.Tensor], torch.Tensor]],
        expert: Callable,
        expert_dim: Optional[int] = None,
        covariate_dim: Optional[int] = None,
    ) -> "DeepSet":
        """New DeepSet sharing this inner network and aggregation, with an expert statistic and a new outer network."""
        return DeepSet(
            self.inner,
            outer,
            aggregation=self.aggregator.fn if self.aggregator.is_custom else self.aggregator.name,
            expert=expert,
            summary_dim=self.summary_dim,
            expert_dim=expert_dim,
            covariate_dim=self.covariate_dim if covariate_dim is None else covariate_dim,
        )

    def extra_repr(self) -> str:
        expert = "None" if self.expert is None else getattr(self.expert, "__name__", repr(self.expert))
        return (
            f"aggregation={self.aggregation}, expert={expert}, summary_dim={self.summary_dim}, "
            f"expert_dim={self.expert_dim}, covariate_dim={self.covariate_dim}"
        )
