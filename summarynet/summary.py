# summarynet/summary.py
"""
Set summaries: inner network, per-set aggregation, fusion with expert
statistics and set-level covariates.

Fused layout of every summary row (fixed order):
    [ learned summary | expert statistic | covariates ]
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Optional

import torch

from .aggregation import Aggregator
from .batching import ReplicateBatcher
from .errors import ConfigurationError, ShapeMismatch
from .expert import evaluate_expert
from .graphs import GraphGrouping
from .inputs import InputKind, ParsedInput, parse_inputs, resolve_covariates

logger = logging.getLogger(__name__)

InnerFn = Callable[..., torch.Tensor]


def _rows(t: torch.Tensor) -> torch.Tensor:
    return t.reshape(t.shape[0], -1)


def _data_device(parsed: ParsedInput):
    z = parsed.sets[0]
    if isinstance(z, torch.Tensor):
        return z.device
    x = getattr(z, "x", None)
    return None if x is None else x.device


def _data_dtype(parsed: ParsedInput) -> torch.dtype:
    z = parsed.sets[0]
    t = z if isinstance(z, torch.Tensor) else getattr(z, "x", None)
    if t is not None and t.is_floating_point():
        return t.dtype
    if parsed.covariates is not None and parsed.covariates.is_floating_point():
        return parsed.covariates.dtype
    return torch.get_default_dtype()


class SummaryComputer:
    """
    Computes the fused summary matrix [K, width] for K sets ([width] for a single set).

    Holds no state besides the stateless batching helpers; all networks are
    passed to `compute`.
    """

    def __init__(self) -> None:
        self.batcher = ReplicateBatcher()
        self.grouping = GraphGrouping()

    def compute(
        self,
        inner: Optional[InnerFn],
        aggregator: Aggregator,
        inputs,
        expert_fn: Optional[Callable] = None,
        covariates=None,
    ) -> torch.Tensor:
        if inner is None and expert_fn is None:
            raise ConfigurationError("At least one of an inner network or an expert statistic is required.")

        parsed = inputs if isinstance(inputs, ParsedInput) else parse_inputs(inputs)
        if covariates is not None:
            if parsed.covariates is not None:
                raise TypeError("Covariates were supplied both in the input tuple and as an argument.")
            parsed = replace(parsed, covariates=resolve_covariates(covariates, len(parsed)))

        blocks: List[torch.Tensor] = []
        learned = None
        if inner is not None:
            learned = self.learned(inner, aggregator, parsed)
            blocks.append(learned)

        if learned is not None:
            dtype, device = learned.dtype, learned.device
        else:
            dtype, device = _data_dtype(parsed), _data_device(parsed)

        if expert_fn is not None:
            stats = evaluate_expert(expert_fn, parsed.sets, dtype=dtype, device=device)
            widths = {int(s.shape[0]) for s in stats}
            if len(widths) != 1:
                raise ShapeMismatch(f"Expert statistic returned vectors of differing lengths {sorted(widths)}.")
            blocks.append(torch.stack(stats, dim=0))

        if parsed.covariates is not None:
            blocks.append(parsed.covariates.to(dtype=dtype, device=device))

        U = torch.cat(blocks, dim=1) if len(blocks) > 1 else blocks[0]
        return U[0] if parsed.single else U

    def learned(self, inner: InnerFn, aggregator: Aggregator, parsed: ParsedInput) -> torch.Tensor:
        """Aggregated inner-network features, [K, F]."""
        if parsed.kind is InputKind.ARRAY:
            if parsed.single:
                return self._array_single(inner, aggregator, parsed.sets[0])
            return self._array_collection(inner, aggregator, parsed.sets)
        if parsed.single:
            return self._graph_single(inner, aggregator, parsed.sets[0])
        return self._graph_collection(inner, aggregator, parsed.sets)

    def _array_single(self, inner, aggregator, z: torch.Tensor) -> torch.Tensor:
        if z.shape[0] == 0:
            raise ShapeMismatch("Set has no replicates.")
        logger.debug("array set with %d replicates", z.shape[0])
        h = inner(z)
        if h.shape[0] != z.shape[0]:
            raise ShapeMismatch(
                f"Inner network changed the replicate axis from {z.shape[0]} to {h.shape[0]} rows."
            )
        return _rows(aggregator(h))

    def _array_collection(self, inner, aggregator, sets) -> torch.Tensor:
        batched, index = self.batcher.stack(sets)
        h = inner(batched)
        if h.shape[0] != index.total:
            raise ShapeMismatch(
                f"Inner network changed the replicate axis from {index.total} to {h.shape[0]} rows."
            )
        parts = [aggregator(hi) for hi in self.batcher.split(h, index)]
        logger.debug("array collection: %d sets, %d replicates", len(index), index.total)
        return _rows(torch.cat(parts, dim=0))

    def _graph_single(self, inner, aggregator, g) -> torch.Tensor:
        batch, m = self.grouping.as_batch(g)
        logger.debug("graph set with %d replicates", m)
        pooled = self.grouping.regroup(inner(batch), [m])
        return _rows(aggregator(pooled[0]))

    def _graph_collection(self, inner, aggregator, sets) -> torch.Tensor:
        super_graph, counts = self.grouping.merge_and_count(sets)
        pooled = self.grouping.regroup(inner(super_graph), counts)
        logger.debug("graph collection: %d sets, %d replicates", len(counts), sum(counts))
        return _rows(torch.cat([aggregator(p) for p in pooled], dim=0))
