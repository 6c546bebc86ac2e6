# summarynet/graphs.py
"""
Graph-structured replicates.

A graph set is one of
  - a single-replicate ``Data``,
  - a ``Batch`` whose sub-graphs are the replicates,
  - a shared-topology ``Data`` (see ``shared_topology_graph``) whose node
    features carry a leading replicate axis: x is [m, num_nodes, F].

Every set of a collection is flattened into one super-graph with one disjoint
component per replicate, so the propagation network runs once. Pooled output
is regrouped per set afterwards.

Canonical pooled convention: [n_components, F], one row per replicate.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import torch
import torch.nn as nn
from torch_geometric.data import Batch, Data
from torch_geometric.nn import global_mean_pool

from .batching import GroupingIndex, ReplicateBatcher
from .errors import ShapeMismatch

logger = logging.getLogger(__name__)


def shared_topology_graph(
    x: torch.Tensor,
    edge_index: torch.Tensor,
    edge_attr: Optional[torch.Tensor] = None,
) -> Data:
    """
    One graph set whose m replicates share `edge_index`.

    x: [m, num_nodes, F] replicate-indexed node features.
    """
    if x.dim() != 3:
        raise ShapeMismatch(f"Shared-topology node features must be [m, num_nodes, F], got {tuple(x.shape)}.")
    g = Data(edge_index=edge_index, edge_attr=edge_attr)
    g.x = x
    g.num_nodes = int(x.shape[1])
    g.shared_topology = True
    return g


def is_graph(obj) -> bool:
    return isinstance(obj, (Data, Batch))


def is_shared_topology(g) -> bool:
    return bool(getattr(g, "shared_topology", False))


def count_graph_replicates(g) -> int:
    if is_shared_topology(g):
        return int(g.x.shape[0])
    if isinstance(g, Batch):
        return int(g.num_graphs)
    return 1


def _replicate_graphs(g) -> List[Data]:
    if is_shared_topology(g):
        edge_attr = getattr(g, "edge_attr", None)
        return [Data(x=g.x[r], edge_index=g.edge_index, edge_attr=edge_attr) for r in range(g.x.shape[0])]
    if isinstance(g, Batch):
        return g.to_data_list()
    return [g]


def _feature_signature(g) -> Tuple[Tuple[int, ...], Optional[Tuple[int, ...]]]:
    x = getattr(g, "x", None)
    if x is None:
        raise ShapeMismatch("Graph replicates must carry node features in `x`.")
    node_shape = tuple(x.shape[2:]) if is_shared_topology(g) else tuple(x.shape[1:])
    edge_attr = getattr(g, "edge_attr", None)
    edge_shape = None if edge_attr is None else tuple(edge_attr.shape[1:])
    return node_shape, edge_shape


def _check_graph_features(sets: Sequence) -> None:
    if len(sets) == 0:
        raise ShapeMismatch("Cannot merge an empty collection of graphs.")
    ref = None
    for i, g in enumerate(sets):
        if not is_graph(g):
            raise TypeError(f"Set {i} is {type(g).__name__}, expected a torch_geometric graph.")
        if count_graph_replicates(g) == 0:
            raise ShapeMismatch(f"Graph set {i} has no replicates.")
        sig = _feature_signature(g)
        if ref is None:
            ref = sig
        elif sig != ref:
            raise ShapeMismatch(
                f"Graph set {i} has node/edge feature shape {sig}, expected {ref}."
            )


class GraphGrouping:
    """Merge graph sets into one super-graph and split pooled output back per set."""

    def __init__(self) -> None:
        self._batcher = ReplicateBatcher()

    def merge_and_count(self, sets: Sequence) -> Tuple[Batch, List[int]]:
        _check_graph_features(sets)
        counts: List[int] = []
        replicates: List[Data] = []
        for g in sets:
            parts = _replicate_graphs(g)
            counts.append(len(parts))
            replicates.extend(parts)
        super_graph = Batch.from_data_list(replicates)
        logger.debug("merged %d graph sets into %d components", len(counts), super_graph.num_graphs)
        return super_graph, counts

    def as_batch(self, g) -> Tuple[Batch, int]:
        """Single set as a Batch (one component per replicate) and its replicate count."""
        _check_graph_features([g])
        if isinstance(g, Batch) and not is_shared_topology(g):
            return g, int(g.num_graphs)
        parts = _replicate_graphs(g)
        return Batch.from_data_list(parts), len(parts)

    def regroup(self, pooled: torch.Tensor, counts: Sequence[int]) -> List[torch.Tensor]:
        """
        Per-set feature matrices [m_i, F].

        pooled is either [sum(counts), F] (one row per component) or
        [len(counts), m, F] (explicit replicate axis).
        """
        counts = [int(c) for c in counts]
        if pooled.dim() == 2:
            return self._batcher.split(pooled, GroupingIndex.from_counts(counts))
        if pooled.dim() == 3:
            if pooled.shape[0] != len(counts) or any(pooled.shape[1] != c for c in counts):
                raise ShapeMismatch(
                    f"Pooled output {tuple(pooled.shape)} does not match replicate counts {counts}."
                )
            return [pooled[i] for i in range(len(counts))]
        raise ShapeMismatch(f"Pooled output must be 2-D or 3-D, got {tuple(pooled.shape)}.")


class GraphPropagatePool(nn.Module):
    """
    Inner network for graph replicates: node-level propagation then global pooling.

    propagation(x, edge_index[, edge_attr]) -> node features [num_nodes, H]
    globalpool(h, batch) -> [n_components, H'] (defaults to global_mean_pool)

    The pooled width is fixed whatever the size of each graph.
    """

    def __init__(
        self,
        propagation: nn.Module,
        globalpool: Optional[Callable[..., torch.Tensor]] = None,
        use_edge_attr: bool = False,
        output_dim: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.propagation = propagation
        self.globalpool = global_mean_pool if globalpool is None else globalpool
        self.use_edge_attr = bool(use_edge_attr)
        if output_dim is not None:
            self.output_dim = int(output_dim)

    def forward(self, graph) -> torch.Tensor:
        if self.use_edge_attr:
            h = self.propagation(graph.x, graph.edge_index, graph.edge_attr)
        else:
            h = self.propagation(graph.x, graph.edge_index)
        batch = getattr(graph, "batch", None)
        if batch is None:
            batch = torch.zeros(h.shape[0], dtype=torch.long, device=h.device)
        return self.globalpool(h, batch)

    def grouped(self, sets: Sequence) -> List[torch.Tensor]:
        """Pooled features of a collection of graph sets, one [m_i, H'] matrix per set."""
        grouping = GraphGrouping()
        super_graph, counts = grouping.merge_and_count(sets)
        return grouping.regroup(self(super_graph), counts)
