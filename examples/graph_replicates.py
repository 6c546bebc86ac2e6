"""
DeepSet over graph-structured replicates on a fixed spatial graph.

Every set holds m replicate fields observed on the same graph, passed as a
shared-topology graph; the GNN runs once on the merged super-graph.
"""
import torch
import torch.nn as nn
from torch_geometric.nn import GCNConv, Sequential
from torch_geometric.utils import grid

from summarynet import DeepSet, GraphPropagatePool, samplesize, shared_topology_graph


def main():
    torch.manual_seed(0)
    edge_index, pos = grid(height=8, width=8)
    n_nodes = pos.shape[0]

    propagation = Sequential("x, edge_index", [
        (GCNConv(1, 16), "x, edge_index -> x"),
        nn.ReLU(),
        (GCNConv(16, 16), "x, edge_index -> x"),
    ])
    inner = GraphPropagatePool(propagation, output_dim=16)
    outer = nn.Sequential(nn.Linear(16 + 1, 32), nn.ReLU(), nn.Linear(32, 2))
    model = DeepSet(inner, outer, expert=samplesize)
    print(model)

    sets = [shared_topology_graph(torch.randn(m, n_nodes, 1), edge_index) for m in (3, 10, 1)]
    with torch.no_grad():
        out = model(sets)
    print(out.shape)
    print(out)


if __name__ == "__main__":
    main()
