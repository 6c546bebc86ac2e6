# summarynet/networks.py
from __future__ import annotations

import torch
import torch.nn as nn


class MLP(nn.Module):
    """
    Linear/ReLU stack acting on the last axis.

    Applied to a set tensor [m, d] it transforms every replicate independently,
    which makes it a valid inner network; on a fused summary [K, q] it is an
    outer network.
    """
    def __init__(self, input_dim: int, hidden: int = 64, depth: int = 2, output_dim: int = 1, dropout: float = 0.0):
        super().__init__()
        self.input_dim = int(input_dim)
        self.output_dim = int(output_dim)
        layers = []
        d = self.input_dim
        for _ in range(int(depth)):
            layers += [nn.Linear(d, int(hidden)), nn.ReLU()]
            if dropout > 0:
                layers.append(nn.Dropout(float(dropout)))
            d = int(hidden)
        layers += [nn.Linear(d, self.output_dim)]
        self.net = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.net(x)
