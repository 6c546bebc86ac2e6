# summarynet/explain.py
"""
Tabular views of fused summaries, for inspecting what the outer network sees.
"""
from __future__ import annotations

from typing import List, Optional

import pandas as pd
import torch

from .architectures import DeepSet
from .inputs import numberreplicates, parse_inputs


def summary_layout(model: DeepSet, covariate_dim: Optional[int] = None) -> List[str]:
    """
    Column names of the fused summary in fusion order:
    learned_0..., expert_0..., covariate_0...
    """
    q = model.covariate_dim if covariate_dim is None else covariate_dim
    widths = {"learned": model.summary_dim, "expert": model.expert_dim, "covariate": q}
    unknown = [k for k, w in widths.items() if w is None]
    if unknown:
        raise ValueError(f"Block widths unknown for {unknown}; pass summary_dim/expert_dim when building the model.")
    cols: List[str] = []
    for prefix, w in widths.items():
        cols += [f"{prefix}_{i}" for i in range(int(w))]
    return cols


@torch.no_grad()
def summary_df(model: DeepSet, inputs) -> pd.DataFrame:
    """
    One row per set with the fused summary and the replicate count.
    """
    parsed = parse_inputs(inputs)
    U = model.summarise(parsed)
    if parsed.single:
        U = U.unsqueeze(0)
    U = U.detach().cpu().numpy()
    cols = [f"u_{i}" for i in range(U.shape[1])]
    if model.summary_dim is not None and model.expert_dim is not None:
        named = summary_layout(model, covariate_dim=parsed.covariate_dim)
        if len(named) == U.shape[1]:
            cols = named
    df = pd.DataFrame(U, columns=cols)
    df.insert(0, "n_replicates", [numberreplicates(z) for z in parsed.sets])
    return df
