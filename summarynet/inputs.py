# summarynet/inputs.py
"""
Classification of architecture inputs into a closed set of variants.

Accepted forms
--------------
- Tensor                         one array set, replicates on dim 0
                                 (a 1-D tensor is a single replicate)
- torch_geometric graph          one graph set
- list of tensors / graphs       a collection of independent sets
- (data, covariates) tuple       any of the above plus set-level covariates

Covariates are resolved here, before any tensor work, into a [K, q] tensor:
either one vector per set or exactly one vector shared by all sets.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
import torch

from .errors import DimensionMismatch
from .graphs import count_graph_replicates, is_graph


class InputKind(enum.Enum):
    ARRAY = "array"
    GRAPH = "graph"


@dataclass(frozen=True)
class ParsedInput:
    kind: InputKind
    sets: List
    single: bool
    covariates: Optional[torch.Tensor] = None  # [K, q]

    def __len__(self) -> int:
        return len(self.sets)

    @property
    def covariate_dim(self) -> int:
        return 0 if self.covariates is None else int(self.covariates.shape[1])


def _as_array_set(z: torch.Tensor) -> torch.Tensor:
    return z.unsqueeze(0) if z.dim() == 1 else z


def _kind_of(obj) -> Optional[InputKind]:
    if isinstance(obj, torch.Tensor):
        return InputKind.ARRAY
    if is_graph(obj):
        return InputKind.GRAPH
    return None


def _covariate_vector(x) -> torch.Tensor:
    t = x if isinstance(x, torch.Tensor) else torch.as_tensor(np.asarray(x, dtype=np.float32))
    if t.dim() != 1:
        raise DimensionMismatch(f"Each covariate must be a vector, got shape {tuple(t.shape)}.")
    return t


def resolve_covariates(covariates, n_sets: int) -> torch.Tensor:
    """
    Normalise covariates to [n_sets, q].

    A single vector (1-D tensor, [1, q] tensor or one-element list) is
    broadcast to every set; otherwise exactly n_sets vectors are required.
    """
    if isinstance(covariates, torch.Tensor) or isinstance(covariates, np.ndarray):
        X = covariates if isinstance(covariates, torch.Tensor) else torch.as_tensor(covariates)
        if X.dim() == 1:
            X = X.unsqueeze(0)
        if X.dim() != 2:
            raise DimensionMismatch(f"Covariates must be [q] or [K, q], got shape {tuple(X.shape)}.")
    elif isinstance(covariates, (list, tuple)):
        if len(covariates) == 0:
            raise DimensionMismatch("Covariates were given as an empty sequence.")
        if all(isinstance(c, (int, float)) for c in covariates):
            X = _covariate_vector(list(covariates)).unsqueeze(0)
        else:
            vecs = [_covariate_vector(c) for c in covariates]
            widths = {int(v.shape[0]) for v in vecs}
            if len(widths) != 1:
                raise DimensionMismatch(f"Covariate vectors have differing lengths {sorted(widths)}.")
            X = torch.stack(vecs, dim=0)
    else:
        raise TypeError(f"Unsupported covariate type {type(covariates).__name__}.")

    if X.shape[0] == n_sets:
        return X
    if X.shape[0] == 1:
        return X.expand(n_sets, -1)
    raise DimensionMismatch(
        f"Got {X.shape[0]} covariate vectors for {n_sets} sets; "
        "give one vector per set or a single shared vector."
    )


def parse_inputs(inputs) -> ParsedInput:
    covariates = None
    if isinstance(inputs, tuple):
        if len(inputs) != 2:
            raise TypeError(
                f"Tuple inputs must be (data, covariates), got a tuple of length {len(inputs)}."
            )
        inputs, covariates = inputs
        if isinstance(inputs, tuple):
            raise TypeError("Nested (data, covariates) tuples are not supported.")

    kind = _kind_of(inputs)
    if kind is not None:
        single = True
        sets = [_as_array_set(inputs) if kind is InputKind.ARRAY else inputs]
    elif isinstance(inputs, list):
        if len(inputs) == 0:
            raise TypeError("Cannot evaluate an empty collection of sets.")
        kinds = {_kind_of(z) for z in inputs}
        if None in kinds:
            bad = next(type(z).__name__ for z in inputs if _kind_of(z) is None)
            raise TypeError(f"Unsupported set type {bad}; expected torch.Tensor or a torch_geometric graph.")
        if len(kinds) != 1:
            raise TypeError("A collection must hold only array sets or only graph sets.")
        kind = kinds.pop()
        single = False
        sets = [_as_array_set(z) for z in inputs] if kind is InputKind.ARRAY else list(inputs)
    else:
        raise TypeError(
            f"Unsupported input type {type(inputs).__name__}; expected a tensor, a graph, "
            "a list of those, or a (data, covariates) tuple."
        )

    X = None if covariates is None else resolve_covariates(covariates, len(sets))
    return ParsedInput(kind=kind, sets=sets, single=single, covariates=X)


def numberreplicates(Z) -> Union[int, List[int]]:
    """Replicates in a set (dim 0 of a tensor, components of a graph); a list gives one count per set."""
    if isinstance(Z, list):
        return [numberreplicates(z) for z in Z]
    if isinstance(Z, torch.Tensor):
        return 1 if Z.dim() <= 1 else int(Z.shape[0])
    if is_graph(Z):
        return count_graph_replicates(Z)
    if isinstance(Z, np.ndarray):
        return 1 if Z.ndim <= 1 else int(Z.shape[0])
    raise TypeError(f"Cannot count replicates of {type(Z).__name__}.")
