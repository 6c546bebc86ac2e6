# summarynet/batching.py
"""
Stacking of variable-size replicate sets into one tensor and back.

Replicates live on dim 0 of every set tensor: a set is ``[m, *shape]``.
``stack`` concatenates all sets into ``[sum(m), *shape]`` and returns a
GroupingIndex recording which rows belong to which set.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import torch

from .errors import ShapeMismatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupingIndex:
    """
    Half-open row ranges of each set inside a batched tensor.

    counts:  replicates per set, in collection order
    offsets: cumulative starts, len(counts) + 1 entries (offsets[-1] == total)
    """
    counts: Tuple[int, ...]
    offsets: Tuple[int, ...]

    @classmethod
    def from_counts(cls, counts: Sequence[int]) -> "GroupingIndex":
        counts = tuple(int(c) for c in counts)
        offsets = [0]
        for c in counts:
            if c < 0:
                raise ShapeMismatch(f"Replicate counts must be non-negative, got {c}.")
            offsets.append(offsets[-1] + c)
        return cls(counts=counts, offsets=tuple(offsets))

    def __len__(self) -> int:
        return len(self.counts)

    @property
    def total(self) -> int:
        return self.offsets[-1]

    def bounds(self, i: int) -> Tuple[int, int]:
        return self.offsets[i], self.offsets[i + 1]

    def slices(self) -> List[slice]:
        return [slice(self.offsets[i], self.offsets[i + 1]) for i in range(len(self.counts))]


def _check_replicate_shapes(sets: Sequence[torch.Tensor]) -> None:
    if len(sets) == 0:
        raise ShapeMismatch("Cannot batch an empty collection of sets.")
    ref = None
    for i, z in enumerate(sets):
        if not isinstance(z, torch.Tensor):
            raise TypeError(f"Set {i} is {type(z).__name__}, expected a torch.Tensor.")
        if z.dim() < 1 or z.shape[0] == 0:
            raise ShapeMismatch(f"Set {i} has no replicates (shape {tuple(z.shape)}).")
        if ref is None:
            ref = tuple(z.shape[1:])
        elif tuple(z.shape[1:]) != ref:
            raise ShapeMismatch(
                f"Set {i} has replicate shape {tuple(z.shape[1:])}, expected {ref} "
                "(all replicates must agree on every non-replicate axis)."
            )


class ReplicateBatcher:
    """Concatenate sets along the replicate axis and split them back."""

    def stack(self, sets: Sequence[torch.Tensor]) -> Tuple[torch.Tensor, GroupingIndex]:
        _check_replicate_shapes(sets)
        index = GroupingIndex.from_counts([int(z.shape[0]) for z in sets])
        batched = torch.cat(list(sets), dim=0)
        logger.debug("stacked %d sets into %s", len(index), tuple(batched.shape))
        return batched, index

    def split(self, batched: torch.Tensor, index: GroupingIndex) -> List[torch.Tensor]:
        if batched.shape[0] != index.total:
            raise ShapeMismatch(
                f"Batched tensor has {batched.shape[0]} rows on the replicate axis, "
                f"grouping index covers {index.total}."
            )
        return [batched.narrow(0, start, count) for start, count in zip(index.offsets[:-1], index.counts)]


def stack_sets(sets: Sequence[torch.Tensor]) -> Tuple[torch.Tensor, GroupingIndex]:
    return ReplicateBatcher().stack(sets)


def split_sets(batched: torch.Tensor, index: GroupingIndex) -> List[torch.Tensor]:
    return ReplicateBatcher().split(batched, index)
