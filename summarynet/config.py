# summarynet/config.py
"""
Declarative configuration for MLP-based DeepSet models.

    cfg = DeepSetConfig(input_dim=10, summary_dim=32, output_dim=2)
    model = build_deepset(cfg)

`from_dict` is strict: unknown keys fail instead of being ignored.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .aggregation import AGG_NAMES
from .architectures import DeepSet
from .errors import ConfigurationError
from .expert import samplesize
from .networks import MLP

_EXPERTS = {"samplesize": samplesize}


@dataclass(frozen=True)
class DeepSetConfig:
    input_dim: int
    output_dim: int
    summary_dim: int = 32

    inner_hidden: int = 64
    inner_depth: int = 2
    outer_hidden: int = 64
    outer_depth: int = 2
    dropout: float = 0.0

    aggregation: str = "mean"
    expert: Optional[str] = None
    covariate_dim: int = 0

    def validate(self) -> "DeepSetConfig":
        for name in ("input_dim", "output_dim", "summary_dim", "inner_hidden", "outer_hidden"):
            if int(getattr(self, name)) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}.")
        for name in ("inner_depth", "outer_depth", "covariate_dim"):
            if int(getattr(self, name)) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}.")
        if not 0.0 <= float(self.dropout) < 1.0:
            raise ConfigurationError(f"dropout must be in [0, 1), got {self.dropout}.")
        if self.aggregation not in AGG_NAMES:
            raise ConfigurationError(f"aggregation must be one of {AGG_NAMES}, got '{self.aggregation}'.")
        if self.expert is not None and self.expert not in _EXPERTS:
            raise ConfigurationError(f"expert must be one of {sorted(_EXPERTS)} or None, got '{self.expert}'.")
        return self

    @property
    def expert_dim(self) -> int:
        return 0 if self.expert is None else int(_EXPERTS[self.expert].output_dim)

    @property
    def fused_dim(self) -> int:
        return int(self.summary_dim) + self.expert_dim + int(self.covariate_dim)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DeepSetConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(f"Unknown DeepSetConfig keys: {unknown}. Valid keys: {sorted(known)}.")
        try:
            cfg = cls(**dict(raw))
        except TypeError as e:
            raise ConfigurationError(str(e)) from e
        return cfg.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_deepset(config: DeepSetConfig) -> DeepSet:
    config.validate()
    inner = MLP(
        config.input_dim,
        hidden=config.inner_hidden,
        depth=config.inner_depth,
        output_dim=config.summary_dim,
        dropout=config.dropout,
    )
    outer = MLP(
        config.fused_dim,
        hidden=config.outer_hidden,
        depth=config.outer_depth,
        output_dim=config.output_dim,
        dropout=config.dropout,
    )
    expert = None if config.expert is None else _EXPERTS[config.expert]
    return DeepSet(
        inner,
        outer,
        aggregation=config.aggregation,
        expert=expert,
        summary_dim=config.summary_dim,
        expert_dim=config.expert_dim,
        covariate_dim=config.covariate_dim,
    )
