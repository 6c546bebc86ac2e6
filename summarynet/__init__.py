from .version import __version__
from .errors import SummaryNetError, ConfigurationError, ShapeMismatch, DimensionMismatch
from .aggregation import AGG_NAMES, Aggregator, mean_reduce, sum_reduce, logsumexp_reduce
from .batching import GroupingIndex, ReplicateBatcher, stack_sets, split_sets
from .graphs import GraphGrouping, GraphPropagatePool, shared_topology_graph
from .inputs import InputKind, ParsedInput, parse_inputs, resolve_covariates, numberreplicates
from .expert import samplesize, ExpertStatistics, concat_statistics
from .outer import OuterMap, infer_input_width, infer_output_width
from .summary import SummaryComputer
from .architectures import DeepSet
from .networks import MLP
from .config import DeepSetConfig, build_deepset
from .explain import summary_layout, summary_df

__all__ = [
    "__version__",
    "SummaryNetError",
    "ConfigurationError",
    "ShapeMismatch",
    "DimensionMismatch",
    "AGG_NAMES",
    "Aggregator",
    "mean_reduce",
    "sum_reduce",
    "logsumexp_reduce",
    "GroupingIndex",
    "ReplicateBatcher",
    "stack_sets",
    "split_sets",
    "GraphGrouping",
    "GraphPropagatePool",
    "shared_topology_graph",
    "InputKind",
    "ParsedInput",
    "parse_inputs",
    "resolve_covariates",
    "numberreplicates",
    "samplesize",
    "ExpertStatistics",
    "concat_statistics",
    "OuterMap",
    "infer_input_width",
    "infer_output_width",
    "SummaryComputer",
    "DeepSet",
    "MLP",
    "DeepSetConfig",
    "build_deepset",
    "summary_layout",
    "summary_df",
]
