import torch
import torch.nn as nn

from summarynet import MLP, DeepSet, samplesize, summary_df, summary_layout


def test_layout_follows_fusion_order():
    model = DeepSet(MLP(5, output_dim=3), None, expert=samplesize, covariate_dim=2)
    assert summary_layout(model) == [
        "learned_0", "learned_1", "learned_2", "expert_0", "covariate_0", "covariate_1",
    ]


def test_summary_df_rows_per_set():
    torch.manual_seed(0)
    model = DeepSet(MLP(5, output_dim=3), nn.Linear(4, 1), expert=samplesize)
    Z = [torch.randn(2, 5), torch.randn(6, 5), torch.randn(1, 5)]
    df = summary_df(model, Z)
    assert list(df.columns) == ["n_replicates", "learned_0", "learned_1", "learned_2", "expert_0"]
    assert df["n_replicates"].tolist() == [2, 6, 1]
    assert df["expert_0"].tolist() == [2.0, 6.0, 1.0]

    single = summary_df(model, Z[1])
    assert len(single) == 1


def test_summary_df_unknown_widths_uses_generic_names():
    model = DeepSet(lambda x: x, None)
    df = summary_df(model, [torch.randn(2, 3), torch.randn(3, 3)])
    assert list(df.columns) == ["n_replicates", "u_0", "u_1", "u_2"]
