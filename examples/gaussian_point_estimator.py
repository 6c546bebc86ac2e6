"""
Point estimation of (mu, sigma) from sets of Gaussian replicates with a DeepSet.

Each parameter vector gets its own set of m replicates, with m varying across
sets, so the estimator has to work for any sample size. The replicate count is
fed to the outer network as an expert statistic.
"""
import time

import numpy as np
import torch
import torch.nn as nn
from sklearn.model_selection import train_test_split

from summarynet import DeepSetConfig, build_deepset, summary_df

# === Global hyperparameters ===
N_SETS = 4000
M_RANGE = (5, 60)
EPOCHS = 30
BATCH_SETS = 64
LR = 1e-3


def simulate(theta: np.ndarray, rng: np.random.RandomState):
    sets = []
    for mu, sigma in theta:
        m = rng.randint(*M_RANGE)
        z = mu + sigma * rng.randn(m, 1)
        sets.append(torch.tensor(z, dtype=torch.float32))
    return sets


def main():
    rng = np.random.RandomState(0)
    torch.manual_seed(0)

    theta = np.column_stack([rng.uniform(-2, 2, N_SETS), rng.uniform(0.2, 2.0, N_SETS)]).astype(np.float32)
    theta_train, theta_val = train_test_split(theta, test_size=0.2, random_state=0)
    Z_train, Z_val = simulate(theta_train, rng), simulate(theta_val, rng)
    y_train, y_val = torch.tensor(theta_train), torch.tensor(theta_val)

    cfg = DeepSetConfig(input_dim=1, output_dim=2, summary_dim=32, expert="samplesize")
    model = build_deepset(cfg)
    optimizer = torch.optim.AdamW(model.parameters(), lr=LR, weight_decay=1e-4)
    criterion = nn.L1Loss()

    start = time.time()
    for epoch in range(EPOCHS):
        model.train()
        order = rng.permutation(len(Z_train))
        for b in range(0, len(order), BATCH_SETS):
            idx = order[b:b + BATCH_SETS]
            out = model([Z_train[i] for i in idx])
            loss = criterion(out, y_train[idx])
            optimizer.zero_grad()
            loss.backward()
            optimizer.step()

        model.eval()
        with torch.no_grad():
            val_loss = criterion(model(Z_val), y_val).item()
        if epoch % 5 == 0 or epoch == EPOCHS - 1:
            print(f"epoch {epoch:3d}  val MAE={val_loss:.4f}")
    print(f"Training time: {time.time() - start:.2f}s")

    print(summary_df(model, Z_val[:5]).iloc[:, :6])


if __name__ == "__main__":
    main()
