"""Plot helpers; every figure is saved as png and closed immediately."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_histograms(frame: pd.DataFrame, columns: list[str], output_path: Path, title: str) -> Path:
    count = max(len(columns), 1)
    fig, axes = plt.subplots(1, count, figsize=(4 * count, 3.5), squeeze=False)
    for ax, column in zip(axes[0], columns, strict=False):
        ax.hist(frame[column].dropna(), bins=20, color="steelblue", edgecolor="white")
        ax.set_title(column)
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
    return output_path


def plot_line(
    frame: pd.DataFrame,
    x: str,
    y: str,
    output_path: Path,
    title: str,
    *,
    group: str | None = None,
    error: str | None = None,
) -> Path:
    fig, ax = plt.subplots(figsize=(8, 4))
    groups = [(None, frame)] if group is None else list(frame.groupby(group))
    for label, part in groups:
        ordered = part.sort_values(x)
        if error:
            ax.errorbar(ordered[x], ordered[y], yerr=ordered[error], marker="o", capsize=3, label=label)
        else:
            ax.plot(ordered[x], ordered[y], marker="o", label=label)
    ax.set_title(title)
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    if group is not None:
        ax.legend()
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
    return output_path


def plot_bar(labels: list[str], values: list[float], output_path: Path, title: str, xlabel: str) -> Path:
    fig, ax = plt.subplots(figsize=(8, max(3.0, 0.35 * len(labels))))
    positions = np.arange(len(labels))
    ax.barh(positions, values, color="steelblue")
    ax.set_yticks(positions)
    ax.set_yticklabels(labels)
    ax.invert_yaxis()
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
    return output_path


def plot_observed_predicted(observed: np.ndarray, predicted: np.ndarray, output_path: Path, title: str) -> Path:
    fig, axes = plt.subplots(1, 2, figsize=(10, 4))
    axes[0].scatter(predicted, observed, s=8, alpha=0.6)
    low = float(min(np.min(observed), np.min(predicted)))
    high = float(max(np.max(observed), np.max(predicted)))
    axes[0].plot([low, high], [low, high], color="black", linestyle="--", linewidth=1)
    axes[0].set_xlabel("Predicted")
    axes[0].set_ylabel("Observed")
    axes[1].scatter(predicted, observed - predicted, s=8, alpha=0.6)
    axes[1].axhline(0.0, color="black", linestyle="--", linewidth=1)
    axes[1].set_xlabel("Predicted")
    axes[1].set_ylabel("Residual")
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
    return output_path
