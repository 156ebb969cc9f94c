"""
Diagnostic plots: feature/target correlation heatmap, predicted vs. actual loads,
and training loss curves.
"""

import os

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from scipy.stats import pearsonr


def _save(fig, save_path):
    if save_path is None:
        return
    folder = os.path.dirname(save_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    fig.savefig(save_path)


def plot_correlation_matrix(df, columns=None, labels=None, save_path=None):
    """
    Heatmap of the Pearson correlation matrix.

    Parameters:
        df (pd.DataFrame): Data to correlate.
        columns (list of str, optional): Columns to include. Defaults to all columns.
        labels (dict, optional): Maps column names to axis labels.
        save_path (str, optional): Where to save the figure.
    """
    columns = list(columns) if columns is not None else list(df.columns)
    corr = df[columns].corr()
    if labels:
        names = [labels.get(col, col) for col in columns]
        corr.index = names
        corr.columns = names

    fig, ax = plt.subplots(figsize=(10, 8))
    sns.heatmap(corr, annot=True, fmt=".2f", cmap="coolwarm", vmin=-1, vmax=1,
                square=True, ax=ax)
    ax.set_title("Correlation Matrix")
    fig.tight_layout()
    _save(fig, save_path)
    return fig


def plot_predictions(y_true, y_pred, target_names, save_path=None):
    """Predicted vs. actual scatter per target, with the identity line and Pearson r."""
    y_true = np.asarray(y_true).reshape(len(y_true), -1)
    y_pred = np.asarray(y_pred).reshape(len(y_pred), -1)

    fig, axes = plt.subplots(1, len(target_names), figsize=(6 * len(target_names), 5),
                             squeeze=False)
    colors = sns.color_palette("tab10", len(target_names))

    for i, (ax, name) in enumerate(zip(axes[0], target_names)):
        t, p = y_true[:, i], y_pred[:, i]
        r, _ = pearsonr(t, p)
        lo, hi = min(t.min(), p.min()), max(t.max(), p.max())

        ax.scatter(t, p, alpha=0.6, color=colors[i])
        ax.plot([lo, hi], [lo, hi], color='black', linewidth=1.5, linestyle='--')
        ax.set_title(f"{name} (r = {r:.3f})")
        ax.set_xlabel("Actual")
        ax.set_ylabel("Predicted")
        ax.grid(True)

    fig.tight_layout()
    _save(fig, save_path)
    return fig


def plot_training_history(history, save_path=None):
    """Training and validation loss per epoch. Accepts a Keras History or its .history dict."""
    hist = getattr(history, 'history', history)

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(hist['loss'], label='Training loss')
    if 'val_loss' in hist:
        ax.plot(hist['val_loss'], label='Validation loss')
    ax.set_title("Training History")
    ax.set_xlabel("Epoch")
    ax.set_ylabel("Loss")
    ax.legend()
    ax.grid(True)
    fig.tight_layout()
    _save(fig, save_path)
    return fig
