import numpy as np
import pandas as pd
from scipy.stats import pearsonr
from sklearn.metrics import (
    mean_absolute_error, mean_squared_error, r2_score,
    max_error, median_absolute_error
)


def _as_2d(values):
    values = np.asarray(values, dtype=np.float64)
    if values.ndim == 1:
        values = values.reshape(-1, 1)
    return values


def score_predictions(y_true, y_pred, target_names):
    """
    Score predictions per target.

    Parameters:
        y_true (array-like): Observed values, shape (n_samples, n_targets) or (n_samples,).
        y_pred (array-like): Predicted values, same shape as y_true.
        target_names (list of str): One name per target column.

    Returns:
        pd.DataFrame: One row per target with mae, rmse, r2, pearson_r, pearson_p,
        max_error and median_ae.
    """
    y_true = _as_2d(y_true)
    y_pred = _as_2d(y_pred)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Shape mismatch: y_true {y_true.shape} vs y_pred {y_pred.shape}")
    if y_true.shape[1] != len(target_names):
        raise ValueError(f"Expected {y_true.shape[1]} target names, got {len(target_names)}")

    rows = []
    for i, name in enumerate(target_names):
        t, p = y_true[:, i], y_pred[:, i]
        r, p_value = pearsonr(t, p)
        rows.append({
            'target': name,
            'mae': mean_absolute_error(t, p),
            'rmse': np.sqrt(mean_squared_error(t, p)),
            'r2': r2_score(t, p),
            'pearson_r': float(r),
            'pearson_p': float(p_value),
            'max_error': max_error(t, p),
            'median_ae': median_absolute_error(t, p),
        })

    return pd.DataFrame(rows).set_index('target')


def summarize_scores(scores):
    """Mean of the main metrics across targets, for the model log."""
    return {metric: float(scores[metric].mean()) for metric in ('mae', 'rmse', 'r2', 'pearson_r')}
