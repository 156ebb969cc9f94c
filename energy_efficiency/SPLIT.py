# -*- coding: utf-8 -*-
"""
SPLIT

Train / validation / test partitioning of a tabular dataset. Rows are assigned by a random
permutation of their positions, so the three outputs are disjoint and together contain every
input row exactly once. Randomness comes from an explicit numpy Generator, either passed in
directly or created from a seed.
"""

from typing import NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd

RATIO_TOLERANCE = 1e-6


class SplitError(ValueError):
    """Base exception for splitting errors."""


class InvalidRatioError(SplitError):
    """Raised when split ratios are negative, above one, or do not sum to one."""


class EmptyTableError(SplitError):
    """Raised when the table to split has no rows."""


class SplitResult(NamedTuple):
    train: pd.DataFrame
    val: pd.DataFrame
    test: pd.DataFrame


def _check_ratios(train_ratio, val_ratio, test_ratio):
    ratios = {'train_ratio': train_ratio, 'val_ratio': val_ratio, 'test_ratio': test_ratio}
    for name, value in ratios.items():
        if not 0.0 <= value <= 1.0:
            raise InvalidRatioError(f"{name} must be within [0, 1], got {value}")

    total = train_ratio + val_ratio + test_ratio
    if abs(total - 1.0) > RATIO_TOLERANCE:
        raise InvalidRatioError(f"Ratios must sum to 1.0, got {total:.6f} "
                                f"({train_ratio}, {val_ratio}, {test_ratio})")


def split_counts(n_rows: int, train_ratio: float, val_ratio: float,
                 test_ratio: float) -> Tuple[int, int, int]:
    """
    Number of rows per partition. The test partition absorbs the rounding remainder.

    When rounding pushes n_train + n_val above n_rows (e.g. 3 rows at 0.5/0.5/0.0) the
    validation count is reduced first so that no count goes negative.
    """
    _check_ratios(train_ratio, val_ratio, test_ratio)

    n_train = min(int(round(n_rows * train_ratio)), n_rows)
    n_val = min(int(round(n_rows * val_ratio)), n_rows - n_train)
    n_test = n_rows - n_train - n_val
    return n_train, n_val, n_test


def split(table: pd.DataFrame, train_ratio: float, val_ratio: float, test_ratio: float,
          seed: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> SplitResult:
    """
    Randomly partition the rows of a table into train, validation and test tables.

    Parameters:
        table (pd.DataFrame): Non-empty table to split. It is not modified.
        train_ratio (float): Fraction of rows for the training table.
        val_ratio (float): Fraction of rows for the validation table (may be 0).
        test_ratio (float): Fraction of rows for the test table.
        seed (int, optional): Seed for the row permutation. Ignored if `rng` is given.
        rng (np.random.Generator, optional): Generator to draw the permutation from.

    Returns:
        SplitResult: (train, val, test) tables keeping the input's columns and index labels.

    Raises:
        InvalidRatioError: Ratios outside [0, 1] or not summing to 1 within RATIO_TOLERANCE.
        EmptyTableError: The table has no rows.
    """
    _check_ratios(train_ratio, val_ratio, test_ratio)
    if len(table) == 0:
        raise EmptyTableError("Cannot split an empty table")

    n_train, n_val, _ = split_counts(len(table), train_ratio, val_ratio, test_ratio)

    if rng is None:
        rng = np.random.default_rng(seed)
    order = rng.permutation(len(table))

    train_idx = order[:n_train]
    val_idx = order[n_train:n_train + n_val]
    test_idx = order[n_train + n_val:]

    return SplitResult(
        train=table.iloc[train_idx].copy(),
        val=table.iloc[val_idx].copy(),
        test=table.iloc[test_idx].copy(),
    )
