import matplotlib

matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from energy_efficiency import DATA


def make_energy_frame(n_rows=60, seed=0):
    """Synthetic table with the dataset's layout; loads depend linearly on the features."""
    rng = np.random.default_rng(seed)
    X = rng.uniform(0.0, 1.0, size=(n_rows, len(DATA.FEATURE_COLUMNS)))
    df = pd.DataFrame(X, columns=DATA.FEATURE_COLUMNS)
    df['Y1'] = 10 + 20 * df['X1'] + 5 * df['X7'] + rng.normal(0, 0.1, n_rows)
    df['Y2'] = 15 + 10 * df['X5'] - 3 * df['X2'] + rng.normal(0, 0.1, n_rows)
    return df


@pytest.fixture
def energy_frame():
    return make_energy_frame()


@pytest.fixture
def energy_xlsx(tmp_path, energy_frame):
    data_path = tmp_path / "ENB2012_data.xlsx"
    energy_frame.to_excel(data_path, index=False)
    return str(data_path)
