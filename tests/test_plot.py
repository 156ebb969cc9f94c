import matplotlib.pyplot as plt
import numpy as np
import pytest

from energy_efficiency import DATA, PLOT


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close('all')


def test_correlation_matrix(energy_frame, tmp_path):
    save_path = tmp_path / "figures" / "correlation.png"
    fig = PLOT.plot_correlation_matrix(energy_frame, labels=DATA.COLUMN_DESCRIPTIONS,
                                       save_path=str(save_path))

    assert save_path.exists()
    labels = [t.get_text() for t in fig.axes[0].get_xticklabels()]
    assert "Heating Load" in labels


def test_correlation_matrix_subset(energy_frame):
    fig = PLOT.plot_correlation_matrix(energy_frame, columns=['X1', 'Y1'])
    labels = [t.get_text() for t in fig.axes[0].get_xticklabels()]
    assert labels == ['X1', 'Y1']


def test_predictions(tmp_path):
    rng = np.random.default_rng(0)
    y_true = rng.uniform(10, 40, size=(30, 2))
    y_pred = y_true + rng.normal(0, 1, size=(30, 2))
    save_path = tmp_path / "pred.png"

    fig = PLOT.plot_predictions(y_true, y_pred, ["Heating Load", "Cooling Load"], save_path=str(save_path))

    assert save_path.exists()
    assert len(fig.axes) == 2
    assert fig.axes[0].get_title().startswith("Heating Load (r = ")


def test_training_history_from_dict():
    fig = PLOT.plot_training_history({'loss': [3.0, 2.0, 1.0], 'val_loss': [3.5, 2.5, 2.0]})
    assert len(fig.axes[0].get_lines()) == 2


def test_training_history_without_validation():
    fig = PLOT.plot_training_history({'loss': [3.0, 2.0]})
    assert len(fig.axes[0].get_lines()) == 1
