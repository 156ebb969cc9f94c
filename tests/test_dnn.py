import numpy as np
import pandas as pd
import pytest
import tensorflow as tf

from energy_efficiency import DNN

FAST = {
    'layer_sizes': [8, 4],
    'epochs': 3,
    'batch_size': 16,
    'patience': 2,
}


def _dense_units(model):
    return [layer.units for layer in model.layers if isinstance(layer, tf.keras.layers.Dense)]


def test_build_model_structure():
    model = DNN.build_model(8, 2, {'layer_sizes': [16, 8], 'dropout_rate': 0.1, 'batch_norm': True})

    assert _dense_units(model) == [16, 8, 2]
    assert sum(isinstance(layer, tf.keras.layers.Dropout) for layer in model.layers) == 2
    assert sum(isinstance(layer, tf.keras.layers.BatchNormalization) for layer in model.layers) == 2
    assert model.output_shape == (None, 2)


def test_build_model_returns_fresh_models():
    first = DNN.build_model(8, 2, FAST)
    second = DNN.build_model(8, 2, FAST)

    assert first is not second
    assert first.optimizer is not second.optimizer

    X = np.random.default_rng(0).normal(size=(32, 8))
    y = np.random.default_rng(1).normal(size=(32, 2))
    before = [w.copy() for w in second.get_weights()]
    first.fit(X, y, epochs=1, verbose=0)

    for w_before, w_after in zip(before, second.get_weights()):
        np.testing.assert_array_equal(w_before, w_after)


def test_build_model_optimizer():
    model = DNN.build_model(8, 2, {'optimizer_class': tf.keras.optimizers.RMSprop, 'learning_rate': 5e-3})

    assert isinstance(model.optimizer, tf.keras.optimizers.RMSprop)
    assert float(np.asarray(model.optimizer.learning_rate)) == pytest.approx(5e-3)


@pytest.mark.parametrize('hyperparameters', [
    {'layer_sizes': []},
    {'layer_sizes': [8, 0]},
    {'epochs': 0},
    {'batch_size': -1},
    {'learning_rate': 0.0},
    {'dropout_rate': 1.0},
    {'unknown_key': 1},
])
def test_invalid_hyperparameters(hyperparameters):
    with pytest.raises(ValueError):
        DNN.make_hyperparameters(hyperparameters)


def test_make_hyperparameters_merges_defaults():
    hp = DNN.make_hyperparameters({'epochs': 5})

    assert hp['epochs'] == 5
    assert hp['layer_sizes'] == DNN.DEFAULT_HYPERPARAMETERS['layer_sizes']
    assert hp['layer_sizes'] is not DNN.DEFAULT_HYPERPARAMETERS['layer_sizes']


def _builder(data_path, tmp_path, **kwargs):
    return DNN.EnergyModelBuilder(
        data_path=data_path,
        hyperparameters=FAST,
        models_log=str(tmp_path / "models_docs.csv"),
        models_folder=str(tmp_path / "models"),
        download=False,
        **kwargs
    )


def test_load_data_fits_scaler_on_train_rows(energy_xlsx, tmp_path):
    builder = _builder(energy_xlsx, tmp_path, ratios=(0.5, 0.25, 0.25), seed=3)
    builder._load_data()

    assert (len(builder.X_train), len(builder.X_val), len(builder.X_test)) == (30, 15, 15)
    np.testing.assert_allclose(builder.X_train.mean(axis=0), 0.0, atol=1e-10)
    np.testing.assert_allclose(builder.scaler.mean_, builder.train_df[builder.feature_columns].mean().to_numpy())
    assert builder.num_features == 8
    assert builder.num_outputs == 2


def test_load_data_rejects_empty_test(energy_xlsx, tmp_path):
    builder = _builder(energy_xlsx, tmp_path, ratios=(0.9, 0.1, 0.0))

    with pytest.raises(ValueError, match='no training or test rows'):
        builder._load_data()


def test_build_and_train(energy_xlsx, tmp_path):
    builder = _builder(energy_xlsx, tmp_path)
    model, scaler, history, X_test, y_test = builder.build_and_train()

    assert len(X_test) == 12
    assert y_test.shape == (12, 2)
    assert list(builder.scores.index) == ['Y1', 'Y2']
    assert 'val_loss' in history.history
    assert {'mae', 'rmse', 'r2', 'pearson_r', 'r2_Y1', 'pearson_r_Y2'} <= set(builder.metrics)

    models_folder = tmp_path / "models"
    assert (models_folder / (builder.model_name + ".keras")).exists()
    assert (models_folder / (builder.model_name + "_scaler.pkl")).exists()

    log = pd.read_csv(tmp_path / "models_docs.csv")
    assert len(log) == 1
    assert log.loc[0, 'model_name'] == builder.model_name
    assert log.loc[0, 'seed'] == 42
    assert log.loc[0, 'num_test'] == 12
    assert log.loc[0, 'optimizer'] == 'Adam'
    assert "EnergyModelBuilder Summary" in str(builder)


def test_build_and_train_with_validation_rows(energy_xlsx, tmp_path):
    builder = _builder(energy_xlsx, tmp_path, ratios=(0.6, 0.2, 0.2))
    builder.build_and_train()

    assert len(builder.X_val) == 12
    log = pd.read_csv(tmp_path / "models_docs.csv")
    assert log.loc[0, 'num_val'] == 12


def test_saved_model_reloads(energy_xlsx, tmp_path):
    builder = _builder(energy_xlsx, tmp_path)
    model, scaler, _, X_test, _ = builder.build_and_train()

    loaded, loaded_scaler = DNN.load_trained_model(str(tmp_path / "models"), builder.model_name)

    np.testing.assert_allclose(loaded_scaler.mean_, scaler.mean_)
    np.testing.assert_allclose(loaded.predict(X_test, verbose=0), model.predict(X_test, verbose=0),
                               rtol=1e-5, atol=1e-5)


def test_log_appends_rows(energy_xlsx, tmp_path):
    _builder(energy_xlsx, tmp_path).build_and_train()
    builder = _builder(energy_xlsx, tmp_path)
    builder._load_data()
    builder._build_model()
    builder._train_model()
    builder._evaluate_model()
    builder.model_name = "second"
    builder.trained_at = "now"
    builder._log_model()

    log = pd.read_csv(tmp_path / "models_docs.csv")
    assert len(log) == 2
    assert log['model_name'].iloc[-1] == "second"
