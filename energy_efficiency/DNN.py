# -*- coding: utf-8 -*-
"""
DNN

Feed-forward regression networks predicting heating (Y1) and cooling (Y2) load from the
eight building descriptors of the energy efficiency dataset.

`build_model` is a pure factory: every call returns a freshly constructed and compiled Keras
model, so experiments never share network state. `EnergyModelBuilder` runs a full experiment:
loading the data, splitting it into train/validation/test partitions, scaling features (the
scaler is fitted on the training rows only), training with optional early stopping, scoring the
test predictions, saving the model and scaler, and appending a row to a CSV model log.
"""

import os
import time
import datetime
import joblib
import pandas as pd
import numpy as np
from os import path
from sklearn.preprocessing import StandardScaler
import tensorflow as tf
from tensorflow.keras.models import Sequential
from tensorflow.keras.layers import Input, Dense, Dropout, BatchNormalization
from tensorflow.keras.optimizers import Adam

from energy_efficiency import DATA, EVAL, SPLIT

DEFAULT_HYPERPARAMETERS = {
    'layer_sizes': [64, 32],
    'learning_rate': 1e-3,
    'epochs': 500,
    'batch_size': 32,
    'batch_norm': False,
    'activation': 'relu',
    'optimizer_class': Adam,
    'loss_function': 'mse',
    'use_early_stopping': True,
    'patience': 10,
    'dropout_rate': None,
    'verbose': False,
}


def make_hyperparameters(hyperparameters=None):
    """
    Merge `hyperparameters` over DEFAULT_HYPERPARAMETERS and validate the result.

    Raises:
        ValueError: Unknown keys or out-of-range values.
    """
    hyperparameters = dict(hyperparameters or {})
    unknown = set(hyperparameters) - set(DEFAULT_HYPERPARAMETERS)
    if unknown:
        raise ValueError(f"Unknown hyperparameters: {', '.join(sorted(unknown))}")

    hp = {**DEFAULT_HYPERPARAMETERS, **hyperparameters}
    hp['layer_sizes'] = list(hp['layer_sizes'])

    if not hp['layer_sizes'] or any(int(size) <= 0 for size in hp['layer_sizes']):
        raise ValueError(f"layer_sizes must be a non-empty list of positive ints, got {hp['layer_sizes']}")
    if hp['epochs'] <= 0 or hp['batch_size'] <= 0:
        raise ValueError("epochs and batch_size must be positive")
    if hp['learning_rate'] <= 0:
        raise ValueError(f"learning_rate must be positive, got {hp['learning_rate']}")
    if hp['dropout_rate'] is not None and not 0.0 <= hp['dropout_rate'] < 1.0:
        raise ValueError(f"dropout_rate must be within [0, 1), got {hp['dropout_rate']}")
    return hp


def build_model(num_features, num_outputs, hyperparameters=None):
    """
    Construct and compile a new Sequential regression network.

    Parameters:
        num_features (int): Number of input features.
        num_outputs (int): Number of regression targets.
        hyperparameters (dict, optional): Overrides for DEFAULT_HYPERPARAMETERS. Uses
            layer_sizes, activation, batch_norm, dropout_rate, optimizer_class,
            learning_rate and loss_function.

    Returns:
        tf.keras.Model: Compiled model with a linear output layer of size `num_outputs`.
    """
    hp = make_hyperparameters(hyperparameters)

    model = Sequential()
    model.add(Input(shape=(num_features,)))

    for size in hp['layer_sizes']:
        model.add(Dense(int(size), activation=hp['activation']))
        if hp['batch_norm']:
            model.add(BatchNormalization())
        if hp['dropout_rate'] is not None:
            model.add(Dropout(hp['dropout_rate']))

    model.add(Dense(num_outputs))  # Output layer

    optimizer = hp['optimizer_class'](learning_rate=hp['learning_rate'])
    model.compile(optimizer=optimizer, loss=hp['loss_function'], metrics=['mae'])
    return model


def load_trained_model(models_folder, model_name):
    """Load a saved model and its scaler. Returns (model, scaler)."""
    model = tf.keras.models.load_model(path.join(models_folder, model_name + ".keras"))
    scaler = joblib.load(path.join(models_folder, model_name + "_scaler.pkl"))
    return model, scaler


class EnergyModelBuilder:
    """
    Builds, trains, evaluates and logs a heating/cooling load regression network.
    """

    def __init__(self, data_path=DATA.DATA_PATH, hyperparameters=None,
                 ratios=(0.8, 0.0, 0.2), seed=42,
                 feature_columns=DATA.FEATURE_COLUMNS,
                 target_columns=DATA.TARGET_COLUMNS,
                 models_log=os.path.join("data", "DNN_trained_models_docs.csv"),
                 models_folder=os.path.join("data", "DNN_trained_models"),
                 download=True):
        """
        Parameters:
            data_path (str): Path to the dataset spreadsheet (downloaded if missing and
                `download` is true).
            hyperparameters (dict, optional): Overrides for DEFAULT_HYPERPARAMETERS.
            ratios (tuple of float): (train, validation, test) fractions, summing to 1.
            seed (int, optional): Seed for the row split. None gives a different split per run.
            feature_columns (list of str): Input columns.
            target_columns (list of str): Output columns.
            models_log (str): Path to the model log CSV.
            models_folder (str): Directory for saved models and scalers.
        """
        self.hyperparameters = make_hyperparameters(hyperparameters)
        self.data_path = data_path
        self.train_ratio, self.val_ratio, self.test_ratio = ratios
        self.seed = seed
        self.feature_columns = list(feature_columns)
        self.target_columns = list(target_columns)
        self.models_log = models_log
        self.models_folder = models_folder
        self.download = download
        self.verbose = self.hyperparameters['verbose']

        self.scaler = StandardScaler()
        self.model = None
        self.history = None
        self.model_name = None
        self.trained_at = None
        self.training_duration = None
        self.scores = None
        self.metrics = {}

    def __str__(self):
        if self.model_name:
            return (f"EnergyModelBuilder Summary\n"
                    f"Model: {self.model_name}\n"
                    f"Trained at: {self.trained_at}\n"
                    f"Layer sizes: {self.hyperparameters['layer_sizes']}\n"
                    f"MAE: {self.metrics['mae']:.4f}, "
                    f"RMSE: {self.metrics['rmse']:.4f}, "
                    f"R^2: {self.metrics['r2']:.4f}, "
                    f"r: {self.metrics['pearson_r']:.4f}")
        return "EnergyModelBuilder (untrained)"

    def _load_data(self):
        """Load the dataset, split it and scale the features with a scaler fitted on train rows."""
        df = DATA.load_dataset(self.data_path, download=self.download,
                               feature_columns=self.feature_columns,
                               target_columns=self.target_columns)

        rng = np.random.default_rng(self.seed)
        self.train_df, self.val_df, self.test_df = SPLIT.split(
            df, self.train_ratio, self.val_ratio, self.test_ratio, rng=rng)

        if len(self.train_df) == 0 or len(self.test_df) == 0:
            raise ValueError(f"Split of {len(df)} rows left no training or test rows "
                             f"(ratios {self.train_ratio}, {self.val_ratio}, {self.test_ratio})")

        X_train, self.y_train = DATA.features_targets(self.train_df, self.feature_columns, self.target_columns)
        X_val, self.y_val = DATA.features_targets(self.val_df, self.feature_columns, self.target_columns)
        X_test, self.y_test = DATA.features_targets(self.test_df, self.feature_columns, self.target_columns)

        self.X_train = self.scaler.fit_transform(X_train)
        self.X_val = self.scaler.transform(X_val) if len(X_val) else X_val
        self.X_test = self.scaler.transform(X_test)

        self.num_features = self.X_train.shape[1]
        self.num_outputs = self.y_train.shape[1]

    def _build_model(self):
        self.model = build_model(self.num_features, self.num_outputs, self.hyperparameters)

    def _train_model(self):
        """Trains the model and tracks training duration."""
        hp = self.hyperparameters
        callbacks = []
        if hp['use_early_stopping']:
            callbacks.append(tf.keras.callbacks.EarlyStopping(
                patience=hp['patience'], restore_best_weights=True))

        # Without a validation partition, hold out part of the training rows instead
        if len(self.X_val):
            validation = {'validation_data': (self.X_val, self.y_val)}
        else:
            validation = {'validation_split': 0.1}

        start = datetime.datetime.now()
        self.history = self.model.fit(
            self.X_train, self.y_train,
            epochs=hp['epochs'],
            batch_size=hp['batch_size'],
            callbacks=callbacks,
            verbose=int(self.verbose),
            **validation)
        end = datetime.datetime.now()
        self.training_duration = (end - start).total_seconds()

    def _evaluate_model(self):
        """Scores test predictions per target and stores the averaged metrics."""
        start = time.time()
        self.y_pred = self.model.predict(self.X_test, verbose=0)
        end = time.time()

        self.scores = EVAL.score_predictions(self.y_test, self.y_pred, self.target_columns)
        self.metrics = {
            **EVAL.summarize_scores(self.scores),
            'inference_time_ms': ((end - start) / len(self.X_test)) * 1000,
            'val_loss_best': min(self.history.history['val_loss']),
            'best_epoch': int(np.argmin(self.history.history['val_loss'])),
        }
        for target in self.target_columns:
            self.metrics[f'r2_{target}'] = float(self.scores.loc[target, 'r2'])
            self.metrics[f'pearson_r_{target}'] = float(self.scores.loc[target, 'pearson_r'])

    def _save_model(self):
        """Saves the trained model and scaler in the models folder under a timestamped name."""
        now = datetime.datetime.now()
        base_name = os.path.splitext(os.path.basename(self.data_path))[0]
        self.model_name = f"model_{base_name}__{now.strftime('%y%m%d_%H%M%S')}"
        self.trained_at = now.strftime('%Y-%m-%d %H:%M:%S')

        os.makedirs(self.models_folder, exist_ok=True)
        self.model.save(path.join(self.models_folder, self.model_name + ".keras"))
        joblib.dump(self.scaler, path.join(self.models_folder, self.model_name + "_scaler.pkl"))

    def _log_model(self):
        """Appends model configuration and evaluation metrics to the CSV model log."""
        hp = self.hyperparameters
        activation = hp['activation']
        record = pd.DataFrame([{
            'model_name': self.model_name,
            'data_file': os.path.basename(self.data_path),
            'trained_at': self.trained_at,
            'training_duration': self.training_duration,
            'train_ratio': self.train_ratio,
            'val_ratio': self.val_ratio,
            'test_ratio': self.test_ratio,
            'seed': self.seed,
            'num_train': len(self.X_train),
            'num_val': len(self.X_val),
            'num_test': len(self.X_test),
            'num_features': self.num_features,
            'num_outputs': self.num_outputs,
            'target_columns': ",".join(self.target_columns),
            'num_layers': len(hp['layer_sizes']),
            'layer_sizes': str(hp['layer_sizes']),
            'learning_rate': hp['learning_rate'],
            'epochs': hp['epochs'],
            'batch_size': hp['batch_size'],
            'batch_norm': hp['batch_norm'],
            **self.metrics,
            'activation': activation if isinstance(activation, str) else activation.__class__.__name__,
            'loss_function': hp['loss_function'],
            'optimizer': hp['optimizer_class'].__name__,
            'dropout_rate': hp['dropout_rate'],
            'early_stopping': hp['use_early_stopping'],
        }])

        if os.path.exists(self.models_log):
            record = pd.concat([pd.read_csv(self.models_log), record], ignore_index=True)
        else:
            folder = os.path.dirname(self.models_log)
            if folder:
                os.makedirs(folder, exist_ok=True)

        record.to_csv(self.models_log, index=False)

    def build_and_train(self, v=False):
        """
        Runs the full pipeline: loading and splitting data, building and training the model,
        evaluating it, saving its artifacts and logging the results.

        Parameters:
            v (bool): If True, prints stage progress to stdout.

        Returns:
            tuple: (trained model, fitted scaler, training history, X_test, y_test)
        """
        if v: print("[INFO] Loading data...")
        self._load_data()

        if v: print("[INFO] Building model...")
        self._build_model()

        if v: print("[INFO] Training model...")
        self._train_model()

        if v: print("[INFO] Evaluating model...")
        self._evaluate_model()

        if v: print("[INFO] Saving model...")
        self._save_model()

        if v: print("[INFO] Logging results...")
        self._log_model()

        return self.model, self.scaler, self.history, self.X_test, self.y_test
