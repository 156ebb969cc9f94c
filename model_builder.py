"""
Heating / Cooling Load Surrogate

Trains a feed-forward network on the energy efficiency dataset (downloaded on first run),
prints its test scores and saves diagnostic plots to figures/.
"""

import os
import matplotlib.pyplot as plt
import tensorflow as tf

from energy_efficiency import DATA, PLOT
from energy_efficiency.DNN import EnergyModelBuilder

# --- PATHS & DATA ---
DATA_PATH = DATA.DATA_PATH
MODELS_FOLDER = os.path.join("data", "DNN_trained_models")
LOG_FILE = os.path.join("data", "DNN_trained_models_docs.csv")
FIG_FOLDER = "figures"

TRAIN_RATIO = 0.8
VAL_RATIO = 0.0
TEST_RATIO = 0.2
SEED = 42

# --- HYPERPARAMETERS ---
HYPERPARAMETERS = {
    'layer_sizes': [64, 32],
    'learning_rate': 1e-3,
    'epochs': 500,
    'batch_size': 32,
    'batch_norm': False,
    'activation': 'relu',
    'optimizer_class': tf.keras.optimizers.Adam,
    'loss_function': 'mse',
    'use_early_stopping': True,
    'patience': 20,
    'dropout_rate': None,
    'verbose': False,
}


if __name__ == "__main__":
    df = DATA.load_dataset(DATA_PATH)
    PLOT.plot_correlation_matrix(df, labels=DATA.COLUMN_DESCRIPTIONS,
                                 save_path=os.path.join(FIG_FOLDER, "correlation_matrix.png"))

    builder = EnergyModelBuilder(
        data_path=DATA_PATH,
        hyperparameters=HYPERPARAMETERS,
        ratios=(TRAIN_RATIO, VAL_RATIO, TEST_RATIO),
        seed=SEED,
        models_log=LOG_FILE,
        models_folder=MODELS_FOLDER
    )
    model, scaler, history, X_test, y_test = builder.build_and_train(v=True)

    print()
    print(builder)
    print(builder.scores.round(4).to_string())

    names = [DATA.COLUMN_DESCRIPTIONS[col] for col in builder.target_columns]
    PLOT.plot_predictions(y_test, builder.y_pred, names,
                          save_path=os.path.join(FIG_FOLDER, "predicted_vs_actual.png"))
    PLOT.plot_training_history(history, save_path=os.path.join(FIG_FOLDER, "training_history.png"))
    plt.show()
