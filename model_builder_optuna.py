import os
import optuna
import tensorflow as tf

from energy_efficiency import DATA
from energy_efficiency.DNN import EnergyModelBuilder

# --------------------------------------------------------------------- #
# paths & constants
# --------------------------------------------------------------------- #
DATA_PATH = DATA.DATA_PATH
MODELS_FOLDER = os.path.join("data", "DNN_optuna_models")
LOG_FILE = os.path.join("data", "DNN_optuna_models_docs.csv")

# validation rows drive early stopping, test rows the objective
RATIOS = (0.7, 0.15, 0.15)
SEED = 42
N_TRIALS = 100

# --------------------------------------------------------------------- #
# hyper-parameter search space
# --------------------------------------------------------------------- #
SEARCH_SPACE = {
    "n_layers": (1, 4),
    "n_units_min": 8,
    "n_units_max": 256,
    "dropout": (0.0, 0.3),
    "batch_norm": [True, False],
    "learning_rate": (1e-4, 1e-2),
    "optimizer": ["adam", "nadam", "rmsprop"],
    "batch_size": [8, 16, 32, 64],
    "activation": ["relu", "tanh", "swish", "gelu"],
    "loss": ["mse", "mae", "huber"],
}

OPTIM_MAP = {
    "adam": tf.keras.optimizers.Adam,
    "nadam": tf.keras.optimizers.Nadam,
    "rmsprop": tf.keras.optimizers.RMSprop,
}


# --------------------------------------------------------------------- #
def objective(trial: optuna.Trial) -> float:
    n_layers = trial.suggest_int("n_layers", *SEARCH_SPACE["n_layers"])
    layer_sizes = [
        trial.suggest_int(f"units_l{i}", SEARCH_SPACE["n_units_min"], SEARCH_SPACE["n_units_max"], log=True)
        for i in range(n_layers)
    ]

    hyperparams = {
        'layer_sizes': layer_sizes,
        'learning_rate': trial.suggest_float("learning_rate", *SEARCH_SPACE["learning_rate"], log=True),
        'epochs': 500,
        'batch_size': trial.suggest_categorical("batch_size", SEARCH_SPACE["batch_size"]),
        'batch_norm': trial.suggest_categorical("batch_norm", SEARCH_SPACE["batch_norm"]),
        'activation': trial.suggest_categorical("activation", SEARCH_SPACE["activation"]),
        'optimizer_class': OPTIM_MAP[trial.suggest_categorical("optimizer", SEARCH_SPACE["optimizer"])],
        'loss_function': trial.suggest_categorical("loss", SEARCH_SPACE["loss"]),
        'use_early_stopping': True,
        'patience': 20,
        'dropout_rate': trial.suggest_float("dropout", *SEARCH_SPACE["dropout"]),
        'verbose': False,
    }

    builder = EnergyModelBuilder(
        data_path=DATA_PATH,
        hyperparameters=hyperparams,
        ratios=RATIOS,
        seed=SEED,
        models_log=LOG_FILE,
        models_folder=MODELS_FOLDER
    )
    builder.build_and_train(v=False)
    return builder.metrics["mae"]


if __name__ == "__main__":
    DATA.download_dataset(DATA_PATH)

    study = optuna.create_study(direction="minimize")
    study.optimize(objective, n_trials=N_TRIALS, timeout=None)

    print("\nBest trial:")
    best = study.best_trial
    print(f"  Value (MAE): {best.value:.6f}")
    print("  Params:")
    for key, value in best.params.items():
        print(f"    {key}: {value}")
