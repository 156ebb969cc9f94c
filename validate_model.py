# validate_model.py
# Reloads a logged model and its scaler, rebuilds the test split from the seed and ratios stored
# in the model log, and re-scores the model on it. Without an argument the model with the lowest
# logged MAE is used.
#
#   python validate_model.py [model_name]

import os
import sys

import matplotlib.pyplot as plt
import pandas as pd

from energy_efficiency import DATA, EVAL, PLOT, SPLIT
from energy_efficiency.DNN import load_trained_model

DATA_PATH = DATA.DATA_PATH
MODELS_FOLDER = os.path.join("data", "DNN_trained_models")
LOG_FILE = os.path.join("data", "DNN_trained_models_docs.csv")
FIG_FOLDER = "figures"


if __name__ == "__main__":
    df_log = pd.read_csv(LOG_FILE)
    if len(sys.argv) > 1:
        entry = df_log[df_log['model_name'] == sys.argv[1]]
        if entry.empty:
            sys.exit(f"Model {sys.argv[1]} not found in {LOG_FILE}")
        entry = entry.iloc[0]
    else:
        entry = df_log.sort_values(by='mae').iloc[0]

    if pd.isna(entry['seed']):
        sys.exit(f"Model {entry['model_name']} was trained on an unseeded split; its test rows cannot be rebuilt")

    model, scaler = load_trained_model(MODELS_FOLDER, entry['model_name'])
    target_columns = entry['target_columns'].split(",")

    df = DATA.load_dataset(DATA_PATH, target_columns=target_columns)
    _, _, test_df = SPLIT.split(df, entry['train_ratio'], entry['val_ratio'], entry['test_ratio'],
                                seed=int(entry['seed']))
    X_test, y_test = DATA.features_targets(test_df, target_columns=target_columns)

    y_pred = model.predict(scaler.transform(X_test), verbose=0)
    scores = EVAL.score_predictions(y_test, y_pred, target_columns)

    print(f"Model: {entry['model_name']} ({len(test_df)} test rows)")
    print(scores.round(4).to_string())

    names = [DATA.COLUMN_DESCRIPTIONS.get(col, col) for col in target_columns]
    PLOT.plot_predictions(y_test, y_pred, names,
                          save_path=os.path.join(FIG_FOLDER, f"{entry['model_name']}_validation.png"))
    plt.show()
