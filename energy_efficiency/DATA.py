"""
Energy efficiency dataset (Tsanas & Xifara, UCI repository).

768 simulated building shapes described by eight features X1..X8 and two targets,
Y1 (heating load) and Y2 (cooling load). The spreadsheet is downloaded on first use.
"""

import os

import numpy as np
import pandas as pd
import requests

DATASET_URL = "https://archive.ics.uci.edu/ml/machine-learning-databases/00242/ENB2012_data.xlsx"
DATA_PATH = os.path.join("data", "ENB2012_data.xlsx")

FEATURE_COLUMNS = ['X1', 'X2', 'X3', 'X4', 'X5', 'X6', 'X7', 'X8']
TARGET_COLUMNS = ['Y1', 'Y2']

COLUMN_DESCRIPTIONS = {
    'X1': "Relative Compactness",
    'X2': "Surface Area",
    'X3': "Wall Area",
    'X4': "Roof Area",
    'X5': "Overall Height",
    'X6': "Orientation",
    'X7': "Glazing Area",
    'X8': "Glazing Area Distribution",
    'Y1': "Heating Load",
    'Y2': "Cooling Load",
}


class DatasetError(RuntimeError):
    """Raised when the dataset cannot be downloaded or does not have the expected layout."""


def download_dataset(data_path=DATA_PATH, url=DATASET_URL, timeout=30):
    """
    Download the dataset to `data_path` unless the file already exists.

    Returns the path of the local file.
    """
    if os.path.exists(data_path):
        return data_path

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DatasetError(f"Could not download dataset from {url}: {e}") from e

    folder = os.path.dirname(data_path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    tmp_path = data_path + ".part"
    with open(tmp_path, 'wb') as f:
        f.write(response.content)
    os.replace(tmp_path, data_path)

    print(f"Dataset downloaded to {data_path}")
    return data_path


def load_dataset(data_path=DATA_PATH, download=True,
                 feature_columns=FEATURE_COLUMNS, target_columns=TARGET_COLUMNS):
    """
    Load the dataset into a DataFrame holding the feature and target columns as floats.

    Spreadsheets (.xlsx/.xls) and CSV files are supported. Fully empty rows and columns,
    which the UCI spreadsheet carries, are dropped.
    """
    if download:
        download_dataset(data_path)

    ext = os.path.splitext(data_path)[1].lower()
    if ext in ('.xlsx', '.xls'):
        df = pd.read_excel(data_path)
    elif ext == '.csv':
        df = pd.read_csv(data_path)
    else:
        raise DatasetError(f"Unsupported dataset format: {data_path}")

    df = df.dropna(axis=0, how='all').dropna(axis=1, how='all')
    df.columns = [str(col).strip() for col in df.columns]

    columns = list(feature_columns) + list(target_columns)
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise DatasetError(f"Dataset {data_path} is missing columns: {', '.join(missing)}")

    return df[columns].astype(float).reset_index(drop=True)


def features_targets(df, feature_columns=FEATURE_COLUMNS, target_columns=TARGET_COLUMNS):
    """Return (X, y) as 2D numpy arrays."""
    X = df[list(feature_columns)].to_numpy(dtype=np.float64)
    y = df[list(target_columns)].to_numpy(dtype=np.float64)
    return X, y
