"""
Data loader module for sleep bout CSV files.

Finds the per-animal bout files in a folder, extracts animal IDs from the
file names (MM-DD-YYSB_2sec_<mouseID>.csv), and reads timestamp + bout
duration columns into BoutRecord lists.
"""

import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional

from .config import DEFAULT_FILE_PATTERN
from .sleep_analysis import BoutRecord


class DataLoader:
    """Locate and parse sleep bout files."""

    ID_SEPARATOR = 'SB_2sec_'

    # Column positions: timestamp, linear time, sleep bout duration
    TIMESTAMP_COLUMN = 0
    DURATION_COLUMN = 2
    MIN_COLUMNS = 3

    def __init__(self, file_pattern: str = DEFAULT_FILE_PATTERN, id_separator: str = None):
        self.file_pattern = file_pattern
        self.id_separator = id_separator or self.ID_SEPARATOR
        self.last_error = None
        self.dropped_rows: Dict[str, int] = {}

    def find_files(self, folder) -> List[Path]:
        """
        List bout files in a folder (no subfolders), sorted by name.

        Args:
            folder: Folder to search

        Returns:
            List of file paths (empty if the folder does not exist)
        """
        path = Path(folder)
        if not path.is_dir():
            self.last_error = f"Folder not found: {folder}"
            return []
        return sorted(p for p in path.glob(self.file_pattern) if p.is_file())

    def extract_animal_id(self, file_path, index: int = 1) -> str:
        """
        Get the animal ID from a file name.

        Args:
            file_path: Bout file path
            index: 1-based file position, used for the fallback ID

        Returns:
            Text after the ID separator without the extension, or
            'Unknown_<index>' if the name does not follow the convention
        """
        name = Path(file_path).name
        parts = name.split(self.id_separator, 1)
        if len(parts) > 1 and parts[1]:
            animal_id = parts[1]
            if animal_id.lower().endswith('.csv'):
                animal_id = animal_id[:-4]
            if animal_id:
                return animal_id
        return f'Unknown_{index}'

    def discover_animals(self, folder) -> Dict[str, Path]:
        """
        Map animal IDs to their bout files.

        Returns:
            Dictionary of animal_id -> file path, in file name order
        """
        animals = {}
        for i, file_path in enumerate(self.find_files(folder), start=1):
            animal_id = self.extract_animal_id(file_path, i)
            if animal_id in animals:
                print(f"Warning: Duplicate animal ID {animal_id} in {file_path.name}; keeping {animals[animal_id].name}")
                continue
            animals[animal_id] = file_path
        return animals

    def load_file(self, file_path) -> Optional[pd.DataFrame]:
        """
        Load a bout CSV file.

        Args:
            file_path: Path to the data file

        Returns:
            DataFrame with all columns as read, or None if loading failed
        """
        path = Path(file_path)

        if not path.exists():
            self.last_error = f"File not found: {file_path}"
            return None

        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            self.last_error = f"Failed to load file: {str(e)}"
            return None

        if df.shape[1] < self.MIN_COLUMNS:
            self.last_error = (f"Expected at least {self.MIN_COLUMNS} columns "
                               f"(timestamp, linear time, bout duration), got {df.shape[1]}")
            return None

        return df

    def records_from_dataframe(self, df: pd.DataFrame, animal_id: str) -> List[BoutRecord]:
        """
        Turn a loaded table into bout records.

        Rows whose duration is missing, non-numeric, non-finite or negative
        are dropped; the count is kept in dropped_rows[animal_id].
        Timestamps stay raw strings and are parsed during classification.
        """
        timestamps = df.iloc[:, self.TIMESTAMP_COLUMN].astype(str).str.strip()
        durations = pd.to_numeric(df.iloc[:, self.DURATION_COLUMN], errors='coerce').to_numpy(dtype=float)

        valid = np.isfinite(durations) & (durations >= 0)
        self.dropped_rows[animal_id] = int(np.sum(~valid))

        return [
            BoutRecord(animal_id=animal_id, timestamp=ts, duration_seconds=float(d))
            for ts, d in zip(timestamps[valid], durations[valid])
        ]

    def load_records(self, file_path, animal_id: str) -> Optional[List[BoutRecord]]:
        """
        Load one animal's bout records.

        Returns:
            List of BoutRecord, or None if the file could not be loaded
            (see last_error)
        """
        df = self.load_file(file_path)
        if df is None:
            return None
        return self.records_from_dataframe(df, animal_id)
