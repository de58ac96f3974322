"""
Presence CSV loader
Reads the presence dataset (state, city, presence, contact) into row dicts
"""

import io
from typing import Dict, List

import pandas as pd

from aggregate import ROW_FIELDS, rows_from_frame
from .base import BaseLoader, DataSourceError


class PresenceCSVLoader(BaseLoader):
    """Loader for the presence CSV, local file or URL"""

    def __init__(self, location: str):
        super().__init__("PRESENCE_CSV", location)

    def fetch_data(self) -> str:
        """Fetch raw CSV text"""
        return self.read_source()

    def parse_csv(self, csv_text: str) -> pd.DataFrame:
        """Parse CSV text keeping every value as a string"""
        if not csv_text.strip():
            raise DataSourceError(self.source_name, self.location, "CSV is empty, header row required")

        return pd.read_csv(
            io.StringIO(csv_text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
        )

    def transform_data(self, raw: str) -> List[Dict[str, str]]:
        """Transform CSV text into row dicts"""
        df = self.parse_csv(raw)

        missing_columns = [col for col in ROW_FIELDS if col not in df.columns]
        if missing_columns:
            self.logger.warning(f"CSV has no columns {missing_columns}, treating them as empty")

        rows = rows_from_frame(df)
        self.logger.info(f"Parsed {len(rows)} rows from {self.location}")
        return rows
