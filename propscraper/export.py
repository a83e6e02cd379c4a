"""
Export utilities for collected properties.
"""
import logging
import sqlite3
from typing import List, Optional

import pandas as pd

from .models import PropertyRecord

logger = logging.getLogger(__name__)


def records_to_frame(records: List[PropertyRecord]) -> pd.DataFrame:
    """One row per record, columns in model field order."""
    return pd.DataFrame([r.to_dict() for r in records])


def export_location(conn: sqlite3.Connection, city: Optional[str] = None, state: Optional[str] = None) -> pd.DataFrame:
    """Export stored properties, optionally for one city/state."""
    if city and state:
        q = """
        SELECT * FROM properties
        WHERE lower(city) = ? AND lower(state) = ?
        ORDER BY collected_at DESC
        """
        return pd.read_sql_query(q, conn, params=(city.lower(), state.lower()))
    return pd.read_sql_query("SELECT * FROM properties ORDER BY collected_at DESC", conn)


def write_frame(df: pd.DataFrame, out_path: str):
    if out_path.lower().endswith(".xlsx"):
        df.to_excel(out_path, index=False)
    else:
        df.to_csv(out_path, index=False)


def save_output_rows(records: List[PropertyRecord], out_path: str):
    """Save records to CSV or Excel file."""
    df = records_to_frame(records)
    write_frame(df, out_path)
    logger.info(f">>> Saved {len(df)} rows to {out_path}")
