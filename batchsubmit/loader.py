"""
loader.py - Input File Loader
==============================
This module loads the rows to submit from an Excel (.xlsx, .xls) or CSV file.

The first row (or the configured header row for Excel) supplies the column
names. Every cell is read as text so identifiers keep their leading zeros and
long numbers are not turned into scientific notation. Empty cells become "".

Column names are only stripped of surrounding whitespace; they are otherwise
kept exactly as written, because the field list in the configuration refers
to them by name.
"""

import pandas as pd
from typing import List, Dict, Any
from pathlib import Path


EXCEL_SUFFIXES = ('.xlsx', '.xls')
CSV_SUFFIXES = ('.csv',)


def load_input_data(filepath: str, header_row: int = 0) -> List[Dict[str, Any]]:
    """
    Load input rows from an Excel or CSV file.

    Args:
        filepath: Path to the input file (.xlsx, .xls, or .csv)
        header_row: Which row contains column headers in Excel files
            (0-indexed, default: 0)

    Returns:
        List of dictionaries, one per data row, in file order.
        Example: [
            {'id': '1', 'name': 'Alice', 'email': 'a@x.com', 'resume': 'cv/alice.pdf'},
            {'id': '2', 'name': 'Bob', 'email': 'b@x.com', 'resume': ''},
        ]

    Raises:
        FileNotFoundError: If the input file doesn't exist
        ValueError: If the file type is unsupported
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {filepath}")

    suffix = path.suffix.lower()

    # dtype=str keeps every cell as text; keep_default_na=False stops pandas
    # from turning values like "NA" or "null" into missing values
    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(
            path,
            header=header_row,
            dtype=str,
            keep_default_na=False,
        )
    elif suffix in CSV_SUFFIXES:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
        )
    else:
        raise ValueError(
            f"Unsupported file type: {path.suffix}. "
            "Only .csv, .xlsx, and .xls files are supported."
        )

    # Truly empty cells can still come back as NaN (e.g. Excel blanks)
    df = df.fillna('')
    if df.empty:
        return []

    # Drop rows where every cell is blank
    blank = df.apply(lambda col: col.astype(str).str.strip() == '').all(axis=1)
    df = df[~blank]

    df.columns = [str(col).strip() for col in df.columns]

    return df.to_dict('records')
