"""
batchsubmit - Spreadsheet-driven Batch Form Submitter
======================================================

Reads rows from a CSV or Excel file and submits each one as a
multipart/form-data POST, optionally attaching a local file named in the row.

Modules:
--------
- config.py        : Configuration management (loads settings from .env)
- loader.py        : Input file loading (Excel/CSV, all cells as text)
- payload.py       : Row -> form payload mapping
- http_client.py   : HTTP client for the form endpoint
- submitter.py     : Per-row submission and batch orchestration
- run_submitter.py : Main entry point (CLI)

Usage:
------
    python -m batchsubmit.run_submitter people.xlsx
    python -m batchsubmit.run_submitter people.csv --dry-run
    python -m batchsubmit.run_submitter people.csv --strict --debug

Workflow:
---------
1. Load configuration from .env file
2. Read input file (Excel or CSV)
3. For each row, POST the configured fields (plus attachment) to the endpoint
4. Log one line per row; a failed row never stops the batch
5. Write results to CSV file

Output:
-------
Results are written to the 'out/' directory as CSV files with columns:
- InputRow: Row number from input file
- RowId: Value of the id column
- Ok: True if the endpoint answered 2xx
- HTTPStatus: Status code (0 for local or network errors)
- Attachment: File that was attached, if any
- Response: Decoded response body
- Error: Error message for failed rows
"""

from .config import Settings, load_settings
from .payload import Payload, build_payload
from .submitter import SubmissionResult, submit_all, submit_row, summarize

__all__ = [
    "Settings",
    "load_settings",
    "Payload",
    "build_payload",
    "SubmissionResult",
    "submit_all",
    "submit_row",
    "summarize",
]
