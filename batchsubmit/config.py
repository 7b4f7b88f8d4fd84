"""
config.py - Configuration Management
=====================================
This module loads and validates the submitter configuration from environment
variables. It reads settings from a .env file in the project root and exposes
them as a single Settings object.

Environment Variables Used:
---------------------------
- BATCHSUBMIT_ENDPOINT_URL       : (Required) URL every row is POSTed to
- BATCHSUBMIT_TOKEN              : (Required) Bearer token sent with each request
- BATCHSUBMIT_FIELDS             : (Required) Comma-separated columns copied into the form
- BATCHSUBMIT_ATTACHMENT_COLUMN  : (Optional) Column holding a file path to attach
- BATCHSUBMIT_ATTACHMENT_FIELD   : (Optional) Form field name for the file part (default: "file")
- BATCHSUBMIT_ATTACHMENT_DIR     : (Optional) Base directory for relative attachment paths
- BATCHSUBMIT_STRICT_ATTACHMENTS : (Optional) Fail the row when the attachment is missing (default: false)
- BATCHSUBMIT_ID_COLUMN          : (Optional) Column used to identify rows in logs (default: "id")
- BATCHSUBMIT_TIMEOUT_SEC        : (Optional) Per-request timeout in seconds (default: 30)
- BATCHSUBMIT_EXCEL_HEADER_ROW   : (Optional) Which row contains headers in Excel files (default: 0)

Example .env file:
------------------
BATCHSUBMIT_ENDPOINT_URL=https://forms.example.com/api/submissions
BATCHSUBMIT_TOKEN=eyJhbGciOiJIUzI1NiIs...
BATCHSUBMIT_FIELDS=id,name,email
BATCHSUBMIT_ATTACHMENT_COLUMN=resume_path
"""

from dataclasses import dataclass, field
import os
from pathlib import Path
from dotenv import load_dotenv


# =============================================================================
# SETTINGS DATACLASS
# =============================================================================

@dataclass
class Settings:
    """Container for all submitter configuration values."""

    # Required: where each row is submitted
    endpoint_url: str

    # Required: sent as "Authorization: Bearer <token>"
    token: str

    # Required: columns copied verbatim from the row into the form body
    fields: list[str] = field(default_factory=list)

    # Optional: column whose value is a local file path to attach
    attachment_column: str | None = None

    # Name of the multipart part carrying the attachment
    attachment_field: str = "file"

    # Relative attachment paths are resolved against this directory
    # (None = current working directory)
    attachment_dir: str | None = None

    # When True, a missing attachment fails the row instead of being skipped
    strict_attachments: bool = False

    # Column used to identify a row in log lines and the results file
    id_column: str = "id"

    # Per-request timeout; a row that exceeds it fails on its own
    timeout_sec: int = 30

    # Which row in Excel files contains the column headers (0 = first row)
    excel_header_row: int = 0


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _clean(v: str | None) -> str | None:
    """
    Clean and normalize an environment variable value.

    Strips whitespace and surrounding quotes, and turns empty strings into None.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1]

    return v if v else None


def _parse_bool(v: str | None) -> bool:
    return (v or "").strip().lower() in ("1", "true", "yes", "on")


def _parse_fields(v: str | None) -> list[str]:
    """Split a comma-separated field list, dropping blanks and duplicates."""
    fields: list[str] = []
    for name in (v or "").split(","):
        name = name.strip()
        if name and name not in fields:
            fields.append(name)
    return fields


# =============================================================================
# MAIN CONFIGURATION LOADER
# =============================================================================

def load_settings() -> Settings:
    """
    Load submitter configuration from environment variables.

    This function:
    1. Loads the .env file from the project root (existing env vars win)
    2. Reads all BATCHSUBMIT_* environment variables
    3. Cleans and validates the values
    4. Returns a Settings object

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        RuntimeError: If the endpoint, token or field list is missing, a
            numeric setting is not a number, or the attachment part name
            collides with one of the scalar fields
    """
    # ---------------------------------------------------------------------
    # STEP 1: Load the .env file
    # ---------------------------------------------------------------------
    # .env lives one level up from batchsubmit/; variables already set in
    # the environment are not overridden
    root_env = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=root_env)

    # ---------------------------------------------------------------------
    # STEP 2: Required settings
    # ---------------------------------------------------------------------
    endpoint = _clean(os.getenv("BATCHSUBMIT_ENDPOINT_URL"))
    if not endpoint:
        raise RuntimeError(
            "BATCHSUBMIT_ENDPOINT_URL is not set in environment. "
            "Please add it to your .env file."
        )

    # "forms.example.com/api" -> "https://forms.example.com/api"
    if not endpoint.startswith("http"):
        endpoint = "https://" + endpoint

    token = _clean(os.getenv("BATCHSUBMIT_TOKEN"))
    if not token:
        raise RuntimeError(
            "BATCHSUBMIT_TOKEN is not set in environment. "
            "Please add it to your .env file."
        )

    fields = _parse_fields(os.getenv("BATCHSUBMIT_FIELDS"))
    if not fields:
        raise RuntimeError(
            "BATCHSUBMIT_FIELDS is empty. "
            "List the columns to submit, e.g. BATCHSUBMIT_FIELDS=id,name,email"
        )

    # ---------------------------------------------------------------------
    # STEP 3: Attachment settings
    # ---------------------------------------------------------------------
    attachment_column = _clean(os.getenv("BATCHSUBMIT_ATTACHMENT_COLUMN"))
    attachment_field = _clean(os.getenv("BATCHSUBMIT_ATTACHMENT_FIELD")) or "file"

    # The file part and a text part with the same name would overwrite
    # each other in the multipart body
    if attachment_column and attachment_field in fields:
        raise RuntimeError(
            f"BATCHSUBMIT_ATTACHMENT_FIELD '{attachment_field}' is also listed in "
            "BATCHSUBMIT_FIELDS. Pick a different part name for the attachment."
        )

    # ---------------------------------------------------------------------
    # STEP 4: Numeric settings
    # ---------------------------------------------------------------------
    try:
        timeout_sec = int(os.getenv("BATCHSUBMIT_TIMEOUT_SEC", "30"))
        excel_header_row = int(os.getenv("BATCHSUBMIT_EXCEL_HEADER_ROW", "0"))
    except ValueError as e:
        raise RuntimeError(f"Invalid numeric setting: {e}") from e

    # ---------------------------------------------------------------------
    # STEP 5: Build and return the Settings object
    # ---------------------------------------------------------------------
    return Settings(
        endpoint_url=endpoint,
        token=token,
        fields=fields,
        attachment_column=attachment_column,
        attachment_field=attachment_field,
        attachment_dir=_clean(os.getenv("BATCHSUBMIT_ATTACHMENT_DIR")),
        strict_attachments=_parse_bool(os.getenv("BATCHSUBMIT_STRICT_ATTACHMENTS")),
        id_column=_clean(os.getenv("BATCHSUBMIT_ID_COLUMN")) or "id",
        timeout_sec=timeout_sec,
        excel_header_row=excel_header_row,
    )
