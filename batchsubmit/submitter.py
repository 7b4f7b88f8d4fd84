"""
submitter.py - Batch Form Submission
=====================================
Submits every input row as its own multipart/form-data request.

For each row, in order:
1. Copy the configured scalar fields into a payload
2. Resolve the attachment path (if an attachment column is configured)
3. POST the payload with the bearer token
4. Record a SubmissionResult (decoded response or error detail)

A failing row never stops the batch: every error is captured on that row's
result and the next row is processed. The result list always has one entry
per input row, in input order.
"""

import json
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import Settings
from .http_client import HttpClient
from .payload import Payload, build_payload, cell_text


logger = logging.getLogger(__name__)

# How much of an error body to keep on a failed result
ERROR_SNIPPET_CHARS = 300


# =============================================================================
# RESULT TYPE
# =============================================================================

@dataclass
class SubmissionResult:
    """Outcome of submitting one row."""

    # 1-based position of the row in the input
    input_row: int

    # Value of the configured id column ("" when the row has none)
    row_id: str

    ok: bool

    # HTTP status code, or 0 for local and network errors
    status: int = 0

    # Decoded response body on success (parsed JSON, or text)
    response: Any = None

    # Error message on failure
    error: Optional[str] = None

    # Path of the file actually attached, if any
    attachment: Optional[str] = None


# =============================================================================
# HELPERS
# =============================================================================

def decode_body(content_type: str, body: str) -> Any:
    """
    Decode a response body: JSON when it parses as JSON, otherwise the text.

    Servers are not always honest about Content-Type, so a body that parses
    as JSON is returned parsed even when the header says text/plain, and a
    body that claims JSON but doesn't parse comes back as text.
    """
    if not body:
        return body
    if "json" in content_type.lower() or body.lstrip()[:1] in ("{", "["):
        try:
            return json.loads(body)
        except ValueError:
            logger.debug("Response is not valid JSON, keeping text")
    return body


def resolve_attachment(path: str, base_dir: Optional[str] = None) -> Path:
    """Resolve an attachment path, relative paths against base_dir."""
    p = Path(path).expanduser()
    if not p.is_absolute() and base_dir:
        p = Path(base_dir) / p
    return p


def locate_attachment(
    path: str,
    base_dir: Optional[str] = None,
) -> Tuple[Optional[Path], Optional[str]]:
    """
    Find the file an attachment cell points at.

    Returns (path, None) when it is an existing file, otherwise
    (None, reason). Cell values that cannot even be resolved or checked
    (unknown "~user", names too long for the filesystem, embedded NUL)
    are reported the same way as a missing file.
    """
    try:
        candidate = resolve_attachment(path, base_dir)
        if candidate.is_file():
            return candidate, None
    except (OSError, RuntimeError, ValueError) as e:
        return None, f"path unusable ({type(e).__name__}: {e}): {path}"
    return None, f"not found: {candidate}"


def _guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"


# =============================================================================
# SINGLE ROW
# =============================================================================

def submit_row(
    client: HttpClient,
    row: Mapping[str, Any],
    settings: Settings,
    input_row: int,
) -> SubmissionResult:
    """
    Build, send and record one row.

    Never raises for row-scoped problems (missing or unusable attachment
    path, HTTP error, network error); those become a failed SubmissionResult.

    Args:
        client: Authenticated HTTP client
        row: Input data row keyed by column name
        settings: Field mapping, attachment and endpoint configuration
        input_row: 1-based position of the row, used for reporting

    Returns:
        The SubmissionResult for this row
    """
    # -------------------------------------------------------------------------
    # STEP 1: Build the payload
    # -------------------------------------------------------------------------
    row_id = cell_text(row.get(settings.id_column)).strip()
    payload = build_payload(row, settings.fields, settings.attachment_column)

    result = SubmissionResult(input_row=input_row, row_id=row_id, ok=False)

    # -------------------------------------------------------------------------
    # STEP 2: Locate the attachment
    # -------------------------------------------------------------------------
    attachment_path = None
    if payload.attachment:
        attachment_path, problem = locate_attachment(
            payload.attachment, settings.attachment_dir
        )
        if attachment_path is None:
            if settings.strict_attachments:
                result.error = f"Attachment {problem}"
                return result
            logger.warning(
                f"Row {input_row} (id={row_id or '?'}): attachment {problem}, "
                f"submitting without it"
            )

    # -------------------------------------------------------------------------
    # STEP 3: Send the request
    # -------------------------------------------------------------------------
    try:
        status, content_type, body = _send(client, payload, settings, attachment_path)
    except OSError as e:
        # Attachment exists but could not be opened or read
        result.error = f"Attachment unreadable: {type(e).__name__}: {e}"
        return result

    # -------------------------------------------------------------------------
    # STEP 4: Record the outcome
    # -------------------------------------------------------------------------
    result.status = status
    if attachment_path is not None:
        result.attachment = str(attachment_path)

    if 200 <= status < 300:
        result.ok = True
        result.response = decode_body(content_type, body)
    elif status == 0:
        result.error = body
    else:
        snippet = body[:ERROR_SNIPPET_CHARS].strip()
        result.error = f"HTTP {status}: {snippet}" if snippet else f"HTTP {status}"

    return result


def _send(
    client: HttpClient,
    payload: Payload,
    settings: Settings,
    attachment_path: Optional[Path],
):
    if attachment_path is None:
        return client.post_form(payload.fields)

    # The handle lives only as long as this one request
    with open(attachment_path, "rb") as fh:
        files = {
            settings.attachment_field: (
                attachment_path.name,
                fh,
                _guess_content_type(attachment_path),
            )
        }
        return client.post_form(payload.fields, files=files)


# =============================================================================
# BATCH
# =============================================================================

def submit_all(
    rows: Sequence[Mapping[str, Any]],
    settings: Settings,
    client: Optional[HttpClient] = None,
    on_result: Optional[Callable[[SubmissionResult], None]] = None,
) -> List[SubmissionResult]:
    """
    Submit every row in order and return one result per row.

    Rows are sent one at a time; each request finishes before the next row
    starts. When no client is given, one is created from the settings
    (authenticated with settings.token) and closed once the batch ends.

    Args:
        rows: Input rows, in the order they should be submitted
        settings: Endpoint, token and field mapping configuration
        client: Optional pre-built HTTP client (the caller keeps ownership)
        on_result: Optional callback invoked with each result as soon as
            its row is done (progress reporting, partial saves)

    Returns:
        List of SubmissionResult, same length and order as rows
    """
    own_client = client is None
    if own_client:
        client = HttpClient(settings)
        client.set_static_token(settings.token)

    results: List[SubmissionResult] = []
    try:
        for i, row in enumerate(rows, start=1):
            try:
                result = submit_row(client, row, settings, i)
            except Exception as e:
                logger.exception(f"Row {i}: unexpected error")
                result = SubmissionResult(
                    input_row=i,
                    row_id=_safe_row_id(row, settings.id_column),
                    ok=False,
                    error=f"Unexpected error: {type(e).__name__}: {e}",
                )
            results.append(result)
            log_result(result)
            if on_result is not None:
                on_result(result)
    finally:
        if own_client:
            client.close()

    return results


def _safe_row_id(row: Any, id_column: str) -> str:
    value = row.get(id_column) if isinstance(row, Mapping) else None
    return cell_text(value).strip()


def log_result(result: SubmissionResult):
    label = f"Row {result.input_row} (id={result.row_id or '?'})"
    if result.ok:
        logger.info(f"{label}: OK [{result.status}] {_short(result.response)}")
    else:
        logger.error(f"{label}: FAILED {result.error}")


def _short(value: Any, limit: int = 200) -> str:
    text = json.dumps(value, ensure_ascii=False) if isinstance(value, (dict, list)) else str(value)
    return text if len(text) <= limit else text[:limit] + "..."


def summarize(results: Sequence[SubmissionResult]) -> Dict[str, int]:
    """Count results: {"total": ..., "succeeded": ..., "failed": ...}."""
    succeeded = sum(1 for r in results if r.ok)
    return {
        "total": len(results),
        "succeeded": succeeded,
        "failed": len(results) - succeeded,
    }
