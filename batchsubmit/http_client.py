"""
http_client.py - HTTP Client for Form Submission
=================================================
This module handles all HTTP communication with the form endpoint:
- Bearer token authentication
- Sending one multipart/form-data POST per row
- Managing the HTTP session and headers

There is no retry loop: a failed row is reported once and the batch moves on.
"""

import requests
from typing import BinaryIO, Dict, Optional, Tuple
from .config import Settings


# Multipart part for the attachment: (filename, file object, content type)
FilePart = Tuple[str, BinaryIO, str]


# =============================================================================
# HTTP CLIENT CLASS
# =============================================================================

class HttpClient:
    """
    HTTP client for submitting rows to the form endpoint.

    Usage:
        client = HttpClient(settings)
        client.set_static_token(settings.token)

        status, content_type, body = client.post_form(
            {"id": "1", "name": "Alice"},
            files={"file": ("alice.pdf", fh, "application/pdf")},
        )

        client.close()
    """

    def __init__(self, settings: Settings):
        """
        Initialize the HTTP client.

        Args:
            settings: Configuration object containing endpoint, timeout and token
        """
        self.settings = settings

        # One Session for the whole batch so connections are reused
        self.s = requests.Session()

        self.url = settings.endpoint_url
        self.timeout = settings.timeout_sec

    # -------------------------------------------------------------------------
    # AUTHENTICATION
    # -------------------------------------------------------------------------

    def _set_auth_header(self, token: str):
        """Set the Bearer token authorization header for all future requests."""
        self.s.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        })

    def set_static_token(self, token: str):
        """Use a pre-issued token for every request in this session."""
        self._set_auth_header(token)

    # -------------------------------------------------------------------------
    # API REQUEST METHODS
    # -------------------------------------------------------------------------

    def post_form(
        self,
        fields: Dict[str, str],
        files: Optional[Dict[str, FilePart]] = None,
    ) -> Tuple[int, str, str]:
        """
        POST one payload as multipart/form-data.

        Scalar fields are passed to requests as (None, value) file tuples so
        the body is multipart even when there is no attachment; requests
        writes the Content-Type header and boundary itself.

        Args:
            fields: Text parts, field name -> value
            files: Optional binary parts, field name -> (filename, fileobj, content type)

        Returns:
            A tuple of (status_code, content_type, body). Network errors
            (timeout, refused connection, DNS failure) are reported as
            status 0 with the error in the body instead of raising.
        """
        parts = {name: (None, value) for name, value in fields.items()}
        if files:
            parts.update(files)

        try:
            r = self.s.post(self.url, files=parts, timeout=self.timeout)
        except requests.RequestException as e:
            return 0, "", f"Network error: {type(e).__name__}: {e}"

        return (
            r.status_code,
            r.headers.get("content-type", ""),
            r.text or ""
        )

    # -------------------------------------------------------------------------
    # CLEANUP METHODS
    # -------------------------------------------------------------------------

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.s.close()
