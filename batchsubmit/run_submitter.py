"""
run_submitter.py - Main Application Entry Point
================================================
Reads a spreadsheet and submits each row to the configured form endpoint.

What it does:
-------------
1. Loads configuration from environment variables (.env file)
2. Reads the input file (Excel or CSV)
3. Submits every row as a multipart/form-data POST
4. Logs one line per row and writes the results to a CSV file

Usage:
------
    python -m batchsubmit.run_submitter people.xlsx
    python -m batchsubmit.run_submitter people.csv --output-dir reports
    python -m batchsubmit.run_submitter people.csv --dry-run
    python -m batchsubmit.run_submitter people.csv --strict

Command Line Options:
---------------------
    input_file      : Path to input Excel (.xlsx, .xls) or CSV file (required)
    --output-dir    : Directory for output CSV (default: "out")
    --dry-run       : Load input and build payloads without sending anything
    --strict        : Fail rows whose attachment file is missing
    --debug         : Enable debug logging for troubleshooting
"""

import sys
import logging
import time
import csv
import json
import argparse
from datetime import datetime
from pathlib import Path
from typing import List

from .config import load_settings
from .http_client import HttpClient
from .loader import load_input_data
from .payload import build_payload
from .submitter import SubmissionResult, submit_all, summarize


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

LOG_LEVEL = logging.INFO

OUTPUT_DIR = "out"

# Log a progress line every N rows
PROGRESS_EVERY = 10

RESULT_FIELDS = [
    'InputRow',     # 1-based row number in the input file
    'RowId',        # Value of the id column
    'Ok',           # True if the endpoint answered 2xx
    'HTTPStatus',   # Status code, 0 for local/network errors
    'Attachment',   # File actually attached, if any
    'Response',     # Decoded response body (JSON text for objects)
    'Error',        # Error message for failed rows
]


logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    logging.basicConfig(
        level=LOG_LEVEL,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


# =============================================================================
# OUTPUT FUNCTIONS
# =============================================================================

def result_to_record(result: SubmissionResult) -> dict:
    response = result.response
    if isinstance(response, (dict, list)):
        response = json.dumps(response, ensure_ascii=False)
    return {
        'InputRow': result.input_row,
        'RowId': result.row_id,
        'Ok': result.ok,
        'HTTPStatus': result.status,
        'Attachment': result.attachment or '',
        'Response': '' if response is None else response,
        'Error': result.error or '',
    }


def write_results_to_csv(results: List[SubmissionResult], output_path: Path):
    """
    Write submission results to a CSV file.

    Args:
        results: Results from submit_all() / submit_row()
        output_path: Path where the CSV file should be written
    """
    if not results:
        logger.warning("No results to write")
        return

    with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=RESULT_FIELDS)
        writer.writeheader()
        writer.writerows(result_to_record(r) for r in results)

    logger.info(f"Results written to {output_path.resolve()}")


def _results_path(output_dir: str, partial: bool = False) -> Path:
    prefix = "results_partial" if partial else "results"
    path = Path(output_dir) / f"{prefix}_{datetime.now():%Y%m%d_%H%M%S}.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


# =============================================================================
# COMMAND LINE ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Submit spreadsheet rows as multipart/form-data requests',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m batchsubmit.run_submitter people.xlsx
  python -m batchsubmit.run_submitter people.csv --output-dir reports
  python -m batchsubmit.run_submitter people.csv --dry-run
        """
    )

    parser.add_argument(
        'input_file',
        help='Path to input Excel (.xlsx, .xls) or CSV file'
    )
    parser.add_argument(
        '--output-dir',
        default=OUTPUT_DIR,
        help=f'Directory for output CSV (default: {OUTPUT_DIR})'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Load input and build payloads without sending requests'
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Fail rows whose attachment file does not exist'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


# =============================================================================
# MAIN EXECUTION FUNCTION
# =============================================================================

def run_submitter(argv=None) -> int:
    """
    Main execution logic for the batch submitter.

    Handles configuration and input errors by logging them and returning 1.
    On Ctrl+C the results gathered so far are written to a partial CSV.

    Returns:
        Process exit code (0 on completion, 1 on a fatal error)
    """
    args = parse_arguments(argv)
    setup_logging(args.debug)

    results: List[SubmissionResult] = []
    client = None

    try:
        # ---------------------------------------------------------------------
        # STEP 1: Configuration
        # ---------------------------------------------------------------------
        settings = load_settings()
        if args.strict:
            settings.strict_attachments = True
        logger.info(f"Endpoint: {settings.endpoint_url}")
        logger.info(f"Fields: {', '.join(settings.fields)}")
        if settings.attachment_column:
            logger.info(
                f"Attachment column: {settings.attachment_column} "
                f"-> part '{settings.attachment_field}'"
                f"{' (strict)' if settings.strict_attachments else ''}"
            )

        # Relative attachment paths default to the input file's folder
        if settings.attachment_column and not settings.attachment_dir:
            settings.attachment_dir = str(Path(args.input_file).resolve().parent)

        # ---------------------------------------------------------------------
        # STEP 2: Input data
        # ---------------------------------------------------------------------
        logger.info(f"Loading data from {args.input_file}...")
        input_rows = load_input_data(args.input_file, settings.excel_header_row)
        logger.info(f"Loaded {len(input_rows)} rows")

        if args.dry_run:
            logger.info("DRY RUN MODE - No requests will be sent")
            for i, row in enumerate(input_rows, start=1):
                payload = build_payload(row, settings.fields, settings.attachment_column)
                logger.info(f"Row {i}: fields={payload.fields} attachment={payload.attachment}")
            logger.info("Dry run complete. Use without --dry-run to submit.")
            return 0

        # ---------------------------------------------------------------------
        # STEP 3: Submit each row
        # ---------------------------------------------------------------------
        client = HttpClient(settings)
        client.set_static_token(settings.token)

        logger.info("Starting submissions...")
        start_time = time.time()
        total = len(input_rows)

        def on_result(result: SubmissionResult):
            # Collected here too so Ctrl+C can still save what finished
            results.append(result)
            done = len(results)
            if done % PROGRESS_EVERY == 0 and done < total:
                elapsed = time.time() - start_time
                rate = done / elapsed if elapsed > 0 else 0
                eta = (total - done) / rate if rate > 0 else 0
                logger.info(
                    f"Progress: {done}/{total} "
                    f"({done/total*100:.1f}%) "
                    f"| ETA: {eta/60:.1f}m"
                )

        submit_all(input_rows, settings, client=client, on_result=on_result)

        end_time = time.time()

        # ---------------------------------------------------------------------
        # STEP 4: Summary and results file
        # ---------------------------------------------------------------------
        counts = summarize(results)
        logger.info("-" * 50)
        logger.info(f"Processing complete in {end_time - start_time:.1f} seconds")
        logger.info(f"Total Rows: {counts['total']}")
        logger.info(f"Succeeded: {counts['succeeded']}")
        logger.info(f"Failed: {counts['failed']}")
        logger.info("-" * 50)

        write_results_to_csv(results, _results_path(args.output_dir))

    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Saving partial results...")
        if results:
            write_results_to_csv(results, _results_path(args.output_dir, partial=True))

    except (RuntimeError, FileNotFoundError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        return 1

    finally:
        if client:
            client.close()

    return 0


def main():
    sys.exit(run_submitter())


if __name__ == '__main__':
    main()
