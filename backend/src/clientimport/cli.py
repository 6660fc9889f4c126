"""Validate a client CSV and upload it to the admin API."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import get_settings
from .dispatch import UploadDispatcher
from .errors import OutcomeError, UploadError
from .pipeline import ClientImportPipeline

EXIT_INVALID = 1
EXIT_UPLOAD_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate and import a client roster CSV")
    parser.add_argument("file", help="CSV file to import")
    parser.add_argument("--check", action="store_true",
                        help="Only validate the file, do not upload it")
    parser.add_argument("--base-url", default=None,
                        help="Base URL of the admin API (default: CLIENTIMPORT_API_BASE_URL)")
    parser.add_argument("--token", default=None,
                        help="Bearer token for the upload (default: CLIENTIMPORT_API_TOKEN)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    updates = {}
    if args.base_url:
        updates["api_base_url"] = args.base_url
    if args.token:
        updates["api_token"] = args.token
    if updates:
        settings = settings.model_copy(update=updates)

    path = Path(args.file)
    if not path.is_file():
        print(f"Error: {path} not found", file=sys.stderr)
        return EXIT_INVALID

    pipeline = ClientImportPipeline(settings, dispatcher=UploadDispatcher.from_settings(settings))

    if args.check:
        try:
            outcome = pipeline.validate_file(path)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INVALID
        for warning in outcome.warnings:
            print(f"Warning: {warning.render()}")
        if not outcome.ok:
            print(outcome.summary, file=sys.stderr)
            return EXIT_INVALID
        print(f"{outcome.file_name}: OK")
        return 0

    try:
        result = pipeline.run(path)
    except OutcomeError as e:
        print(str(e), file=sys.stderr)
        return EXIT_INVALID
    except UploadError as e:
        print(f"Upload failed: {e.message}", file=sys.stderr)
        return EXIT_UPLOAD_FAILED
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID

    print(f"Import completed ({result.status_code})")
    if result.body is not None:
        print(json.dumps(result.body, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
