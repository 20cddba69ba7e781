import argparse
import json
import sys
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path

from fieldreport.config.settings import Settings
from fieldreport.database.connection import close_pool, init_pool
from fieldreport.database.repositories.report_repository import ReportRepository
from fieldreport.imaging.factory import ImagingBackendFactory
from fieldreport.logging.logger import Log
from fieldreport.reports.service import ReportService
from fieldreport.storage.artifact_store import ArtifactStore
from fieldreport.submission.models import UploadedPhoto
from fieldreport.submission.submitter import ReportSubmitter, build_submitter
from fieldreport.watermark.assets import load_watermark_assets
from fieldreport.watermark.exceptions import AssetMissingError


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="fieldreport")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("check", help="verify configuration and watermark assets")

    submit = commands.add_parser("submit", help="submit a report with photos")
    submit.add_argument("--user-id", required=True)
    submit.add_argument("--description", default="")
    submit.add_argument("photos", nargs="+", type=Path)

    commands.add_parser("incomplete", help="list PENDING reports left without images")
    return parser.parse_args(argv)


def _check(settings: Settings) -> int:
    backend = ImagingBackendFactory.create(settings)
    load_watermark_assets(settings, backend)
    Log.info("Configuration OK")
    return 0


def _submit(submitter: ReportSubmitter, args: argparse.Namespace) -> int:
    # Photos given on the command line are not temporary uploads: pass bytes only.
    files = [
        UploadedPhoto(original_filename=path.name, data=path.read_bytes())
        for path in args.photos
    ]
    result = submitter.submit(args.user_id, files, args.description)
    print(json.dumps(result.to_response()))
    return 0 if result.complete else 2


def _incomplete(settings: Settings) -> int:
    service = ReportService(ReportRepository(), ArtifactStore(Path(settings.reports_dir)))
    timeout = timedelta(minutes=settings.incomplete_report_timeout_minutes)
    for report in service.find_incomplete(timeout):
        print(f"{report.id}\t{report.user_id}\t{report.submitted_at.isoformat()}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: configure logging -> verify assets -> run the command."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        if args.command == "check":
            return _check(settings)
        # Assets are verified before any database work.
        submitter = build_submitter(settings) if args.command == "submit" else None
        init_pool(settings)
        try:
            if submitter is not None:
                return _submit(submitter, args)
            return _incomplete(settings)
        finally:
            close_pool()
    except AssetMissingError as exc:
        Log.error(f"Watermark assets unavailable: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
