import json
import sys
from dataclasses import asdict
from pathlib import Path

from bulkadd.config.settings import Settings
from bulkadd.database.connection import close_pool, init_pool
from bulkadd.logging.logger import Log
from bulkadd.processor.models import BulkAddReport
from bulkadd.processor.processor import BulkAddProcessor, build_processor


def read_input(argv: list[str]) -> str:
    """Read the bulk-add text from the file named in argv, or stdin."""
    if len(argv) > 1 and argv[1] != "-":
        return Path(argv[1]).read_text(encoding="utf-8")
    return sys.stdin.read()


def summarize(report: BulkAddReport) -> dict[str, object]:
    summary: dict[str, object] = {
        "cancelled": report.cancelled,
        "parse_errors": [asdict(issue) for issue in report.parse_errors],
        "items": [
            {
                "line_number": item.line_number,
                "name": item.name,
                "type": item.item_type.value,
                "status": item.status.value,
                "message": item.status_message,
                "existing_id": item.existing.get("id") if item.existing else None,
                "duplicate_of_line": item.local_duplicate_of,
            }
            for item in report.items
        ],
        "duplicate_check_error": report.duplicate_check_error,
    }
    if report.submission is not None:
        result = report.submission.result
        summary["result"] = {
            "processedCount": result.processed_count,
            "addedCount": result.added_count,
            "skippedCount": result.skipped_count,
            "notSubmittedCount": len(report.submission.not_submitted),
            "details": [asdict(detail) for detail in result.details],
        }
    return summary


def main(argv: list[str] | None = None) -> None:
    """Entry point: settings -> logging -> (pool) -> run processor -> print summary."""
    settings = Settings()
    Log.configure(settings.log_level)
    uses_database = settings.submission_backend.lower() == "database"
    if uses_database:
        init_pool(settings)

    processor: BulkAddProcessor | None = None
    try:
        raw_input = read_input(argv if argv is not None else sys.argv)
        processor = build_processor(settings)
        report = processor.run(raw_input)
        print(json.dumps(summarize(report), indent=2, default=str))
    finally:
        if processor is not None:
            processor.close()
        if uses_database:
            close_pool()


if __name__ == "__main__":
    main()
