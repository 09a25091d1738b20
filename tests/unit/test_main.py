import io
import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from bulkadd.main import main, read_input, summarize
from bulkadd.parsing.models import ItemStatus, ItemType, ParsedItem, ParseIssue
from bulkadd.processor.models import BulkAddReport
from bulkadd.submission.models import (
    OUTCOME_ADDED,
    BatchResult,
    ItemOutcome,
    SubmissionBatch,
    SubmissionReport,
)


def _make_report() -> BulkAddReport:
    item = ParsedItem(
        line_number=1,
        name="Thai Villa",
        item_type=ItemType.RESTAURANT,
        status=ItemStatus.READY,
        status_message="Ready to add Thai Villa in Gramercy",
    )
    result = BatchResult.from_outcomes(
        [
            ItemOutcome(
                input_name="Thai Villa",
                input_type="restaurant",
                status=OUTCOME_ADDED,
                inserted_id=5,
            )
        ]
    )
    return BulkAddReport(
        parse_errors=[ParseIssue(line_number=2, message="Invalid format", content="oops")],
        items=[item],
        submission=SubmissionReport(
            batch=SubmissionBatch(items=(item,), submitted_at=datetime.now(timezone.utc)),
            result=result,
        ),
    )


class TestReadInput:
    def test_reads_file_argument(self, tmp_path: Path) -> None:
        path = tmp_path / "items.txt"
        path.write_text("Thai Villa;restaurant", encoding="utf-8")

        assert read_input(["bulkadd", str(path)]) == "Thai Villa;restaurant"

    def test_reads_stdin_for_dash(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("Pad Thai;dish;Thai Villa"))

        assert read_input(["bulkadd", "-"]) == "Pad Thai;dish;Thai Villa"


class TestSummarize:
    def test_includes_items_errors_and_result(self) -> None:
        summary = summarize(_make_report())

        assert summary["cancelled"] is False
        assert summary["parse_errors"] == [
            {"line_number": 2, "message": "Invalid format", "content": "oops"}
        ]
        assert summary["items"] == [
            {
                "line_number": 1,
                "name": "Thai Villa",
                "type": "restaurant",
                "status": "ready",
                "message": "Ready to add Thai Villa in Gramercy",
                "existing_id": None,
                "duplicate_of_line": None,
            }
        ]
        result = summary["result"]
        assert isinstance(result, dict)
        assert result["processedCount"] == 1
        assert result["addedCount"] == 1
        assert result["notSubmittedCount"] == 0
        assert result["details"][0]["inserted_id"] == 5

    def test_omits_result_when_not_submitted(self) -> None:
        summary = summarize(BulkAddReport(cancelled=True))

        assert "result" not in summary
        assert summary["cancelled"] is True


class TestMain:
    @patch("bulkadd.main.close_pool")
    @patch("bulkadd.main.init_pool")
    @patch("bulkadd.main.build_processor")
    def test_prints_summary_without_pool_for_http_backend(
        self,
        mock_build: MagicMock,
        mock_init_pool: MagicMock,
        mock_close_pool: MagicMock,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("bulkadd.main.Log.configure", lambda log_level: None)
        monkeypatch.setenv("SUBMISSION_BACKEND", "http")
        path = tmp_path / "items.txt"
        path.write_text("Thai Villa;restaurant", encoding="utf-8")
        mock_build.return_value.run.return_value = _make_report()

        main(["bulkadd", str(path)])

        mock_build.return_value.run.assert_called_once_with("Thai Villa;restaurant")
        mock_init_pool.assert_not_called()
        mock_close_pool.assert_not_called()
        mock_build.return_value.close.assert_called_once()
        printed = json.loads(capsys.readouterr().out)
        assert printed["result"]["addedCount"] == 1

    @patch("bulkadd.main.close_pool")
    @patch("bulkadd.main.init_pool")
    @patch("bulkadd.main.build_processor")
    def test_database_backend_opens_and_closes_pool(
        self,
        mock_build: MagicMock,
        mock_init_pool: MagicMock,
        mock_close_pool: MagicMock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("bulkadd.main.Log.configure", lambda log_level: None)
        monkeypatch.setenv("SUBMISSION_BACKEND", "database")
        path = tmp_path / "items.txt"
        path.write_text("", encoding="utf-8")
        mock_build.return_value.run.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            main(["bulkadd", str(path)])

        mock_init_pool.assert_called_once()
        mock_close_pool.assert_called_once()
        mock_build.return_value.close.assert_called_once()

    @patch("bulkadd.main.close_pool")
    @patch("bulkadd.main.init_pool")
    @patch("bulkadd.main.build_processor")
    def test_unreadable_input_skips_processor_close(
        self,
        mock_build: MagicMock,
        mock_init_pool: MagicMock,
        mock_close_pool: MagicMock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("bulkadd.main.Log.configure", lambda log_level: None)
        monkeypatch.setenv("SUBMISSION_BACKEND", "http")

        with pytest.raises(FileNotFoundError):
            main(["bulkadd", str(tmp_path / "missing.txt")])

        mock_build.assert_not_called()
        mock_build.return_value.close.assert_not_called()
