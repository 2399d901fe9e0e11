"""Tests for the import job."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from cardcatalog.jobs.import_cards import main, run_import
from cardcatalog.models.failure import CatalogUnavailable
from cardcatalog.services.bulk_import import ImportSummary


@pytest.fixture
def summary() -> ImportSummary:
    return ImportSummary(
        source_path=Path("data/bulk/default-cards.json"),
        parsed=6,
        written=3,
        skipped={"missing_oracle_id": 1, "excluded_layout": 2},
        total_cards=3,
    )


class TestRunImport:
    async def test_passes_options(self, summary: ImportSummary) -> None:
        with patch(
            "cardcatalog.jobs.import_cards.run_bulk_import",
            new_callable=AsyncMock,
            return_value=summary,
        ) as mock_run:
            result = await run_import(source_path=Path("feed.json"), batch_size=500)

        assert result is summary
        mock_run.assert_awaited_once_with(source_path=Path("feed.json"), batch_size=500)

    async def test_failure_is_logged_and_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        with (
            patch(
                "cardcatalog.jobs.import_cards.run_bulk_import",
                new_callable=AsyncMock,
                side_effect=CatalogUnavailable(503),
            ),
            pytest.raises(CatalogUnavailable),
        ):
            await run_import()

        assert "Import failed" in caplog.text


class TestMain:
    def test_default_arguments(self, summary: ImportSummary) -> None:
        with patch(
            "cardcatalog.jobs.import_cards.run_bulk_import",
            new_callable=AsyncMock,
            return_value=summary,
        ) as mock_run:
            main([])

        mock_run.assert_awaited_once_with(source_path=None, batch_size=1000)

    def test_from_file(self, summary: ImportSummary, tmp_path: Path) -> None:
        feed = tmp_path / "default-cards.json"

        with patch(
            "cardcatalog.jobs.import_cards.run_bulk_import",
            new_callable=AsyncMock,
            return_value=summary,
        ) as mock_run:
            main(["--from-file", str(feed), "--batch-size", "250"])

        mock_run.assert_awaited_once_with(source_path=feed, batch_size=250)
