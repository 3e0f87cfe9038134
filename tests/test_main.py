"""Tests for main.py — flag validation, exit codes and a full mocked run."""

from __future__ import annotations

import csv
import os
from unittest.mock import MagicMock, patch

import pytest
from googlemaps.exceptions import ApiError

from csv_output import HEADER
from main import build_query, main, parse_args
from places import SearchQuery
from settings import Settings

ENV = {"GOOGLE_MAPS_API_KEY": "AIzaTestKey", "CONTACTS_PAGE_TOKEN_DELAY": "0"}


def _read(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


@pytest.fixture
def gmaps() -> MagicMock:
    client = MagicMock()
    client.places_nearby.side_effect = [
        {"results": [{"place_id": "p1"}, {"place_id": "p2"}], "next_page_token": "tok1"},
        {"results": [{"place_id": "p3"}]},
    ]
    client.place.side_effect = lambda place_id, fields: {
        "result": {
            "name": f"Business {place_id}",
            "formatted_address": "1 Main St",
            "formatted_phone_number": "(555) 010-0000",
            "url": f"https://maps.google.com/?cid={place_id}",
        }
    }
    return client


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch("main.load_dotenv"):
        yield


# ── Flag validation ────────────────────────────────────────────────────────────


class TestParseArgs:
    def test_minimal_flags(self):
        args = parse_args(["--lat", "40.7", "--lng", "-74.0", "--type", "lawyer"])
        assert args.lat == 40.7
        assert args.limit == 100

    def test_missing_lat_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_args(["--lng", "-74.0", "--type", "lawyer"])
        assert exc.value.code == 2
        assert "--lat is a required flag" in capsys.readouterr().err

    def test_missing_lng_exits(self):
        with pytest.raises(SystemExit) as exc:
            parse_args(["--lat", "40.7", "--keyword", "pizza"])
        assert exc.value.code == 2

    def test_needs_keyword_or_type(self, capsys):
        with pytest.raises(SystemExit):
            parse_args(["--lat", "40.7", "--lng", "-74.0"])
        assert "--keyword or --type" in capsys.readouterr().err

    def test_out_of_range_lat(self):
        with pytest.raises(SystemExit):
            parse_args(["--lat", "91", "--lng", "0", "--type", "bar"])

    def test_negative_limit(self):
        with pytest.raises(SystemExit):
            parse_args(["--lat", "1", "--lng", "1", "--type", "bar", "--limit", "-5"])

    def test_token_skips_location_checks(self):
        args = parse_args(["--nextPageToken", "tok"])
        assert args.nextPageToken == "tok"


class TestBuildQuery:
    def test_token_query(self):
        args = parse_args(["--nextPageToken", "tok", "--keyword", "ignored"])
        assert build_query(args, Settings()) == SearchQuery(page_token="tok")

    def test_location_query(self):
        args = parse_args(["--lat", "1.5", "--lng", "2.5", "--type", "Lawyer", "--radius", "500"])
        settings = Settings()
        settings.radius = args.radius
        query = build_query(args, settings)

        assert query.location == (1.5, 2.5)
        assert query.place_type == "lawyer"
        assert query.radius == 500

    def test_unknown_type_warns_and_continues(self, caplog):
        args = parse_args(["--lat", "1", "--lng", "1", "--type", "spaceport"])
        with caplog.at_level("WARNING"):
            query = build_query(args, Settings())

        assert query.place_type == "spaceport"
        assert "continuing to run" in caplog.text


# ── Full runs ──────────────────────────────────────────────────────────────────


class TestMain:
    @patch.dict(os.environ, {}, clear=True)
    def test_missing_key_exits_before_any_call(self, capsys):
        with patch("main.build_client") as build:
            code = main(["--lat", "1", "--lng", "1", "--type", "bar"])

        assert code == 1
        build.assert_not_called()
        assert "GOOGLE_MAPS_API_KEY" in capsys.readouterr().err

    @patch.dict(os.environ, ENV, clear=True)
    def test_writes_all_pages(self, gmaps, tmp_path, capsys):
        with patch("main.build_client", return_value=gmaps):
            code = main(["--lat", "40.7", "--lng", "-74.0", "--type", "lawyer"])

        assert code == 0
        rows = _read(tmp_path / "results.csv")
        assert rows[0] == HEADER
        assert [r[0] for r in rows[1:]] == ["Business p1", "Business p2", "Business p3"]
        assert rows[1][4] == "tok1"
        assert "Results written to results.csv" in capsys.readouterr().out

    @patch.dict(os.environ, ENV, clear=True)
    def test_search_failure_writes_partial_results(self, gmaps, tmp_path):
        gmaps.places_nearby.side_effect = [
            {"results": [{"place_id": "p1"}], "next_page_token": "tok1"},
            ApiError("INVALID_REQUEST"),
        ]
        with patch("main.build_client", return_value=gmaps):
            code = main(["--lat", "40.7", "--lng", "-74.0", "--keyword", "pizza"])

        assert code == 0
        assert len(_read(tmp_path / "results.csv")) == 2

    @patch.dict(os.environ, ENV, clear=True)
    def test_zero_results_still_writes_header(self, gmaps, tmp_path):
        gmaps.places_nearby.side_effect = [{"results": [], "status": "ZERO_RESULTS"}]
        with patch("main.build_client", return_value=gmaps):
            main(["--lat", "40.7", "--lng", "-74.0", "--keyword", "pizza", "-o", "out.csv"])

        assert _read(tmp_path / "out.csv") == [HEADER]

    @patch.dict(os.environ, ENV, clear=True)
    def test_resume_from_token(self, gmaps):
        gmaps.places_nearby.side_effect = [{"results": [{"place_id": "p9"}]}]
        with patch("main.build_client", return_value=gmaps):
            main(["--nextPageToken", "tok7"])

        gmaps.places_nearby.assert_called_once_with(page_token="tok7")

    @patch.dict(os.environ, ENV, clear=True)
    def test_unwritable_output_exits_1(self, gmaps, tmp_path, capsys):
        with patch("main.build_client", return_value=gmaps):
            code = main([
                "--lat", "40.7", "--lng", "-74.0", "--type", "lawyer",
                "--output", str(tmp_path / "missing" / "results.csv"),
            ])

        assert code == 1
        assert "error writing" in capsys.readouterr().err

    @patch.dict(os.environ, {**ENV, "CONTACTS_RADIUS": "8km"}, clear=True)
    def test_malformed_radius_env_exits_1(self, capsys):
        with patch("main.build_client") as build:
            code = main(["--lat", "1", "--lng", "2", "--type", "lawyer"])

        assert code == 1
        build.assert_not_called()
        assert "CONTACTS_RADIUS must be a number" in capsys.readouterr().err

    @patch.dict(os.environ, {**ENV, "CONTACTS_RADIUS": "-5"}, clear=True)
    def test_negative_radius_env_exits_1(self, gmaps, capsys):
        with patch("main.build_client", return_value=gmaps):
            code = main(["--lat", "1", "--lng", "2", "--type", "lawyer"])

        assert code == 1
        gmaps.places_nearby.assert_not_called()
        assert "radius must be positive" in capsys.readouterr().err

    @patch.dict(os.environ, {**ENV, "CONTACTS_PAGE_TOKEN_DELAY": "-2"}, clear=True)
    def test_negative_delay_env_exits_1(self, capsys):
        with patch("main.build_client") as build:
            code = main(["--lat", "1", "--lng", "2", "--type", "lawyer"])

        assert code == 1
        build.assert_not_called()
