"""Tests for the command-line interface."""

import asyncio
import json
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

from estate_search.config.search_config import SEARCH_CONFIG
from estate_search.main import create_argument_parser, format_property, format_results, run_search
from estate_search.models import Property
from estate_search.store import InMemoryPropertyStore


RECORDS = [
    {"id": "a1", "title": "Modern house", "city": "Algiers", "type": "House",
     "listing_type": "sale", "price": 45000, "beds": 3, "living_area": 120},
    {"id": "o1", "title": "Oran flat", "city": "Oran", "type": "Apartment", "price": 700},
]


def test_argument_parser_defaults():
    args = create_argument_parser().parse_args([])

    assert args.query == ""
    assert args.city is None
    assert args.sort is None
    assert not args.verbose


def test_argument_parser_repeatable_filters():
    args = create_argument_parser().parse_args([
        "villa with pool",
        "--city", "Algiers", "--city", "Oran",
        "--amenity", "pool",
        "--min-price", "1000",
        "--sort", "priceAsc",
    ])

    assert args.query == "villa with pool"
    assert args.city == ["Algiers", "Oran"]
    assert args.amenity == ["pool"]
    assert args.min_price == 1000
    assert args.sort == "priceAsc"


def test_format_property():
    output = format_property(Property(
        id="a1", title="Modern house", city="Algiers", location="Hydra",
        type="House", listing_type="sale", price=45000, beds=3, features=["pool"],
    ))

    assert "Modern house" in output
    assert "ID: a1" in output
    assert "Price: 45,000" in output
    assert "Location: Hydra, Algiers" in output
    assert "House | for sale | 3 bed" in output
    assert "Features: pool" in output


def test_format_results_empty():
    assert format_results([]) == "No properties found matching your criteria.\n"


def test_run_search_with_data_file(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = Path(tmpdir) / "properties.json"
        data_file.write_text(json.dumps(RECORDS), encoding='utf-8')
        args = create_argument_parser().parse_args([
            "--city", "Algiers", "--data", str(data_file), "--no-session",
        ])

        exit_code = asyncio.run(run_search(args))

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Found 1 property" in output
    assert "Modern house" in output
    assert "Oran flat" not in output


def test_run_search_rejects_inverted_price_range():
    args = create_argument_parser().parse_args(["--min-price", "500", "--max-price", "100"])
    assert asyncio.run(run_search(args)) == 1


def test_run_search_missing_data_file():
    args = create_argument_parser().parse_args([
        "--city", "Algiers", "--data", "/nonexistent/properties.json", "--no-session",
    ])
    assert asyncio.run(run_search(args)) == 1


ORAN_RECORDS = [
    {"id": "o1", "title": "Spacious 3 bedroom house", "city": "Oran", "type": "House",
     "listing_type": "sale", "price": 60000, "beds": 3},
    {"id": "o2", "title": "Seafront studio", "city": "Oran", "type": "Apartment",
     "listing_type": "rent", "price": 500, "beds": 1},
]


def test_second_run_starts_from_fresh_filters(capsys, monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setitem(SEARCH_CONFIG["session"], "base_dir", tmpdir)
        data_file = Path(tmpdir) / "properties.json"
        data_file.write_text(json.dumps(ORAN_RECORDS), encoding='utf-8')
        common = ["--city", "Oran", "--data", str(data_file)]

        first_code = asyncio.run(run_search(create_argument_parser().parse_args(["3 bedroom", *common])))
        first_output = capsys.readouterr().out

        resumed_code = asyncio.run(run_search(create_argument_parser().parse_args(["--resume", *common])))
        resumed_output = capsys.readouterr().out

        second_code = asyncio.run(run_search(create_argument_parser().parse_args(common)))
        second_output = capsys.readouterr().out

    assert first_code == resumed_code == second_code == 0
    assert "Found 1 property" in first_output
    assert "Active filters: 1" in first_output

    # --resume picks up the filters saved by the previous run
    assert "Searching for '3 bedroom'" in resumed_output
    assert "Found 1 property" in resumed_output
    assert "Active filters: 1" in resumed_output

    assert "Searching for ''" in second_output
    assert "Found 2 properties" in second_output
    assert "Active filters: 0" in second_output


def test_cli_searches_once_after_applying_filters(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = Path(tmpdir) / "properties.json"
        data_file.write_text(json.dumps(ORAN_RECORDS), encoding='utf-8')
        args = create_argument_parser().parse_args([
            "--city", "Oran", "--min-beds", "2", "--data", str(data_file), "--no-session",
        ])
        search = AsyncMock(return_value=[])
        monkeypatch.setattr(InMemoryPropertyStore, "search_properties", search)

        assert asyncio.run(run_search(args)) == 0

    assert search.await_count == 1
    assert search.await_args.args[-1].min_beds == 2
