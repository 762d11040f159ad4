"""
Tests for the command line parser
"""
from datetime import datetime

import pytest

from cityreport.__main__ import build_parser


class TestParser:
    """Test argument parsing."""

    def test_search(self):
        args = build_parser().parse_args(["search", "10 rue de la Paix"])
        assert args.command == "search"
        assert args.query == "10 rue de la Paix"

    def test_reverse(self):
        args = build_parser().parse_args(["reverse", "48.8698", "2.3311"])
        assert (args.latitude, args.longitude) == (48.8698, 2.3311)

    def test_report(self):
        args = build_parser().parse_args([
            "report", "--title", "Nid de poule", "--description", "Trou",
            "--category", "danger", "--address", "10 rue de la Paix",
            "--photo", "a.jpg", "--photo", "b.jpg",
        ])
        assert args.category == "danger"
        assert args.address == "10 rue de la Paix"
        assert args.here is None
        assert args.photo == ["a.jpg", "b.jpg"]

    def test_event_with_current_position(self):
        args = build_parser().parse_args([
            "event", "--title", "Nettoyage", "--description", "Déchets",
            "--date", "2025-03-03T18:00", "--here", "48.86", "2.33",
        ])
        assert args.date == datetime(2025, 3, 3, 18, 0)
        assert args.here == [48.86, 2.33]

    def test_location_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["report", "--title", "T", "--description", "D", "--category", "danger"])

    def test_address_and_here_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([
                "report", "--title", "T", "--description", "D", "--category", "danger",
                "--address", "x", "--here", "1", "2",
            ])
