import asyncio
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from prizedraw import service
from prizedraw.config import DataSourceSettings, DrawSettings
from prizedraw.datasource import HttpJsonCandidateSource, JsonFileCandidateSource
from prizedraw.types import Candidate, DrawState, Phase

GUIDES = [
    {"id": "a", "name": "Ana", "department": "Tours", "totalTickets": 5},
    {"id": "b", "name": "Ben", "department": "Bar", "totalTickets": 1},
    {"id": "c", "name": "Cleo", "department": "Spa", "totalTickets": 3},
]


class ServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self._tmpdir.name) / "guides.json"
        self.path.write_text(json.dumps(GUIDES), encoding="utf-8")
        patcher = mock.patch.object(service, "load_config", return_value=DrawSettings())
        self.load_config = patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def test_instant_run_prints_reveal_and_winners(self) -> None:
        args = service.parse_args(
            ["--candidates", str(self.path), "--winners", "2", "--seed", "11", "--instant"]
        )
        out = io.StringIO()

        winners = asyncio.run(service.run(args, stream=out))

        self.assertEqual(len(winners), 2)
        text = out.getvalue()
        self.assertIn("== STARTING IN 10 ==", text)
        self.assertIn("== DRAWING WINNERS ==", text)
        self.assertIn(f"WINNER #1: {winners[0].name}", text)
        self.assertIn("All winners selected!", text)
        self.assertIn(f"2. {winners[1].name}", text)

    def test_seeded_runs_are_reproducible(self) -> None:
        argv = ["--candidates", str(self.path), "--winners", "3", "--seed", "5", "--instant"]
        first = asyncio.run(service.run(service.parse_args(argv), stream=io.StringIO()))
        second = asyncio.run(service.run(service.parse_args(argv), stream=io.StringIO()))
        self.assertEqual(first, second)

    def test_time_scaled_run_on_event_loop(self) -> None:
        args = service.parse_args(
            ["--candidates", str(self.path), "--winners", "1", "--time-scale", "0.001"]
        )
        winners = asyncio.run(service.run(args, stream=io.StringIO()))
        self.assertEqual(len(winners), 1)

    def test_negative_winner_override_rejected(self) -> None:
        args = service.parse_args(["--candidates", str(self.path), "--winners", "-1"])
        with self.assertRaises(ValueError):
            service.apply_overrides(DrawSettings(), args)


class BuildDatasourceTests(unittest.TestCase):
    def test_prefers_file_source(self) -> None:
        settings = DrawSettings(datasource=DataSourceSettings(path="guides.json", url="http://x"))
        self.assertIsInstance(service.build_datasource(settings), JsonFileCandidateSource)

    def test_http_source(self) -> None:
        settings = DrawSettings(datasource=DataSourceSettings(url="http://example.test"))
        self.assertIsInstance(service.build_datasource(settings), HttpJsonCandidateSource)

    def test_missing_source_raises(self) -> None:
        with self.assertRaises(RuntimeError):
            service.build_datasource(DrawSettings())


class ConsolePresenterTests(unittest.TestCase):
    def test_scrolling_names_are_not_printed(self) -> None:
        out = io.StringIO()
        presenter = service.ConsolePresenter(out)
        presenter(DrawState(phase=Phase.SCROLLING, display_value="Ana"))
        presenter(DrawState(phase=Phase.SCROLLING, display_value="Ben"))
        self.assertEqual(out.getvalue().splitlines(), ["== DRAWING WINNERS ==", "The magic is happening..."])

    def test_winner_reveal_includes_details(self) -> None:
        out = io.StringIO()
        winner = Candidate(id="a", name="Ana", department="Tours", weight=5)
        presenter = service.ConsolePresenter(out)
        presenter(
            DrawState(
                phase=Phase.SELECTING,
                display_value="WINNER #1: Ana",
                winner_index=0,
                winners=(winner,),
                winner_count=1,
            )
        )
        self.assertIn("   Tours • 5 tickets", out.getvalue().splitlines())


if __name__ == "__main__":
    unittest.main()
