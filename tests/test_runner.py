# tests/test_runner.py

"""Tests for the headless CLI commands."""

import io
import json
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import patch

from fakes import FakePage, FakeProvider, priced_page

from main import _build_parser
from pricewatch.cli.runner import (
    run_health_check,
    run_update,
    select_rows,
    show_history,
)
from pricewatch.errors import ProviderUnavailableError
from pricewatch.models.offer import BestOffer
from pricewatch.models.snapshot import ProductSnapshot

_URL_A = "https://a.example/rtx"
_URL_B = "https://b.example/rtx"

_CATALOG = [
    {
        "id": "rtx-4060",
        "name": "RTX 4060",
        "sources": [
            {"store": "A", "url": _URL_A},
            {"store": "B", "url": _URL_B},
        ],
    },
    {"id": "ryzen", "name": "Ryzen 5 7600", "sources": []},
]


class _RunnerTestCase(unittest.TestCase):
    """Temp catalog and output directory per test."""

    def setUp(self) -> None:
        """Write a catalog and prepare an empty output directory."""
        root = Path(tempfile.mkdtemp())
        self.catalog = root / "products.json"
        self.catalog.write_text(json.dumps(_CATALOG), encoding="utf-8")
        self.output_dir = root / "docs"
        self.provider = FakeProvider({
            _URL_A: priced_page("1.500,00", _URL_A),
            _URL_B: FakePage(url=_URL_B, text="captcha"),
        })

    def _update(self, **kwargs: Any) -> tuple[int, str]:
        stdout = io.StringIO()
        with patch("sys.stdout", stdout):
            code = run_update(
                catalog_path=self.catalog,
                output_dir=self.output_dir,
                provider_factory=lambda debug_dir: self.provider,
                **kwargs,
            )
        return code, stdout.getvalue()


class TestRunUpdate(_RunnerTestCase):
    """End-to-end update through the CLI entry."""

    def test_json_output_and_files(self) -> None:
        """The snapshot goes to stdout and both files are written."""
        code, out = self._update()

        self.assertEqual(code, 0)
        data = json.loads(out)
        rtx, ryzen = data["products"]
        self.assertEqual(rtx["best"], {"price": 1500.0, "store": "A", "url": _URL_A})
        self.assertEqual(rtx["offers"][1]["status"], "blocked")
        self.assertIsNone(ryzen["best"])
        self.assertEqual(ryzen["error"], "no sources configured")

        snapshot = json.loads((self.output_dir / "data.json").read_text("utf-8"))
        self.assertEqual(snapshot, data)
        history = json.loads((self.output_dir / "history.json").read_text("utf-8"))
        self.assertEqual(list(history["products"]), ["rtx-4060"])
        self.assertTrue(self.provider.closed)

    def test_history_grows_across_runs(self) -> None:
        """A second run with a new price appends to history."""
        self._update()
        self.provider.outcomes[_URL_B] = priced_page("1.400,00", _URL_B)
        self._update()

        history = json.loads((self.output_dir / "history.json").read_text("utf-8"))
        prices = [e["price"] for e in history["products"]["rtx-4060"]]
        self.assertEqual(prices, [1500.0, 1400.0])

    def test_same_store_price_drop_recorded(self) -> None:
        """A second run with a lower price at the same store appends."""
        self.provider.outcomes[_URL_B] = FakePage(url=_URL_B, text="Stokta yok")
        _, out = self._update()
        self.assertIsNone(json.loads(out)["products"][0]["error"])

        self.provider.outcomes[_URL_A] = priced_page("1.400,00", _URL_A)
        _, out = self._update()

        rtx = json.loads(out)["products"][0]
        self.assertIsNone(rtx["error"])
        self.assertEqual(rtx["best"]["price"], 1400.0)
        self.assertEqual(rtx["best"]["store"], "A")
        history = json.loads((self.output_dir / "history.json").read_text("utf-8"))
        entries = history["products"]["rtx-4060"]
        self.assertEqual(
            [(e["price"], e["store"]) for e in entries],
            [(1500.0, "A"), (1400.0, "A")],
        )
        self.assertEqual(entries[1]["first_seen"], entries[1]["last_seen"])

    def test_table_output(self) -> None:
        """Table format prints a table instead of JSON."""
        code, out = self._update(output_format="table")
        self.assertEqual(code, 0)
        self.assertIn("Best Prices", out)
        self.assertIn("1,500.00", out)

    def test_csv_export(self) -> None:
        """--csv writes an export file next to the snapshot."""
        self._update(export_csv=True)
        self.assertEqual(len(list(self.output_dir.glob("export_*.csv"))), 1)

    def test_missing_catalog_is_fatal(self) -> None:
        """An unreadable catalog exits 1 without writing output."""
        self.catalog.unlink()
        code, out = self._update()
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertFalse((self.output_dir / "data.json").exists())

    def test_corrupt_history_is_fatal(self) -> None:
        """Unreadable history exits 1 and is left as it was."""
        self.output_dir.mkdir(parents=True)
        history = self.output_dir / "history.json"
        history.write_text("{broken", encoding="utf-8")

        code, _ = self._update()

        self.assertEqual(code, 1)
        self.assertEqual(history.read_text(encoding="utf-8"), "{broken")
        self.assertEqual(self.provider.calls, [])

    def test_provider_unavailable_is_fatal(self) -> None:
        """A provider that cannot start exits 1."""
        def _broken(debug_dir: Path | None) -> FakeProvider:
            raise ProviderUnavailableError("no session")

        stdout = io.StringIO()
        with patch("sys.stdout", stdout):
            code = run_update(
                catalog_path=self.catalog,
                output_dir=self.output_dir,
                provider_factory=_broken,
            )
        self.assertEqual(code, 1)


class TestShowHistory(_RunnerTestCase):
    """History statistics view."""

    def test_no_history(self) -> None:
        """Nothing recorded yet exits 1."""
        self.assertEqual(show_history(output_dir=self.output_dir), 1)

    def test_history_table(self) -> None:
        """Recorded products are listed with their stats."""
        self._update()
        stdout = io.StringIO()
        with patch("sys.stdout", stdout):
            code = show_history(output_dir=self.output_dir)
        self.assertEqual(code, 0)
        self.assertIn("Price History", stdout.getvalue())

    def test_unknown_product(self) -> None:
        """Asking for a product with no entries exits 1."""
        self._update()
        self.assertEqual(
            show_history("ryzen", output_dir=self.output_dir), 1,
        )


class TestRunHealthCheck(_RunnerTestCase):
    """Health check exit codes."""

    def _check(self) -> int:
        with patch("sys.stdout", io.StringIO()):
            return run_health_check(
                catalog_path=self.catalog,
                provider_factory=lambda debug_dir: self.provider,
            )

    def test_blocked_source_fails(self) -> None:
        """A blocked source makes the check exit 1."""
        self.assertEqual(self._check(), 1)

    def test_all_ok(self) -> None:
        """Healthy sources exit 0."""
        self.provider.outcomes[_URL_B] = priced_page("1", _URL_B)
        self.assertEqual(self._check(), 0)
        self.assertTrue(self.provider.closed)


class TestSelectRows(unittest.TestCase):
    """Table sorting and filtering."""

    def setUp(self) -> None:
        """Three rows, one unpriced."""
        self.rows = [
            ProductSnapshot(
                id="b", name="beta",
                best=BestOffer(Decimal("20"), "S", "u1"),
            ),
            ProductSnapshot(id="c", name="Gamma", best=None, error="x"),
            ProductSnapshot(
                id="a", name="Alpha",
                best=BestOffer(Decimal("30"), "S", "u2"),
            ),
        ]

    def test_sort_by_name(self) -> None:
        """Names sort case-insensitively."""
        self.assertEqual(
            [r.id for r in select_rows(self.rows)], ["a", "b", "c"],
        )

    def test_sort_by_best(self) -> None:
        """Cheapest first, unpriced last."""
        self.assertEqual(
            [r.id for r in select_rows(self.rows, sort="best")],
            ["b", "a", "c"],
        )

    def test_only_filters(self) -> None:
        """priced and missing are complementary."""
        priced = select_rows(self.rows, only="priced")
        missing = select_rows(self.rows, only="missing")
        self.assertEqual({r.id for r in priced}, {"a", "b"})
        self.assertEqual([r.id for r in missing], ["c"])


class TestParser(unittest.TestCase):
    """Command-line argument parsing."""

    def test_defaults(self) -> None:
        """No flags means a JSON update run."""
        args = _build_parser().parse_args([])
        self.assertEqual(args.output_format, "json")
        self.assertIsNone(args.history)
        self.assertFalse(args.health)
        self.assertFalse(args.export_csv)

    def test_history_without_product(self) -> None:
        """--history alone selects all products."""
        args = _build_parser().parse_args(["--history"])
        self.assertEqual(args.history, "")

    def test_history_with_product(self) -> None:
        """--history takes an optional product id."""
        args = _build_parser().parse_args(["--history", "rtx-4060"])
        self.assertEqual(args.history, "rtx-4060")

    def test_paths(self) -> None:
        """Catalog and output paths become Path objects."""
        args = _build_parser().parse_args(["-c", "cat.json", "-o", "out"])
        self.assertEqual(args.catalog, Path("cat.json"))
        self.assertEqual(args.output_dir, Path("out"))


if __name__ == "__main__":
    unittest.main()
