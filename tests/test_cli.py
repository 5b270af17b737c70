"""
tests/test_cli.py
-----------------
End-to-end tests for the command-line shell and report formatting.

Test coverage:
    main()            — exit codes, report sections, CSV + fallback data
    ResponseGenerator — allocation table, metrics block, recommendations
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

import pandas as pd

from advisor.data_sources import SyntheticReturnSource, _load_cached
from advisor.enums import Priority
from advisor.portfolio import analyze_portfolio
from advisor.response_generator import ResponseGenerator
from main import main


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(argv)
    return code, out.getvalue(), err.getvalue()


# ===========================================================================
# 1. main()
# ===========================================================================

class TestMain(unittest.TestCase):

    def test_successful_report(self):
        code, out, _ = _run(["--symbols", "aapl, msft nvda", "--seed", "4"])
        self.assertEqual(code, 0)
        self.assertIn("Portfolio analysis for AAPL, MSFT, NVDA", out)
        self.assertIn("Risk tolerance: 5/10 (Moderate risk)", out)
        self.assertIn("Backtest (252 trading days)", out)
        self.assertIn("Sharpe", out)
        self.assertIn("Note: simulated data used for AAPL, MSFT, NVDA", out)

    def test_seeded_runs_are_identical(self):
        argv = ["--symbols", "AAPL,TSLA,GOOGL", "--seed", "9", "--risk", "8"]
        self.assertEqual(_run(argv)[1], _run(argv)[1])

    def test_heuristic_method(self):
        code, out, _ = _run(
            ["--symbols", "AAPL,MSFT,TSLA", "--seed", "2", "--method", "heuristic"]
        )
        self.assertEqual(code, 0)
        self.assertIn("Apple Inc.", out)

    def test_single_symbol_is_an_error(self):
        code, out, err = _run(["--symbols", "AAPL"])
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("at least 2", err)

    def test_risk_out_of_range_is_an_error(self):
        code, _, err = _run(["--symbols", "AAPL,MSFT", "--risk", "11"])
        self.assertEqual(code, 2)
        self.assertIn("Risk tolerance", err)

    def test_invalid_weight_bounds_are_an_error(self):
        code, _, _ = _run(
            ["--symbols", "AAPL,MSFT", "--min-weight", "0.6", "--max-weight", "0.5"]
        )
        self.assertEqual(code, 2)

    def test_missing_symbols_argument_exits(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main([])

    def test_csv_data_with_simulated_fallback(self):
        _load_cached.cache_clear()
        with tempfile.TemporaryDirectory() as base:
            dates = pd.bdate_range("2023-01-02", periods=40)
            prices = [100.0 * (1.001 ** i) for i in range(40)]
            pd.DataFrame({"Date": dates.strftime("%Y-%m-%d"), "Adj Close": prices}).to_csv(
                os.path.join(base, "AAPL.csv"), index=False
            )
            with self.assertLogs("advisor.data_sources", level="WARNING"):
                code, out, _ = _run([
                    "--symbols", "AAPL,MSFT", "--data-dir", base,
                    "--horizon", "20", "--seed", "1",
                ])
        _load_cached.cache_clear()
        self.assertEqual(code, 0)
        self.assertIn("Backtest (20 trading days)", out)
        self.assertIn("Note: simulated data used for MSFT", out)


# ===========================================================================
# 2. ResponseGenerator
# ===========================================================================

class TestResponseGenerator(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.analysis = analyze_portfolio(
            ["AAPL", "MSFT", "NVDA"], 5, SyntheticReturnSource(seed=21)
        )
        cls.generator = ResponseGenerator()

    def test_allocation_table_lists_every_symbol(self):
        report = self.generator.report(self.analysis, 10_000)
        for symbol in self.analysis.symbols:
            self.assertIn(symbol, report)
        self.assertIn("Exp. Return", report)

    def test_metrics_block_shows_drawdown_as_loss(self):
        block = self.generator.metrics_block(self.analysis)
        line = next(l for l in block.splitlines() if "Max Drawdown" in l)
        if self.analysis.metrics.max_drawdown > 0:
            self.assertIn("-", line)

    def test_ex_ante_summary(self):
        text = self.generator.ex_ante_summary(self.analysis)
        self.assertTrue(text.startswith("Expected annual return:"))

    def test_recommendations_section(self):
        self.assertIn(
            "No specific adjustments suggested.", self.generator.recommendations([])
        )
        text = self.generator.recommendations(
            [{"title": "Growth strategy", "content": "Go.", "priority": Priority.HIGH}]
        )
        self.assertIn("[HIGH] Growth strategy", text)


if __name__ == "__main__":
    unittest.main()
