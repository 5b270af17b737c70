import argparse
import logging
import sys

from advisor.config import (
    BACKTEST_HORIZON_DAYS,
    DEFAULT_MAX_WEIGHT,
    DEFAULT_MIN_WEIGHT,
    DEFAULT_START_DATE,
)
from advisor.data_sources import FallbackReturnSource, PriceHistorySource, SyntheticReturnSource
from advisor.enums import OptimizationMethod
from advisor.errors import AdvisorError
from advisor.optimizer import WeightConstraints
from advisor.portfolio import analyze_portfolio
from advisor.request import AnalysisRequest
from advisor.response_generator import ResponseGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Suggest a portfolio allocation and backtest it over one year."
    )
    parser.add_argument("--symbols", required=True,
                        help="Stock pool, comma or space separated (e.g. 'AAPL, MSFT, NVDA')")
    parser.add_argument("--risk", type=int, default=5,
                        help="Risk tolerance from 1 (very low) to 10 (aggressive)")
    parser.add_argument("--investment", type=float, default=10_000.0,
                        help="Amount to invest")
    parser.add_argument("--method", choices=[m.value for m in OptimizationMethod],
                        default=OptimizationMethod.GRADIENT.value)
    parser.add_argument("--min-weight", type=float, default=DEFAULT_MIN_WEIGHT)
    parser.add_argument("--max-weight", type=float, default=DEFAULT_MAX_WEIGHT)
    parser.add_argument("--data-dir",
                        help="Directory of <SYMBOL>.csv price files; simulated data otherwise")
    parser.add_argument("--start-date", default=DEFAULT_START_DATE,
                        help="First price date to use from --data-dir (YYYY-MM-DD)")
    parser.add_argument("--horizon", type=int, default=BACKTEST_HORIZON_DAYS,
                        help="Trailing trading days to backtest")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for simulated data")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    synthetic = SyntheticReturnSource(seed=args.seed, days=args.horizon)
    if args.data_dir:
        history = PriceHistorySource(args.data_dir, start_date=args.start_date)
        source = FallbackReturnSource(history, synthetic)
    else:
        source = synthetic

    try:
        request = AnalysisRequest.from_text(
            args.symbols,
            risk_tolerance=args.risk,
            investment=args.investment,
            constraints=WeightConstraints(args.min_weight, args.max_weight),
            method=OptimizationMethod(args.method),
        ).validate()

        analysis = analyze_portfolio(
            request.symbols,
            request.risk_tolerance,
            source,
            request.constraints,
            method=request.method,
            horizon=args.horizon,
        )
    except AdvisorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(ResponseGenerator().report(analysis, request.investment))
    return 0


if __name__ == "__main__":
    sys.exit(main())
