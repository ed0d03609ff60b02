import sys
from pathlib import Path

import structlog

from rebalance import RebalanceError
from rebalance import check_withdrawal
from rebalance import lazy_rebalance
from rebalance.logging_setup import configure_logging
from rebalance.plotting import plot_rebalance
from rebalance.reader import build_portfolio
from rebalance.reader import load_config
from rebalance.reader import normalize_targets
from rebalance.reader import parse_args
from rebalance.reader import parse_money
from rebalance.reader import read_holdings
from rebalance.reader import read_targets
from rebalance.reader import resolve_path
from rebalance.report import money
from rebalance.report import to_ledger_string
from rebalance.report import to_table_string
from rebalance.targets import resolve_targets

DEFAULT_DESTINATION_ACCOUNT = "Assets:Investments:{asset}"
DEFAULT_SOURCE_ACCOUNT = "Assets:Cash"
DEFAULT_COMMODITY = "CAD"

log = structlog.get_logger("rebalance.main")


def _config_path_for(config_path, config, key, cli_value):
    if cli_value:
        return Path(cli_value)
    if config_path is None:
        return None
    return resolve_path(config_path, config, key)


def load_assets(args, config_path, config):
    targets_path = _config_path_for(config_path, config, "targets_csv", args.targets)
    if targets_path is not None:
        percentages = read_targets(targets_path)
    elif config.get("targets"):
        percentages = resolve_targets(config["targets"])
    else:
        raise ValueError(
            "No targets given: use --targets, or targets_csv or targets in the config."
        )

    portfolio_path = _config_path_for(config_path, config, "portfolio_csv", args.portfolio)
    if portfolio_path is None:
        raise ValueError("No portfolio given: use --portfolio or portfolio_csv in the config.")
    holdings = read_holdings(portfolio_path)

    assets = build_portfolio(normalize_targets(percentages), holdings)
    if not assets:
        raise ValueError("No asset has a positive target allocation.")
    return assets


def run(args):
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path) if config_path else {}

    contribution = parse_money(args.contribution)
    assets = load_assets(args, config_path, config)

    allow_oversell = args.allow_oversell
    if allow_oversell is None:
        allow_oversell = bool(config.get("allow_oversell", False))
    if not allow_oversell:
        check_withdrawal(contribution, assets)

    log.info("rebalance.start", contribution=float(contribution), assets=len(assets))
    rebalanced = lazy_rebalance(contribution, assets)

    print(f"Contributing: {money(contribution)}\n")
    print(to_table_string(rebalanced))

    if args.ledger:
        ledger = config.get("ledger") or {}
        if not isinstance(ledger, dict):
            raise ValueError("ledger must be a mapping.")
        print()
        print(
            to_ledger_string(
                rebalanced,
                ledger.get("destination_account", DEFAULT_DESTINATION_ACCOUNT),
                ledger.get("source_account", DEFAULT_SOURCE_ACCOUNT),
                commodity=ledger.get("commodity", DEFAULT_COMMODITY),
            ),
            end="",
        )

    plot_path = _config_path_for(config_path, config, "report_pdf", args.plot)
    if plot_path is not None:
        plot_rebalance(rebalanced, plot_path)
        log.info("report.saved", path=str(plot_path))

    return rebalanced


def main(argv=None):
    args = parse_args(argv)
    configure_logging(verbose=args.verbose)
    try:
        run(args)
    except (RebalanceError, ValueError, KeyError, OSError) as exc:
        log.error("rebalance.failed", error=str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
