import argparse
import csv
from fractions import Fraction
from pathlib import Path

import structlog
import yaml

from rebalance.asset import Asset
from rebalance.asset import to_fraction

log = structlog.get_logger(__name__)

HUNDRED = Fraction(100)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Optimal lazy portfolio rebalancing calculator.",
    )
    parser.add_argument(
        "contribution",
        help="Amount to contribute; negative to withdraw.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a YAML config file.",
    )
    parser.add_argument(
        "-t",
        "--targets",
        metavar="FILE",
        help="CSV of 'asset, target percent' rows.",
    )
    parser.add_argument(
        "-p",
        "--portfolio",
        metavar="FILE",
        help="CSV of 'asset, current value' rows.",
    )
    parser.add_argument(
        "--ledger",
        action="store_true",
        help="Also print ledger postings for every buy or sell.",
    )
    parser.add_argument(
        "--plot",
        metavar="PATH",
        help="Save allocation charts and a summary table to PATH.",
    )
    parser.add_argument(
        "--allow-oversell",
        action="store_true",
        default=None,
        help="Accept withdrawals larger than the portfolio.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every water-filling step.",
    )
    return parser.parse_args(argv)


def load_config(path):
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")
    return data


def resolve_path(config_path, config, key):
    value = config.get(key)
    if not value:
        return None
    path = Path(value)
    if not path.is_absolute():
        path = (config_path.parent / path).resolve()
    return path


def parse_amount(raw_value):
    """Parse a plain number, ignoring ``,`` thousands separators."""
    cleaned = str(raw_value or "").strip().replace(",", "")
    if not cleaned:
        raise ValueError("Amount is missing.")
    try:
        return to_fraction(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {raw_value!r}") from exc


def parse_money(raw_value):
    """Parse a market value such as ``$16,500.00`` or ``-$12.50``."""
    cleaned = str(raw_value or "").strip()
    if cleaned.startswith("$"):
        cleaned = cleaned[1:]
    elif cleaned.startswith("-$"):
        cleaned = "-" + cleaned[2:]
    return parse_amount(cleaned)


def parse_percent(raw_value):
    """Parse a percentage such as ``40`` or ``40%``."""
    cleaned = str(raw_value or "").strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    return parse_amount(cleaned)


def _read_pairs(csv_path, parse):
    """Yield ``(name, amount)`` from a headerless two-column CSV."""
    seen = set()
    with csv_path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle, skipinitialspace=True)
        for line_number, row in enumerate(reader, start=1):
            cells = [cell.strip() for cell in row]
            if not any(cells) or cells[0].startswith("#"):
                continue
            if len(cells) < 2 or not cells[0]:
                raise ValueError(f"{csv_path}:{line_number}: expected 'name, amount'.")
            name = cells[0]
            if name in seen:
                raise ValueError(f"{csv_path}:{line_number}: duplicate asset '{name}'.")
            seen.add(name)
            try:
                amount = parse(cells[1])
            except ValueError as exc:
                raise ValueError(f"{csv_path}:{line_number}: {exc}") from exc
            yield name, amount


def read_targets(csv_path):
    """Read target percentages (out of 100) keyed by asset name."""
    return dict(_read_pairs(csv_path, parse_percent))


def read_holdings(csv_path):
    """Read current market values keyed by asset name."""
    holdings = dict(_read_pairs(csv_path, parse_money))
    for name, value in holdings.items():
        if value < 0:
            raise ValueError(f"{csv_path}: value for '{name}' cannot be negative.")
    return holdings


def normalize_targets(percentages):
    """Turn percentages into fractions of 1, dropping non-positive targets."""
    fractions = {}
    for name, pct in percentages.items():
        if pct <= 0:
            log.debug("targets.dropped", asset=name, target_pct=float(pct))
            continue
        fractions[name] = pct / HUNDRED
    return fractions


def build_portfolio(targets, holdings):
    """Join targets with holdings by asset name.

    Every target becomes an asset, valued at zero when it is not held.
    Holdings without a target are left out.
    """
    for name in holdings:
        if name not in targets:
            log.info("portfolio.untargeted", asset=name)
    return [
        Asset(name=name, current_value=holdings.get(name, Fraction(0)), target_fraction=fraction)
        for name, fraction in targets.items()
    ]
