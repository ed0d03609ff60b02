from rebalance.reader.reader import build_portfolio
from rebalance.reader.reader import load_config
from rebalance.reader.reader import normalize_targets
from rebalance.reader.reader import parse_amount
from rebalance.reader.reader import parse_args
from rebalance.reader.reader import parse_money
from rebalance.reader.reader import parse_percent
from rebalance.reader.reader import read_holdings
from rebalance.reader.reader import read_targets
from rebalance.reader.reader import resolve_path

__all__ = [
    "build_portfolio",
    "load_config",
    "normalize_targets",
    "parse_amount",
    "parse_args",
    "parse_money",
    "parse_percent",
    "read_holdings",
    "read_targets",
    "resolve_path",
]
