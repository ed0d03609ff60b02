from rebalance.asset import Asset
from rebalance.asset import RebalancedAsset
from rebalance.asset import to_fraction
from rebalance.engine import FillState
from rebalance.engine import check_withdrawal
from rebalance.engine import lazy_rebalance
from rebalance.errors import DegenerateTargetError
from rebalance.errors import InvalidAssetError
from rebalance.errors import OverWithdrawalError
from rebalance.errors import RebalanceError

__all__ = [
    "Asset",
    "DegenerateTargetError",
    "FillState",
    "InvalidAssetError",
    "OverWithdrawalError",
    "RebalanceError",
    "RebalancedAsset",
    "check_withdrawal",
    "lazy_rebalance",
    "to_fraction",
]
