"""Exceptions raised while building or rebalancing a portfolio."""


class RebalanceError(Exception):
    """Base class for portfolio rebalancing errors."""


class InvalidAssetError(RebalanceError, ValueError):
    """An asset was constructed with an out-of-range or non-numeric field."""


class DegenerateTargetError(RebalanceError):
    """An asset's target value is zero, so its deviation is undefined."""

    def __init__(self, asset_name, target_value):
        self.asset_name = asset_name
        self.target_value = target_value
        super().__init__(
            f"Target value for '{asset_name}' is {target_value}; "
            f"cannot compute its fractional deviation."
        )


class OverWithdrawalError(RebalanceError):
    """A withdrawal exceeds the total value of the portfolio."""

    def __init__(self, portfolio_total, contribution):
        self.portfolio_total = portfolio_total
        self.contribution = contribution
        super().__init__(
            f"Withdrawal of {float(-contribution):.2f} exceeds the portfolio "
            f"total of {float(portfolio_total):.2f}."
        )
