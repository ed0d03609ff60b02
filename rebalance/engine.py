"""Lazy rebalancing: spread one contribution or withdrawal over a portfolio.

Only the new money moves. A deposit goes first to the asset that is furthest
below its target share of the post-contribution total; once that asset's
fractional deviation has risen to the next one's, both are raised together,
and so on until the contribution is used up (water-filling). A withdrawal
walks the assets the other way, drawing from the most overweight first.

All arithmetic is on ``Fraction`` so the stopping decisions are exact and
the deltas add up to the contribution.
"""

from dataclasses import dataclass
from dataclasses import replace
from fractions import Fraction

import structlog

from rebalance.asset import ONE
from rebalance.asset import ZERO
from rebalance.asset import RebalancedAsset
from rebalance.asset import to_fraction
from rebalance.errors import DegenerateTargetError
from rebalance.errors import OverWithdrawalError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FillState:
    """Running totals of the water-filling walk after a number of steps.

    ``level`` is the common fractional deviation that every asset visited so
    far is moved to; ``index_to_stop`` is one past the last asset that
    receives a delta.
    """

    cumulative_target_value: Fraction = ZERO
    remaining: Fraction = ZERO
    level: Fraction = ZERO
    index_to_stop: int = 0

    @property
    def settled(self) -> bool:
        return self.remaining == 0


def portfolio_total(assets) -> Fraction:
    return sum((asset.current_value for asset in assets), ZERO)


def check_withdrawal(contribution, assets):
    """Raise ``OverWithdrawalError`` if the withdrawal exceeds the portfolio."""
    contribution = to_fraction(contribution)
    total = portfolio_total(assets)
    if total + contribution < 0:
        raise OverWithdrawalError(total, contribution)


def evaluate(contribution: Fraction, assets) -> list[RebalancedAsset]:
    """Compute target values, deviations and current allocations."""
    current_total = portfolio_total(assets)
    grand_total = current_total + contribution

    evaluated = []
    for asset in assets:
        target_value = grand_total * asset.target_fraction
        if target_value == 0:
            raise DegenerateTargetError(asset.name, target_value)

        # Relative approximation error: negative when underweight.
        deviation = asset.current_value / target_value - ONE

        if current_total <= 0:
            actual_allocation = ZERO
        else:
            actual_allocation = asset.current_value / current_total

        evaluated.append(
            RebalancedAsset(
                asset=asset,
                grand_total=grand_total,
                target_value=target_value,
                fractional_deviation=deviation,
                actual_allocation=actual_allocation,
            )
        )
    return evaluated


def fill_step(state, index, asset, next_deviation) -> FillState:
    """Advance the walk by one asset.

    The group of assets ``0..index`` sits at ``asset``'s deviation. Raising
    (or lowering) the whole group to ``next_deviation`` costs the group's
    combined target value times the gap. If the remaining budget covers it,
    the group moves there; otherwise the budget runs out partway and the
    reachable level is solved for directly.
    """
    cumulative = state.cumulative_target_value + asset.target_value
    group_cost = cumulative * (next_deviation - asset.fractional_deviation)

    log.debug(
        "rebalance.step",
        asset=asset.name,
        cumulative_target_value=float(cumulative),
        group_cost=float(group_cost),
        remaining=float(state.remaining),
    )

    if abs(group_cost) <= abs(state.remaining):
        return FillState(
            cumulative_target_value=cumulative,
            remaining=state.remaining - group_cost,
            level=next_deviation,
            index_to_stop=index + 1,
        )

    return FillState(
        cumulative_target_value=cumulative,
        remaining=ZERO,
        level=asset.fractional_deviation + state.remaining / cumulative,
        index_to_stop=index + 1,
    )


def water_fill(contribution: Fraction, ordered) -> FillState:
    """Fold ``fill_step`` over assets sorted in fill order."""
    state = FillState(remaining=contribution)
    for index, asset in enumerate(ordered):
        if state.settled:
            break
        if index + 1 < len(ordered):
            next_deviation = ordered[index + 1].fractional_deviation
        else:
            next_deviation = ZERO
        state = fill_step(state, index, asset, next_deviation)
    return state


def lazy_rebalance(contribution, assets) -> list[RebalancedAsset]:
    """Distribute ``contribution`` over ``assets`` without selling to buy.

    Parameters
    ----------
    contribution : Fraction, int, Decimal, str or float
        Amount to deposit (positive) or withdraw (negative).
    assets : iterable of Asset
        Positions in any order; they are not modified.

    Returns
    -------
    list[RebalancedAsset]
        The assets in fill order: ascending fractional deviation for deposits
        and zero contributions, descending for withdrawals, ties kept in
        input order. Assets past the stopping point have ``delta = None``.

    Raises
    ------
    DegenerateTargetError
        If an asset's target value is zero.
    """
    contribution = to_fraction(contribution)
    assets = list(assets)

    evaluated = evaluate(contribution, assets)
    ordered = sorted(
        evaluated,
        key=lambda item: item.fractional_deviation,
        reverse=contribution < 0,
    )

    state = water_fill(contribution, ordered)

    # (value + delta) / target_value - 1 == level
    result = [
        replace(item, delta=item.target_value * (state.level - item.fractional_deviation))
        if index < state.index_to_stop
        else item
        for index, item in enumerate(ordered)
    ]

    _report(contribution, state, result)
    return result


def _report(contribution, state, result):
    log.debug(
        "rebalance.done",
        contribution=float(contribution),
        level=float(state.level),
        index_to_stop=state.index_to_stop,
    )
    allocated = sum((item.amount for item in result), ZERO)
    if allocated != contribution:
        log.warning(
            "rebalance.unallocated",
            remaining=float(contribution - allocated),
            hint="target percentages do not add up to 100",
        )
    for item in result:
        if item.new_value < 0:
            log.warning(
                "rebalance.oversold",
                asset=item.name,
                new_value=float(item.new_value),
            )
