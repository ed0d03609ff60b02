"""Portfolio positions before and after a rebalance run."""

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction

from rebalance.errors import InvalidAssetError

ZERO = Fraction(0)
ONE = Fraction(1)


def to_fraction(value):
    """Convert a number to an exact ``Fraction``.

    Floats go through ``str`` so ``0.1`` becomes ``1/10`` rather than the
    binary approximation ``3602879701896397/36028797018963968``.
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, bool):
        raise InvalidAssetError(f"Cannot convert {value!r} to a fraction.")
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
    if not isinstance(value, (int, str, Decimal)):
        raise InvalidAssetError(f"Cannot convert {value!r} to a fraction.")
    try:
        return Fraction(value)
    except (ValueError, ZeroDivisionError) as exc:
        raise InvalidAssetError(f"Cannot convert {value!r} to a fraction.") from exc


@dataclass(frozen=True)
class Asset:
    """One position of a portfolio, as read from the holdings and targets.

    ``target_fraction`` is the desired share of the post-contribution total,
    in [0, 1]. ``current_value`` is the present market value.
    """

    name: str
    current_value: Fraction
    target_fraction: Fraction

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidAssetError("Asset name cannot be empty.")
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "current_value", to_fraction(self.current_value))
        object.__setattr__(self, "target_fraction", to_fraction(self.target_fraction))
        if self.current_value < 0:
            raise InvalidAssetError(
                f"Value cannot be negative for {self.name}, got {self.current_value}."
            )
        if not ZERO <= self.target_fraction <= ONE:
            raise InvalidAssetError(
                f"Target for {self.name} must be between 0 and 1, "
                f"got {self.target_fraction}."
            )


@dataclass(frozen=True)
class RebalancedAsset:
    """An asset evaluated by a rebalance run.

    ``delta`` is the signed amount to buy (positive) or sell (negative); it is
    ``None`` when the run did not touch the asset.
    """

    asset: Asset
    grand_total: Fraction
    target_value: Fraction
    fractional_deviation: Fraction
    actual_allocation: Fraction
    delta: Fraction | None = None

    @property
    def name(self) -> str:
        return self.asset.name

    @property
    def current_value(self) -> Fraction:
        return self.asset.current_value

    @property
    def target_fraction(self) -> Fraction:
        return self.asset.target_fraction

    @property
    def amount(self) -> Fraction:
        """The delta, with untouched assets counting as zero."""
        return ZERO if self.delta is None else self.delta

    @property
    def new_value(self) -> Fraction:
        return self.current_value + self.amount

    @property
    def new_deviation(self) -> Fraction:
        return self.new_value / self.target_value - ONE

    @property
    def new_allocation(self) -> Fraction:
        """Share of the post-contribution total held after the delta."""
        if self.grand_total == 0:
            return ZERO
        return self.new_value / self.grand_total
