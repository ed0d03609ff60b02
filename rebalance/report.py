"""Text renderings of a rebalanced portfolio: a summary table and ledger postings."""

from datetime import date
from fractions import Fraction

HUNDRED = Fraction(100)
ACCOUNT_WIDTH = 76
ASSET_PLACEHOLDER = "{asset}"

TABLE_HEADER = [
    "Asset name",
    "Asset value",
    "Holdings %",
    "New holdings %",
    "Target allocation %",
    "Target value",
    "$ to buy/sell",
]


def round_half_up(value, places):
    """Round an exact value to ``places`` decimals, halves away from zero.

    The result stays a ``Fraction``, so arbitrarily large amounts round
    exactly.
    """
    value = Fraction(value)
    scale = 10 ** places
    units = (abs(value) * scale * 2 + 1) // 2
    return Fraction(units if value >= 0 else -units, scale)


def fixed(value, places):
    """Format ``value`` with exactly ``places`` decimals."""
    rounded = round_half_up(value, places)
    scale = 10 ** places
    units = abs(rounded.numerator * scale // rounded.denominator)
    whole, cents = divmod(units, scale)
    # no "-0.00"
    sign = "-" if rounded < 0 else ""
    return f"{sign}{whole}.{cents:0{places}d}"


def money(value):
    return fixed(value, 2)


def percent(value):
    return fixed(value * HUNDRED, 3)


def _align(rows):
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        cells = [row[0].ljust(widths[0])]
        cells += [cell.rjust(width) for cell, width in zip(row[1:], widths[1:])]
        lines.append("  ".join(cells).rstrip())
    return "\n".join(lines)


def to_table_string(rebalanced):
    """Render one row per asset plus a ``Total`` row, columns aligned."""
    rows = [TABLE_HEADER]

    total_value = Fraction(0)
    total_holdings = Fraction(0)
    total_new_holdings = Fraction(0)
    total_target = Fraction(0)
    total_target_value = Fraction(0)
    total_amount = Fraction(0)

    for item in rebalanced:
        amount = round_half_up(item.amount, 2)
        rows.append([
            item.name,
            money(item.current_value),
            percent(item.actual_allocation),
            percent(item.new_allocation),
            percent(item.target_fraction),
            money(item.target_value),
            money(amount),
        ])

        total_value += item.current_value
        total_holdings += item.actual_allocation
        total_new_holdings += item.new_allocation
        total_target += item.target_fraction
        total_target_value += item.target_value
        # The total reconciles with the rounded amounts actually shown.
        total_amount += amount

    rows.append([
        "Total",
        money(total_value),
        percent(total_holdings),
        percent(total_new_holdings),
        percent(total_target),
        money(total_target_value),
        money(total_amount),
    ])
    return _align(rows)


def to_ledger_string(rebalanced, destination_account, source_account,
                     commodity="CAD", today=None):
    """Render a ledger transaction for every asset with a nonzero delta.

    ``destination_account`` may contain ``{asset}``, replaced by the asset
    name. Each transaction posts ``+delta`` to the destination and ``-delta``
    to the source, dated ``today`` (default: the current local date).
    """
    if today is None:
        today = date.today()
    stamp = today.strftime("%Y-%m-%d")

    entries = []
    for item in rebalanced:
        if item.amount == 0:
            continue

        if item.amount < 0:
            description = f"Withdrawal from {item.name}"
        else:
            description = f"Contribution to {item.name}"
        destination = destination_account.replace(ASSET_PLACEHOLDER, item.name)

        entries.append("\n".join([
            f"{stamp} * {description}",
            f"    {destination:{ACCOUNT_WIDTH}}{money(item.amount)} {commodity}",
            f"    {source_account:{ACCOUNT_WIDTH}}{money(-item.amount)} {commodity}",
        ]))

    if not entries:
        return ""
    return "\n\n".join(entries) + "\n"
