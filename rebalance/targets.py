"""Resolve flat or grouped target allocations to per-asset percentages."""

from fractions import Fraction

import structlog

from rebalance.asset import to_fraction

log = structlog.get_logger(__name__)

WEIGHT_KEY = "weight"
HUNDRED = Fraction(100)
TOLERANCE = Fraction(1, 100)


class _Node:
    """A node in the allocation tree."""

    __slots__ = ("name", "absolute_pct", "children")

    def __init__(self, name, absolute_pct):
        self.name = name
        self.absolute_pct = absolute_pct
        self.children = None  # None means leaf; dict means group

    def leaves(self):
        """Yield all leaf nodes."""
        if self.children is None:
            yield self
        else:
            for child in self.children.values():
                yield from child.leaves()


def _parse_pct(name, value):
    try:
        return to_fraction(value)
    except ValueError as exc:
        raise ValueError(f"Target '{name}' has an invalid percentage: {value!r}.") from exc


def _share(name, spec):
    """Percentage a child claims of its parent."""
    if not isinstance(spec, dict):
        return _parse_pct(name, spec)
    if WEIGHT_KEY not in spec:
        raise ValueError(f"Group '{name}' must define '{WEIGHT_KEY}'.")
    if isinstance(spec[WEIGHT_KEY], dict):
        raise ValueError(
            f"Group '{name}': '{WEIGHT_KEY}' is reserved for the group's share "
            f"and cannot be a group itself."
        )
    return _parse_pct(name, spec[WEIGHT_KEY])


def _subdivide(node, entries):
    """Attach *entries* (child name -> percent of *node*) below *node*."""
    node.children = {}
    for name, spec in entries.items():
        name = str(name).strip()
        child = _Node(name, node.absolute_pct * _share(name, spec) / HUNDRED)
        if isinstance(spec, dict):
            members = {k: v for k, v in spec.items() if k != WEIGHT_KEY}
            if not members:
                raise ValueError(f"Group '{name}' has no allocation entries.")

            # Members are shares of the group and must cover it.
            member_sum = sum((_share(k, v) for k, v in members.items()), Fraction(0))
            if abs(member_sum - HUNDRED) > TOLERANCE:
                raise ValueError(
                    f"Group '{name}': allocations sum to {float(member_sum)}, not 100."
                )
            _subdivide(child, members)
        node.children[name] = child


def resolve_targets(raw):
    """Convert a ``targets`` mapping to a flat ``{asset: percent}`` dict.

    Values are either a percentage (a leaf asset) or a group mapping with a
    ``weight`` key, its percentage of the parent, plus member entries given
    as percentages of the group::

        targets:
          Bonds:
            weight: 30
            TIPS fund: 33.3
            Bond fund: 66.7
          Domestic Stock ETF: 40
          International Stock ETF: 30

    Inside a group ``weight`` is reserved, so no member asset can be named
    ``weight``.

    Returns
    -------
    dict[str, Fraction]
        Absolute percentages out of 100, in the order the leaves appear.
    """
    if not isinstance(raw, dict) or not raw:
        raise ValueError("targets must be a non-empty mapping.")

    root = _Node("", HUNDRED)
    _subdivide(root, raw)

    flat = {}
    for leaf in root.leaves():
        if leaf.name in flat:
            raise ValueError(f"Asset '{leaf.name}' appears more than once in targets.")
        flat[leaf.name] = leaf.absolute_pct

    total = sum(flat.values(), Fraction(0))
    if abs(total - HUNDRED) > TOLERANCE:
        log.warning("targets.sum_mismatch", total_pct=float(total))

    return flat
