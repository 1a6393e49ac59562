"""
AffixForge - Range Roller

Draws concrete numbers from template ranges.  The draw is uniform over the
integers inside [min, max] (fractional bounds are pulled inward, never
widened); a degenerate range (min == max) returns its value without
consuming randomness.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Union

from affix_templates import ModifierTemplate, Range

Number = Union[int, float]


def _exact(x: Number) -> Number:
    return int(x) if float(x).is_integer() else x


def roll_value(value_range: Range, rng: random.Random) -> Number:
    lo, hi = value_range
    if lo == hi:
        return _exact(lo)
    lo_i, hi_i = math.ceil(lo), math.floor(hi)
    if lo_i > hi_i:
        # No whole number inside, e.g. (0.2, 0.8)
        return _exact(lo)
    return rng.randint(lo_i, hi_i)


def roll_dual_range(primary: Range, secondary: Range,
                    rng: random.Random):
    """Independent draws for "Adds (a-b) to (c-d)".

    The pair is returned as drawn; overlapping ranges can yield low > high
    and nothing reorders or clamps them.
    """
    return roll_value(primary, rng), roll_value(secondary, rng)


@dataclass(frozen=True)
class RolledModifier:
    template: ModifierTemplate
    value: Number
    secondary_value: Optional[Number] = None

    @property
    def stat_name(self) -> str:
        return self.template.stat_name

    @property
    def low(self) -> Number:
        return self.value

    @property
    def high(self) -> Number:
        return self.value if self.secondary_value is None else self.secondary_value

    def to_dict(self) -> dict:
        d = {
            "stat": self.template.stat_name,
            "kind": self.template.kind.value,
            "scope": self.template.scope.value,
            "value": self.value,
            "range": list(self.template.value_range),
        }
        if self.secondary_value is not None:
            d["secondary_value"] = self.secondary_value
            d["secondary_range"] = list(self.template.secondary_range)
        return d


def roll_modifier(template: ModifierTemplate, rng: random.Random) -> RolledModifier:
    if template.secondary_range is not None:
        value, secondary = roll_dual_range(template.value_range,
                                           template.secondary_range, rng)
        return RolledModifier(template, value, secondary)
    return RolledModifier(template, roll_value(template.value_range, rng))


def fixed_modifier(template: ModifierTemplate) -> RolledModifier:
    """Resolve an implicit: its value is fixed by the base, never rolled."""
    secondary = None
    if template.secondary_range is not None:
        secondary = _exact(template.secondary_range[0])
    return RolledModifier(template, _exact(template.value_range[0]), secondary)
