"""Interpolation between parsed CSS property values.

``calculate_next_value`` moves a current value towards a target value by a
change rate in [0, 1], where 0 keeps the current value and 1 lands exactly
on the target. Blending is linear for every variant; static values jump.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from PIL import ImageColor

from anim_engine.values import (
    ColorValue,
    CssValue,
    NumericPair,
    NumericValue,
    ParsedStyles,
    TransformValue,
    ValueType,
    copy_value,
)


HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def calculate_next_value(curr: CssValue, target: CssValue, rate: float) -> CssValue:
    """Calculate the next value between ``curr`` and ``target``.

    Args:
        curr: The current (active) value.
        target: The value being moved to; either the rule's end or start value.
        rate: Change rate relative to the target (0 = current, 1 = target).

    Returns:
        A new value; neither input is modified.
    """
    if rate <= 0:
        return copy_value(curr)
    if rate >= 1 or curr.type is not target.type:
        return copy_value(target)

    if target.type is ValueType.NUMERIC:
        return NumericValue(values=_blend_pairs(curr.values, target.values, rate))
    if target.type is ValueType.TRANSFORM:
        return _next_transform(curr, target, rate)
    if target.type is ValueType.COLOR:
        return _next_color(curr, target, rate)

    # Static values
    return copy_value(target)


def _blend(curr: float, target: float, rate: float) -> float:
    return curr + (target - curr) * rate


def _blend_pairs(
    curr: list[NumericPair], target: list[NumericPair], rate: float
) -> list[NumericPair]:
    result: list[NumericPair] = []
    for i, (target_num, target_unit) in enumerate(target):
        if i >= len(curr):
            result.append((target_num, target_unit))
            continue
        curr_num, curr_unit = curr[i]
        # A unitless zero takes the unit of the other side ("0" <-> "640px")
        result.append((_blend(curr_num, target_num, rate), target_unit or curr_unit))
    return result


def _next_transform(
    curr: TransformValue, target: TransformValue, rate: float
) -> TransformValue:
    functions = {}
    for name, params in target.values.items():
        curr_params = curr.values.get(name)
        if curr_params is None:
            functions[name] = list(params)
        else:
            functions[name] = _blend_pairs(curr_params, params, rate)
    return TransformValue(values=functions)


def _decode_rgb(color: str) -> Optional[tuple[int, int, int]]:
    if not HEX_COLOR_RE.match(color):
        return None
    r, g, b = ImageColor.getrgb(color)[:3]
    return r, g, b


def _next_color(curr: ColorValue, target: ColorValue, rate: float) -> ColorValue:
    target_rgb = _decode_rgb(target.value)
    if target_rgb is None:
        return copy_value(target)
    curr_rgb = _decode_rgb(curr.value)
    if curr_rgb is None:
        return copy_value(target)

    channels = [
        math.floor(_blend(c, t, rate) + 0.5) for c, t in zip(curr_rgb, target_rgb)
    ]
    return ColorValue(value="#" + "".join(f"{ch:02x}" for ch in channels))


def styles_union(base: ParsedStyles, new_styles: ParsedStyles) -> ParsedStyles:
    """Unionize two style maps; ``new_styles`` wins on intersections.

    Transform values present on both sides are merged function by function,
    with ``new_styles`` winning again on shared functions.
    """
    union = {**base, **new_styles}

    base_transform = base.get("transform")
    new_transform = new_styles.get("transform")
    if (
        base_transform is not None
        and new_transform is not None
        and base_transform.type is ValueType.TRANSFORM
        and new_transform.type is ValueType.TRANSFORM
    ):
        union["transform"] = TransformValue(
            values={**base_transform.values, **new_transform.values}
        )

    return union
