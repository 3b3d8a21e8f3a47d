"""Animation rule model: validate author rules and compile them.

Author rules are plain mappings (Python literals, YAML or JSON):

  - range rule:   {selector, timespan: [start, end], from: {...}, to: {...}}
  - instant rule: {selector, at: instant, styles: {...}}

Selectors take the form ``LAYER_ID >> OBJECT_SELECTOR`` where the object
selector is optional. Times are authored in ``time_unit_ms`` units (seconds
by default) and compiled to milliseconds.
"""

from __future__ import annotations

import json
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Union

import yaml

from anim_engine.config import DEFAULT_TIME_UNIT_MS
from anim_engine.parser import parse_css_value
from anim_engine.values import ParsedStyles


# The string separator between a layer ID and an object selector.
SEL_SEPARATOR = ">>"

AuthorRule = Mapping[str, Any]


class AnimationError(Exception):
    """Base class for animation definition errors."""

    pass


class DefinitionError(AnimationError):
    """Raised when an animation definition fails validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Animation: " + "\n  ".join(errors))


class SelectorError(AnimationError):
    """Raised when a rule selector cannot be resolved to elements."""

    def __init__(self, message: str, selector: str) -> None:
        self.selector = selector
        super().__init__(f"Animation: {message}")


# ── Parsed rules ──────────────────────────────────────────────────────────

@dataclass
class RangeRule:
    """Styles blended from ``from_styles`` to ``to_styles`` over [start, end] ms."""

    selector: str
    start: float
    end: float
    from_styles: ParsedStyles = field(default_factory=dict)
    to_styles: ParsedStyles = field(default_factory=dict)

    @property
    def end_styles(self) -> ParsedStyles:
        return self.to_styles

    @property
    def is_instant(self) -> bool:
        return False


@dataclass
class InstantRule:
    """Styles applied once the timeline is past ``at`` ms."""

    selector: str
    at: float
    styles: ParsedStyles = field(default_factory=dict)

    @property
    def start(self) -> float:
        return self.at

    @property
    def end(self) -> float:
        return self.at

    @property
    def end_styles(self) -> ParsedStyles:
        return self.styles

    @property
    def is_instant(self) -> bool:
        return True


ParsedRule = Union[RangeRule, InstantRule]


# ── Selectors ─────────────────────────────────────────────────────────────

def split_selector(selector: str) -> tuple[str, str]:
    """Split a rule selector into (layer ID, object selector)."""
    layer_id, _, object_selector = selector.partition(SEL_SEPARATOR)
    return layer_id.strip(), object_selector.strip()


def normalize_selector(selector: str) -> str:
    """Canonical selector form used as the object registry key."""
    layer_id, object_selector = split_selector(selector)
    if object_selector:
        return f"{layer_id} {SEL_SEPARATOR} {object_selector}"
    return layer_id


# ── Validation ────────────────────────────────────────────────────────────

def _is_time(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and value >= 0


def _validate_styles(styles: Any, key: str, source: str) -> list[str]:
    if not isinstance(styles, Mapping):
        return [f"{source}: '{key}' must be a mapping of styles"]
    errors = []
    for prop, val in styles.items():
        if not isinstance(val, str):
            errors.append(
                f"{source}: style '{prop}' in '{key}' must be a string (got {val!r})"
            )
    return errors


def validate_rule(rule: Any, index: int = 0) -> list[str]:
    """Validate an author rule. Returns list of error messages (empty = valid)."""
    if not isinstance(rule, Mapping):
        return [f"rule #{index} must be a mapping (got {type(rule).__name__})"]

    selector = rule.get("selector")
    if not isinstance(selector, str) or not split_selector(selector)[0]:
        return [f"rule #{index}: missing or empty 'selector'"]
    source = f"selector '{normalize_selector(selector)}'"

    has_timespan = "timespan" in rule
    has_at = "at" in rule
    if has_timespan == has_at:
        return [f"{source}: a rule needs exactly one of 'timespan' or 'at'"]

    if has_at:
        errors = []
        if not _is_time(rule["at"]):
            errors.append(f"{source}: 'at' must be a non-negative number")
        return errors + _validate_styles(rule.get("styles", {}), "styles", source)

    errors = []
    timespan = rule["timespan"]
    if (
        not isinstance(timespan, (list, tuple))
        or len(timespan) != 2
        or not all(_is_time(t) for t in timespan)
    ):
        errors.append(f"{source}: 'timespan' must be a [start, end] pair of non-negative numbers")
    elif timespan[0] >= timespan[1]:
        errors.append(
            f"{source}: timespan start ({timespan[0]}) must be before its end ({timespan[1]})"
        )

    from_styles = rule.get("from", {})
    to_styles = rule.get("to", {})
    style_errors = _validate_styles(from_styles, "from", source) + _validate_styles(
        to_styles, "to", source
    )
    if style_errors:
        return errors + style_errors

    for prop in from_styles:
        if prop not in to_styles:
            errors.append(f"\"to\" style '{prop}' is missing for {source}")
    for prop in to_styles:
        if prop not in from_styles:
            errors.append(f"\"from\" style '{prop}' is missing for {source}")

    return errors


def validate_definition(definition: Iterable[Any]) -> list[str]:
    """Validate every rule of a definition."""
    errors = []
    for i, rule in enumerate(definition):
        errors.extend(validate_rule(rule, i))
    return errors


# ── Compilation ───────────────────────────────────────────────────────────

def parse_styles(styles: Mapping[str, str]) -> ParsedStyles:
    """Parse every raw style string of a style map."""
    return {prop: parse_css_value(val) for prop, val in styles.items()}


def parse_rule(rule: AuthorRule, time_unit_ms: float = DEFAULT_TIME_UNIT_MS) -> ParsedRule:
    """Compile a validated author rule."""
    selector = normalize_selector(rule["selector"])
    if "timespan" in rule:
        start, end = rule["timespan"]
        return RangeRule(
            selector=selector,
            start=float(start) * time_unit_ms,
            end=float(end) * time_unit_ms,
            from_styles=parse_styles(rule.get("from", {})),
            to_styles=parse_styles(rule.get("to", {})),
        )
    return InstantRule(
        selector=selector,
        at=float(rule["at"]) * time_unit_ms,
        styles=parse_styles(rule.get("styles", {})),
    )


def parse_definition(
    definition: Iterable[Any], time_unit_ms: float = DEFAULT_TIME_UNIT_MS
) -> list[ParsedRule]:
    """Validate and compile a definition, sorted by end time.

    Raises:
        DefinitionError: listing every problem found; nothing is compiled.
    """
    definition = list(definition)
    errors = validate_definition(definition)
    if errors:
        raise DefinitionError(errors)

    rules = [parse_rule(rule, time_unit_ms) for rule in definition]
    rules.sort(key=lambda r: r.end)
    return rules


def definition_duration(rules: Iterable[ParsedRule]) -> float:
    """Total duration of a compiled definition in milliseconds."""
    return max((r.end for r in rules), default=0.0)


# ── File loader ───────────────────────────────────────────────────────────

def load_definition(path: Union[str, Path]) -> list[dict]:
    """Load author rules from a YAML or JSON file.

    The file holds either a list of rules or a mapping with a ``rules`` list.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Animation definition not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DefinitionError([f"invalid JSON in {path}: {e}"]) from e
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DefinitionError([f"invalid YAML in {path}: {e}"]) from e

    if isinstance(data, Mapping):
        data = data.get("rules")
    if not isinstance(data, list):
        raise DefinitionError([f"{path}: definition must be a list of rules"])
    return data
