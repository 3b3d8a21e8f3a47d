"""Animation player: resolves the styles of every layer object at any time.

The player holds a compiled definition and a cache of the styles it has
applied. Every time change (stepping, seeking, playing) computes the full
styles state for the requested time, removes cached styles that no longer
apply and writes the rest through the style adapter.

States: idle -> defined -> playing <-> paused -> completed. ``reset()``
returns to the defined state at time 0 from anywhere.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from anim_engine.config import AnimationConfig, resolve_config
from anim_engine.dom import StyleAdapter
from anim_engine.interpolate import calculate_next_value, styles_union
from anim_engine.plugins import AnimationPlugin
from anim_engine.rules import (
    ParsedRule,
    RangeRule,
    SelectorError,
    definition_duration,
    parse_definition,
    split_selector,
)
from anim_engine.scheduler import AsyncioFrameScheduler, FrameScheduler
from anim_engine.values import CssValue, ParsedStyles, stringify_value

logger = logging.getLogger(__name__)


@dataclass
class Layer:
    """A named host element that rule selectors start from."""

    id: str
    element: Any


LayerInput = Union[Layer, tuple[str, Any]]


class Animation:
    """Timeline player over a set of layers.

    Usage:
        animation = Animation(layers, VirtualDomAdapter())
        animation.define(rules)
        animation.forward(2000)
        animation.seek(0.5)
        animation.reset()

    Redefining rules while playing is not supported; pause first. Layer
    elements must not be animated by another instance at the same time.

    A rule applies its end styles once the time is past its end. The time
    never goes past the duration, so an instant rule placed exactly at the
    duration is never rendered; end a definition with a range rule instead.
    """

    def __init__(
        self,
        layers: Iterable[LayerInput],
        adapter: StyleAdapter,
        config: Union[AnimationConfig, Mapping[str, Any], None] = None,
        scheduler: Optional[FrameScheduler] = None,
    ) -> None:
        self.config = resolve_config(config)
        self.adapter = adapter
        self.scheduler = scheduler or AsyncioFrameScheduler(
            frame_interval_ms=self.config.timestep
        )

        # Later duplicates win
        self._layers: dict[str, Any] = {}
        for layer in layers:
            layer_id, element = (
                (layer.id, layer.element) if isinstance(layer, Layer) else layer
            )
            self._layers[layer_id] = element

        self._rules: list[ParsedRule] = []
        self._duration = 0.0
        self._current_time = 0.0
        self._completed = False
        self._playing = False

        self._objects: dict[str, list[Any]] = {}  # selector -> elements
        self._active_styles: dict[str, ParsedStyles] = {}  # selector -> styles
        self._active_targets: dict[str, list[Any]] = {}  # selector -> styled elements
        self._initial_styles: dict[str, dict[str, str]] = {}

        self._plugins: list[AnimationPlugin] = []
        self._frame_handle: Any = None
        self._then = 0.0

    # ── State ─────────────────────────────────────────────────────────────

    @property
    def duration(self) -> float:
        """Total duration in milliseconds."""
        return self._duration

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def timestep(self) -> float:
        return self.config.timestep

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def is_completed(self) -> bool:
        return self._completed

    @property
    def is_defined(self) -> bool:
        return bool(self._rules)

    @property
    def progress(self) -> float:
        """Current time relative to the duration, in [0, 1]."""
        if not self._duration:
            return 0.0
        return min(self._current_time / self._duration, 1.0)

    @property
    def rules(self) -> list[ParsedRule]:
        return list(self._rules)

    @property
    def active_styles(self) -> dict[str, ParsedStyles]:
        """Styles currently applied by the animation, per selector."""
        return {sel: dict(styles) for sel, styles in self._active_styles.items()}

    @property
    def initial_styles(self) -> dict[str, dict[str, str]]:
        """Computed styles captured on define(), when enabled in the config."""
        return {sel: dict(styles) for sel, styles in self._initial_styles.items()}

    def objects(self, selector: str) -> list[Any]:
        """Elements resolved for a selector of the current definition."""
        return list(self._objects.get(selector, []))

    # ── Definition ────────────────────────────────────────────────────────

    def define(self, definition: Iterable[Mapping[str, Any]]) -> "Animation":
        """Validate, resolve and compile a list of animation rules.

        Replaces any previous definition. Nothing changes if the definition
        is invalid.

        Raises:
            DefinitionError: a rule is malformed (mismatching from/to styles,
                bad timespan, ...).
            SelectorError: a layer or layer object cannot be found.
        """
        rules = parse_definition(definition, self.config.time_unit_ms)
        objects = self._resolve_objects(rules)

        self._rules = rules
        self._objects = objects
        self._duration = definition_duration(rules)
        self._initial_styles = (
            self._snapshot_initial_styles() if self.config.snapshot_initial_styles else {}
        )

        logger.debug(
            "Animation: defined %d rules over %d objects, duration %.0fms",
            len(rules),
            len(objects),
            self._duration,
        )
        return self

    def _resolve_objects(self, rules: list[ParsedRule]) -> dict[str, list[Any]]:
        """Extract all objects (layer elements and layer child elements) by selector."""
        objects: dict[str, list[Any]] = {}

        for rule in rules:
            selector = rule.selector
            if selector in objects:
                continue

            layer_id, object_selector = split_selector(selector)
            if layer_id not in self._layers:
                raise SelectorError(f"Missing layer ID: {layer_id}", selector)
            layer = self._layers[layer_id]

            if not object_selector:
                objects[selector] = [layer]
                continue

            try:
                elements = list(self.adapter.query_selector_all(layer, object_selector))
            except ValueError as e:
                raise SelectorError(
                    f"Invalid layer object selector: {selector} ({e})", selector
                ) from e
            if not elements:
                raise SelectorError(f"Missing layer object: {selector}", selector)
            objects[selector] = elements

        return objects

    def _snapshot_initial_styles(self) -> dict[str, dict[str, str]]:
        # All animated properties per object
        groups: dict[str, set[str]] = {}
        for rule in self._rules:
            groups.setdefault(rule.selector, set()).update(rule.end_styles)

        snapshot = {}
        for selector, props in groups.items():
            computed = self.adapter.get_computed_style(self._objects[selector][0])
            snapshot[selector] = {prop: computed.get(prop, "") for prop in sorted(props)}
        return snapshot

    # ── Playback ──────────────────────────────────────────────────────────

    def play(self) -> None:
        """Play from the current time; restarts if the animation has completed."""
        if not self._rules:
            logger.warning("Animation: Can't play without a definition")
            return
        if self._playing:
            return

        try:
            then = self.scheduler.now()
            handle = self.scheduler.request_frame(self._on_frame)
        except RuntimeError as e:
            # AsyncioFrameScheduler outside of a running loop
            logger.warning("Animation: Can't play without a frame scheduler (%s)", e)
            return

        if self._completed:
            self.reset()

        self._playing = True
        self._then = then
        self._frame_handle = handle
        logger.debug("Animation: playing from %.0fms", self._current_time)

    def pause(self) -> None:
        if self._frame_handle is not None:
            self.scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None
        self._playing = False

    def forward(self, timestep: Optional[float] = None) -> None:
        """Move forward by ``timestep`` ms (config timestep by default)."""
        self.pause()
        if not self._rules:
            logger.warning("Animation: Can't go forward without a definition")
            return

        step = self.config.timestep if timestep is None else timestep
        time = self._current_time + step
        if time >= self._duration:
            time = self._duration
            self._completed = True
        self._update_frame(time)

    def back(self, timestep: Optional[float] = None) -> None:
        """Move back by ``timestep`` ms; ignored if that goes before 0."""
        self.pause()
        if not self._rules:
            logger.warning("Animation: Can't go back without a definition")
            return

        step = self.config.timestep if timestep is None else timestep
        time = self._current_time - step
        if time >= 0:
            self._completed = False
            self._update_frame(time)

    def seek(self, progress: float) -> None:
        """Jump to ``progress`` of the duration (clamped to [0, 1])."""
        self.pause()
        if not self._rules:
            logger.warning("Animation: Can't seek without a definition")
            return

        progress = min(max(progress, 0.0), 1.0)
        time = math.floor(progress * self._duration + 0.5)
        self._completed = progress == 1
        self._update_frame(time)

    def reset(self) -> None:
        """Stop at time 0 and remove every style the animation applied."""
        self.pause()
        self._current_time = 0.0
        self._completed = False

        for selector, styles in list(self._active_styles.items()):
            for prop in list(styles):
                self._remove_style(selector, prop)

    stop = reset

    # ── Plugins ───────────────────────────────────────────────────────────

    def add_plugin(self, plugin: AnimationPlugin) -> "Animation":
        """Initialize a plugin with this animation and keep it for disposal."""
        plugin.init(self)
        self._plugins.append(plugin)
        logger.debug("Animation: added plugin %s", type(plugin).__name__)
        return self

    def dispose(self) -> None:
        """Destroy plugins, reset and drop the definition."""
        for plugin in self._plugins:
            destroy = getattr(plugin, "destroy", None)
            if callable(destroy):
                destroy()
        self._plugins = []

        self.reset()
        self._rules = []
        self._objects = {}
        self._initial_styles = {}
        self._duration = 0.0

    # ── Frame update ──────────────────────────────────────────────────────

    def _on_frame(self) -> None:
        self._frame_handle = None
        if not self._playing:
            return

        now = self.scheduler.now()
        elapsed = now - self._then
        timestep = self.config.timestep

        if elapsed >= timestep:
            # Advance by whole timesteps and carry the remainder
            remainder = elapsed % timestep
            self._then = now - remainder
            time = self._current_time + elapsed - remainder

            if time >= self._duration:
                self._update_frame(self._duration)
                self._completed = True
                self._playing = False
                logger.debug("Animation: completed")
                return
            self._update_frame(time)

        self._frame_handle = self.scheduler.request_frame(self._on_frame)

    def _update_frame(self, time: float) -> None:
        completed_rules = [r for r in self._rules if time > r.end]
        # Instant rules have start == end and never blend
        in_progress_rules = [
            r for r in self._rules if not r.is_instant and r.start <= time <= r.end
        ]

        styles_state: dict[str, ParsedStyles] = {}  # all styles relative to `time`

        for rule in completed_rules:
            styles_state.setdefault(rule.selector, {}).update(rule.end_styles)

        delta = time - self._current_time
        for rule in in_progress_rules:
            styles = styles_state.setdefault(rule.selector, {})
            rate, baseline, target_styles = self._change_rate(rule, time, delta, styles)
            for prop, target in target_styles.items():
                styles[prop] = calculate_next_value(baseline[prop], target, rate)

        # Drop styles that no longer apply
        for selector, active in list(self._active_styles.items()):
            state = styles_state.get(selector, {})
            for prop in [p for p in active if p not in state]:
                self._remove_style(selector, prop)

        for selector, styles in styles_state.items():
            for prop, value in styles.items():
                self._set_style(selector, prop, value)

        self._current_time = time

    def _change_rate(
        self, rule: RangeRule, time: float, delta: float, state: ParsedStyles
    ) -> tuple[float, ParsedStyles, ParsedStyles]:
        """Change rate, baseline and target styles for an in-progress rule.

        Moving within the rule, the active styles are blended towards its end
        (forward) or start (backward) over the part of the rule still ahead.
        A jump that enters the rule from outside blends from the boundary it
        crossed instead, so the result does not depend on where the jump
        started. ``state`` holds the styles already resolved for this frame.
        """
        active = styles_union(rule.from_styles, self._active_styles.get(rule.selector, {}))

        if delta > 0:
            if self._current_time <= rule.start:
                rate = (time - rule.start) / (rule.end - rule.start)
                return rate, styles_union(state, rule.from_styles), rule.to_styles
            anchor = self._current_time
            return (time - anchor) / (rule.end - anchor), active, rule.to_styles
        if delta < 0:
            if self._current_time >= rule.end:
                rate = (rule.end - time) / (rule.end - rule.start)
                return rate, styles_union(state, rule.to_styles), rule.from_styles
            anchor = self._current_time
            return (anchor - time) / (anchor - rule.start), active, rule.from_styles
        return 0.0, active, rule.to_styles

    def _set_style(self, selector: str, prop: str, value: CssValue) -> None:
        elements = self._objects.get(selector) or self._active_targets.get(selector, [])
        css = stringify_value(value)
        for element in elements:
            self.adapter.set_style(element, prop, css)

        self._active_styles.setdefault(selector, {})[prop] = value
        self._active_targets[selector] = elements

    def _remove_style(self, selector: str, prop: str) -> None:
        for element in self._active_targets.get(selector, []):
            self.adapter.remove_style(element, prop)

        styles = self._active_styles.get(selector, {})
        styles.pop(prop, None)
        if not styles:
            self._active_styles.pop(selector, None)
            self._active_targets.pop(selector, None)
