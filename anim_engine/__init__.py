"""Headless, time-addressable CSS property animation engine."""

import logging

from anim_engine.animation import Animation, Layer
from anim_engine.config import AnimationConfig
from anim_engine.dom import StyleAdapter, VirtualDomAdapter, VirtualElement
from anim_engine.interpolate import calculate_next_value
from anim_engine.parser import parse_css_value
from anim_engine.plugins import AnimationPlugin
from anim_engine.rules import (
    AnimationError,
    DefinitionError,
    SelectorError,
    load_definition,
)
from anim_engine.scheduler import AsyncioFrameScheduler, ManualFrameScheduler
from anim_engine.values import stringify_value

__version__ = "0.1.0"

__all__ = [
    "Animation",
    "AnimationConfig",
    "AnimationError",
    "AnimationPlugin",
    "AsyncioFrameScheduler",
    "DefinitionError",
    "Layer",
    "ManualFrameScheduler",
    "SelectorError",
    "StyleAdapter",
    "VirtualDomAdapter",
    "VirtualElement",
    "calculate_next_value",
    "load_definition",
    "parse_css_value",
    "stringify_value",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
