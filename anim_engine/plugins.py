"""Plugin hook for drivers attached to an animation (scroll, transport UI)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from anim_engine.animation import Animation


@runtime_checkable
class AnimationPlugin(Protocol):
    """A driver that attaches to an animation.

    ``init`` is called once by ``Animation.add_plugin``. ``destroy``, when the
    plugin defines it, is called by ``Animation.dispose``.
    """

    def init(self, animation: "Animation") -> None:
        ...
