"""
Base classes for pedigree layout objects.

This module provides abstract base classes that define the common interface
of configurable layout objects:

- BaseLayout: Abstract base with event system, pedigree and canvas management
- StaticLayout: For single-pass layouts that run start to end in one call
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from .types import Event, EventType, PedigreeInput, PedigreeLike, SizeType
from .validation import validate_canvas_size, validate_pedigree


def as_pedigree(value: PedigreeLike) -> PedigreeInput:
    """Coerce a PedigreeInput or a mapping of arrays into a PedigreeInput."""
    if isinstance(value, PedigreeInput):
        return value
    return PedigreeInput.from_dict(value)


class BaseLayout(ABC):
    """
    Abstract base class for pedigree layout objects.

    Provides shared infrastructure:
    - Event system (start/end events)
    - Pedigree management via properties
    - Optional canvas size for drawing dimensions

    Example:
        layout = SomeLayout(
            pedigree={"father_index": [-1, -1, 0], "mother_index": [-1, -1, 1],
                      "sex": ["male", "female", "female"]},
            size=(800, 600),
        )
        layout.run()
    """

    def __init__(
        self,
        *,
        pedigree: Optional[PedigreeLike] = None,
        size: Optional[SizeType] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize layout with configuration.

        Args:
            pedigree: PedigreeInput, or a mapping with ``father_index``,
                ``mother_index``, ``sex`` (camelCase keys also accepted)
            size: Canvas size as (width, height), or None for no canvas
            on_start: Callback for start event
            on_end: Callback for end event
        """
        self._pedigree: Optional[PedigreeInput] = None
        self._canvas_size: Optional[tuple[float, float]] = None
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}

        if pedigree is not None:
            self.pedigree = pedigree
        self.size = size

        if on_start:
            self._events[EventType.start] = on_start
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def pedigree(self) -> Optional[PedigreeInput]:
        """Get the pedigree."""
        return self._pedigree

    @pedigree.setter
    def pedigree(self, value: PedigreeLike) -> None:
        """Set the pedigree from a PedigreeInput or a mapping of arrays."""
        self._pedigree = as_pedigree(value)

    @property
    def size(self) -> Optional[tuple[float, float]]:
        """Get canvas size as (width, height), or None."""
        return self._canvas_size

    @size.setter
    def size(self, value: Optional[SizeType]) -> None:
        """
        Set canvas size.

        Raises:
            InvalidCanvasSizeError: If width or height is not positive.
        """
        if value is None:
            self._canvas_size = None
            return
        self._canvas_size = validate_canvas_size(value)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a layout event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """Trigger an event, calling the registered callback."""
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> Self:
        """
        Validate current configuration.

        Called automatically by run() but can be called early for fail-fast
        behavior.

        Returns:
            self (for chaining)

        Raises:
            ValueError: If no pedigree has been set
            ValidationError: If the pedigree is invalid
        """
        if self._pedigree is None:
            raise ValueError("No pedigree to lay out")
        validate_pedigree(self._pedigree)
        return self

    @abstractmethod
    def run(self, **kwargs: Any) -> Self:
        """Run the layout algorithm and fire start/end events."""
        pass


class StaticLayout(BaseLayout):
    """
    Base class for single-pass layouts.

    Example:
        layout = PedigreeAligner(pedigree=pedigree, packed=False)
        layout.run()
        print(layout.result.nid)
    """

    def run(self, **kwargs: Any) -> Self:
        """
        Run the layout algorithm.

        Validates, fires the start event, computes the layout, fires the end
        event.

        Args:
            **kwargs: Additional arguments passed to _compute()

        Returns:
            self (for chaining)
        """
        self.validate()
        self.trigger({"type": EventType.start, "layout": None})
        layout = self._compute(**kwargs)
        self.trigger({"type": EventType.end, "layout": layout})
        return self

    @abstractmethod
    def _compute(self, **kwargs: Any) -> Any:
        """
        Compute the layout.

        Subclasses implement this and return the finished layout, which is
        passed to end-event listeners.
        """
        pass


__all__ = [
    "as_pedigree",
    "BaseLayout",
    "StaticLayout",
]
