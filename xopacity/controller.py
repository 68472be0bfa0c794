"""
Opacity controller.

Performs get/set/delete/toggle/reset against the opacity property of a
resolved window. Values are handled as percentages and converted to the
32-bit CARDINAL encoding only at the property boundary.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import InternalError, MissingOperandError, OpacityError
from .models import (
    OPACITY_PROPERTY,
    Action,
    OpacityOperand,
    cardinal_to_percent,
    percent_to_cardinal,
)

logger = logging.getLogger(__name__)

DEFAULT_TOGGLE_OPACITY = OpacityOperand(value=100)


@dataclass
class ControllerResult:
    """Outcome of one controller action."""

    action: Action
    window: Optional[int] = None
    opacity: Optional[int] = None  # Percentage read or written
    cleared: int = 0  # Windows cleared by reset
    failed: int = 0  # Windows reset could not clear

    @property
    def output(self) -> Optional[str]:
        """Text to print on stdout, if any."""
        if self.action == Action.GET:
            return str(self.opacity)
        return None


class OpacityController:
    """Read and modify window opacity through a window system client."""

    def __init__(self, window_system, property_name: str = OPACITY_PROPERTY):
        self.window_system = window_system
        self.property_name = property_name

    def apply(self, action: Action, window: Optional[int], operand: Optional[OpacityOperand] = None) -> ControllerResult:
        """
        Dispatch action to its handler.

        Args:
            action: Action to perform
            window: Resolved top-level window (ignored by reset)
            operand: Opacity operand for set/toggle
        """
        if action == Action.RESET:
            return self.reset()
        if action == Action.GET:
            return self.get(window)
        if action == Action.DELETE:
            return self.delete(window)
        if action == Action.SET:
            return self.set(window, operand)
        if action == Action.TOGGLE:
            return self.toggle(window, operand)
        raise InternalError(f"unhandled action {action!r}")

    def current_opacity(self, window: int) -> Optional[int]:
        """Current opacity percentage, None when the property is unset."""
        value = self.window_system.get_property(window, self.property_name)
        if value is None:
            return None
        return cardinal_to_percent(value)

    def get(self, window: int) -> ControllerResult:
        current = self.current_opacity(window)
        return ControllerResult(Action.GET, window, 100 if current is None else current)

    def set(self, window: int, operand: Optional[OpacityOperand], current: Optional[int] = None) -> ControllerResult:
        """
        Set absolute opacity, or adjust it when the operand carries a sign.

        Results outside [0, 100] saturate silently.
        """
        if operand is None:
            raise MissingOperandError(Action.SET.value)

        if operand.is_relative:
            if current is None:
                current = self.current_opacity(window)
            base = 100 if current is None else current
        else:
            base = 100

        target = operand.apply_to(base)
        logger.debug(f"Opacity of {window:#x}: {operand} -> {target}%")

        self.window_system.set_property(window, self.property_name, percent_to_cardinal(target))
        return ControllerResult(Action.SET, window, target)

    def delete(self, window: int) -> ControllerResult:
        self.window_system.remove_property(window, self.property_name)
        return ControllerResult(Action.DELETE, window)

    def toggle(self, window: int, operand: Optional[OpacityOperand]) -> ControllerResult:
        """Delete opacity when set (to any value), otherwise set it (default 100)."""
        current = self.current_opacity(window)
        if current is not None:
            result = self.delete(window)
        else:
            result = self.set(window, operand or DEFAULT_TOGGLE_OPACITY, current=100)
        result.action = Action.TOGGLE
        return result

    def reset(self) -> ControllerResult:
        """
        Remove the opacity property from every window under the root.

        Failures on individual windows are expected (windows vanish, or
        belong to clients that reject the change) and do not stop the pass.
        """
        cleared = failed = 0
        for node in self.window_system.enumerate_tree():
            try:
                self.window_system.remove_property(node.id, self.property_name)
                cleared += 1
            except OpacityError as e:
                logger.debug(f"Could not reset window {node.id:#x}: {e}")
                failed += 1

        logger.info(f"Reset opacity on {cleared} window(s), {failed} failure(s)")
        return ControllerResult(Action.RESET, cleared=cleared, failed=failed)
