"""
Opacity controller tests.

Property values are checked in their 32-bit encoding where the encoding
matters and as percentages everywhere else.
"""

import pytest

from conftest import CLIENT, FRAME, OTHER, WIDGET
from xopacity.controller import OpacityController
from xopacity.errors import InternalError, MissingOperandError, PropertyWriteError
from xopacity.models import OPAQUE, Action, OpacityOperand


def operand(token: str) -> OpacityOperand:
    return OpacityOperand.parse(token)


class TestGet:

    def test_unset_reports_fully_opaque(self, window_system):
        result = OpacityController(window_system).get(FRAME)
        assert result.opacity == 100
        assert result.output == "100"

    def test_reads_percentage(self, window_system):
        window_system.properties[(FRAME, "_NET_WM_WINDOW_OPACITY")] = 0xC0000000
        assert OpacityController(window_system).get(FRAME).opacity == 75

    def test_does_not_mutate(self, window_system):
        OpacityController(window_system).get(FRAME)
        assert window_system.properties == {}


class TestSet:

    def test_absolute_value_encoding(self, window_system):
        OpacityController(window_system).set(FRAME, operand("50"))
        assert window_system.opacity(FRAME) == 50 * OPAQUE // 100

    def test_percent_marker_is_ignored(self, window_system):
        OpacityController(window_system).set(FRAME, operand("50%"))
        assert window_system.opacity(FRAME) == 50 * OPAQUE // 100

    def test_fully_opaque(self, window_system):
        OpacityController(window_system).set(FRAME, operand("100"))
        assert window_system.opacity(FRAME) == OPAQUE

    @pytest.mark.parametrize("percent", range(0, 101))
    def test_set_then_get_round_trips(self, window_system, percent):
        controller = OpacityController(window_system)
        controller.set(FRAME, OpacityOperand(value=percent))
        assert controller.get(FRAME).opacity == percent

    @pytest.mark.parametrize("start,token,expected", [
        (50, "+20", 70),
        (50, "-60", 0),
        (70, "+60", 100),
        (50, "-10%", 40),
    ])
    def test_relative_adjustment(self, window_system, start, token, expected):
        window_system.set_opacity(FRAME, start)
        result = OpacityController(window_system).set(FRAME, operand(token))
        assert result.opacity == expected
        assert OpacityController(window_system).get(FRAME).opacity == expected

    def test_relative_from_unset_starts_at_100(self, window_system):
        result = OpacityController(window_system).set(FRAME, operand("-25"))
        assert result.opacity == 75

    def test_absolute_above_range_saturates(self, window_system):
        result = OpacityController(window_system).set(FRAME, operand("250"))
        assert result.opacity == 100
        assert window_system.opacity(FRAME) == OPAQUE

    def test_missing_operand(self, window_system):
        with pytest.raises(MissingOperandError):
            OpacityController(window_system).set(FRAME, None)

    def test_write_failure_propagates(self, window_system):
        window_system.rejected.add(FRAME)
        with pytest.raises(PropertyWriteError) as exc_info:
            OpacityController(window_system).set(FRAME, operand("40"))
        assert exc_info.value.exit_status == 3


class TestDelete:

    def test_removes_property(self, window_system):
        window_system.set_opacity(FRAME, 40)
        OpacityController(window_system).delete(FRAME)
        assert window_system.opacity(FRAME) is None

    def test_absent_property_is_not_an_error(self, window_system):
        OpacityController(window_system).delete(FRAME)
        assert window_system.opacity(FRAME) is None


class TestToggle:

    @pytest.mark.parametrize("token,expected", [(None, 100), ("30", 30)])
    def test_two_cycle(self, window_system, token, expected):
        controller = OpacityController(window_system)
        value = operand(token) if token else None

        first = controller.toggle(FRAME, value)
        assert first.action == Action.TOGGLE
        assert controller.get(FRAME).opacity == expected
        assert window_system.opacity(FRAME) is not None

        controller.toggle(FRAME, value)
        assert window_system.opacity(FRAME) is None

        controller.toggle(FRAME, value)
        assert controller.get(FRAME).opacity == expected

    def test_fully_opaque_counts_as_set(self, window_system):
        window_system.set_opacity(FRAME, 100)
        OpacityController(window_system).toggle(FRAME, operand("50"))
        assert window_system.opacity(FRAME) is None


class TestReset:

    def test_clears_every_window(self, window_system):
        for window in (FRAME, CLIENT, WIDGET, OTHER):
            window_system.set_opacity(window, 60)

        result = OpacityController(window_system).reset()

        assert result.cleared == 4
        assert result.failed == 0
        assert window_system.properties == {}

    def test_rejected_window_does_not_stop_reset(self, window_system):
        for window in (FRAME, CLIENT, OTHER):
            window_system.set_opacity(window, 60)
        window_system.rejected.add(WIDGET)

        result = OpacityController(window_system).reset()

        assert result.cleared == 3
        assert result.failed == 1
        assert window_system.properties == {}


class TestApply:

    def test_dispatches_by_action(self, window_system):
        controller = OpacityController(window_system)
        controller.apply(Action.SET, FRAME, operand("20"))
        assert controller.apply(Action.GET, FRAME).output == "20"

    def test_reset_ignores_window(self, window_system):
        window_system.set_opacity(OTHER, 10)
        OpacityController(window_system).apply(Action.RESET, None)
        assert window_system.opacity(OTHER) is None

    def test_custom_property_name(self, window_system):
        OpacityController(window_system, "_TEST_OPACITY").set(FRAME, operand("0"))
        assert window_system.properties == {(FRAME, "_TEST_OPACITY"): 0}

    def test_unknown_action(self, window_system):
        with pytest.raises(InternalError) as exc_info:
            OpacityController(window_system).apply("blink", FRAME)
        assert exc_info.value.exit_status == 128
