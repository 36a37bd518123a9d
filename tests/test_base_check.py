"""
Tests for CheckState and the BaseCheck execution contract.
"""

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from secaudit.core.models import CheckState, exit_code, rollup


# ═══════════════════════════════════════════════════════
# CHECK STATE
# ═══════════════════════════════════════════════════════

class TestCheckState:
    """Тесты CheckState"""

    def test_priority_order(self):
        """FAILED > WARNED > SUCCEEDED > SKIPPED"""
        assert CheckState.FAILED.priority == 3
        assert CheckState.WARNED.priority == 2
        assert CheckState.SUCCEEDED.priority == 1
        assert CheckState.SKIPPED.priority == 0

    def test_format_and_symbol_markup(self):
        assert CheckState.FAILED.format() == "[bold-fail]Failed[/bold-fail]"
        assert CheckState.SKIPPED.symbol() == "[skip]? [/skip]"

    def test_formats_in_priority_order(self):
        assert CheckState.formats() == [
            "[bold-fail]Failed[/bold-fail]",
            "[bold-warn]Warned[/bold-warn]",
            "[bold-success]Succeeded[/bold-success]",
            "[bold-skip]Skipped[/bold-skip]",
        ]

    @pytest.mark.parametrize("counts,expected", [
        ((0, 0, 0), CheckState.SKIPPED),
        ((0, 0, 1), CheckState.SUCCEEDED),
        ((0, 1, 1), CheckState.WARNED),
        ((1, 0, 0), CheckState.FAILED),
        ((1, 1, 1), CheckState.FAILED),
    ])
    def test_rollup_by_presence(self, counts, expected):
        assert rollup(*counts) is expected

    @pytest.mark.parametrize("state,code", [
        (CheckState.FAILED, 1),
        (CheckState.WARNED, 2),
        (CheckState.SUCCEEDED, 0),
        (CheckState.SKIPPED, 0),
    ])
    def test_exit_code(self, state, code):
        assert exit_code(state) == code


# ═══════════════════════════════════════════════════════
# STATE MERGING
# ═══════════════════════════════════════════════════════

OPERATION_STATES = {
    "fail": CheckState.FAILED,
    "warn": CheckState.WARNED,
    "success": CheckState.SUCCEEDED,
    "finish": CheckState.SUCCEEDED,
}


class TestStateMergeProperties:
    """Property-based тесты монотонного слияния состояний"""

    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(operations=st.lists(st.sampled_from(sorted(OPERATION_STATES)), max_size=20))
    def test_final_state_is_highest_priority_call(self, make_check, operations):
        """
        Итоговое состояние равно самому приоритетному из вызовов,
        без вызовов остаётся SKIPPED.
        """
        check = make_check("skip")

        for operation in operations:
            getattr(check, operation)()

        expected = max(
            (OPERATION_STATES[operation] for operation in operations),
            key=lambda state: state.priority,
            default=CheckState.SKIPPED,
        )
        assert check.state is expected

    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(lines=st.lists(st.text(max_size=30), max_size=10))
    def test_details_keep_order_and_duplicates(self, make_check, lines):
        check = make_check("skip")

        check.warn(lines)
        check.warn(lines)

        assert check.details == lines + lines


# ═══════════════════════════════════════════════════════
# CHECK CONTRACT
# ═══════════════════════════════════════════════════════

class TestBaseCheck:
    """Тесты BaseCheck"""

    def test_initial_state(self, make_check):
        check = make_check()
        assert check.state is CheckState.SKIPPED
        assert check.details == []

    def test_empty_details_are_ignored(self, make_check):
        check = make_check()
        check.append_details("first")

        check.append_details([])
        check.append_details(None)
        check.append_details("")

        assert check.details == ["first"]

    def test_string_detail_is_one_line(self, make_check):
        check = make_check()
        check.fail("single line")
        assert check.details == ["single line"]

    def test_details_returns_copy(self, make_check):
        check = make_check()
        check.append_details("line")

        check.details.append("mutated")

        assert check.details == ["line"]

    def test_warn_does_not_override_fail(self, make_check):
        check = make_check()
        check.fail("a")
        check.warn("b")
        check.success("c")
        assert check.state is CheckState.FAILED
        assert check.details == ["a", "b", "c"]

    def test_success_does_not_override_warn(self, make_check):
        check = make_check()
        check.warn()
        check.finish()
        assert check.state is CheckState.WARNED

    def test_fail_overrides_warn(self, make_check):
        check = make_check()
        check.warn()
        check.fail()
        assert check.state is CheckState.FAILED

    def test_execute_runs_check(self, make_check):
        check = make_check("success", ["done"])
        check.execute()
        assert check.runs == 1
        assert check.state is CheckState.SUCCEEDED
        assert check.details == ["done"]

    def test_execute_catches_exception(self, make_check):
        """Исключение из run() превращается в FAILED, не пробрасывается"""
        check = make_check("raise")

        check.execute()

        assert check.state is CheckState.FAILED
        assert check.details[0] == "RuntimeError: boom"
        assert "Traceback" in check.details[1]
        assert len(check.details) == 2

    def test_execute_logs_exception(self, make_check, caplog):
        check = make_check("raise", check_name="Exploding")

        with caplog.at_level("ERROR"):
            check.execute()

        assert "Exploding failed with exception: boom" in caplog.text

    def test_check_without_run_is_abstract(self):
        from secaudit.core.base_check import BaseCheck

        with pytest.raises(TypeError):
            BaseCheck()
