"""ExitCode IntEnum のテスト。"""

from enum import IntEnum

import pytest

from nixfoundry.models.exit_code import ExitCode


class TestExitCodeValues:
    """ExitCode IntEnum の値を検証する。"""

    def test_success_is_zero(self) -> None:
        assert ExitCode.SUCCESS == 0

    def test_invalid_is_one(self) -> None:
        assert ExitCode.INVALID == 1

    def test_conflict_is_two(self) -> None:
        assert ExitCode.CONFLICT == 2

    def test_execution_error_is_three(self) -> None:
        assert ExitCode.EXECUTION_ERROR == 3

    def test_input_error_is_four(self) -> None:
        assert ExitCode.INPUT_ERROR == 4

    def test_has_five_members(self) -> None:
        assert len(ExitCode) == 5


class TestExitCodeIsIntEnum:
    def test_is_int_enum_subclass(self) -> None:
        assert issubclass(ExitCode, IntEnum)

    def test_can_be_used_as_process_exit_code(self) -> None:
        """int() で変換可能である（sys.exit() に渡せる）。"""
        assert int(ExitCode.SUCCESS) == 0
        assert int(ExitCode.INPUT_ERROR) == 4

    @pytest.mark.parametrize("value", [-1, 5, 999])
    def test_invalid_value_raises_value_error(self, value: int) -> None:
        with pytest.raises(ValueError):
            ExitCode(value)
