"""Tests for the exception hierarchy."""

import pytest

from excel_write_context.utils.exceptions import (
    DocumentCreationError,
    DocumentError,
    ErrorCode,
    FinalizationError,
    HookExecutionError,
    InvalidArgumentError,
    InvalidStateError,
    SheetNotFoundError,
    WriteContextError,
)


class TestWriteContextError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = WriteContextError("Something broke", ErrorCode.INVALID_STATE)
        assert error.message == "Something broke"
        assert error.error_code is ErrorCode.INVALID_STATE
        assert error.details == {}

    def test_str_includes_code(self) -> None:
        error = WriteContextError("boom", ErrorCode.SHEET_NOT_FOUND)
        assert str(error) == "[E2003] boom"

    def test_every_code_is_distinct(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_to_dict(self) -> None:
        error = WriteContextError(
            "boom", ErrorCode.INVALID_STATE, details={"state": "closed"}
        )
        assert error.to_dict() == {
            "error_code": "E1002",
            "message": "boom",
            "details": {"state": "closed"},
        }

    def test_to_dict_without_details(self) -> None:
        error = WriteContextError("boom", ErrorCode.INVALID_ARGUMENT)
        assert "details" not in error.to_dict()


class TestUsageErrors:
    """Tests for caller usage errors."""

    def test_invalid_argument(self) -> None:
        error = InvalidArgumentError("Sheet argument cannot be null", argument="sheet")
        assert error.error_code is ErrorCode.INVALID_ARGUMENT
        assert error.argument == "sheet"
        assert error.details == {"argument": "sheet"}

    def test_invalid_argument_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            raise InvalidArgumentError("bad")

    def test_invalid_state(self) -> None:
        error = InvalidStateError("closed", state="closed", operation="enter_sheet")
        assert error.error_code is ErrorCode.INVALID_STATE
        assert error.state == "closed"
        assert error.operation == "enter_sheet"
        assert error.details == {"state": "closed", "operation": "enter_sheet"}


class TestDocumentErrors:
    """Tests for document backend errors."""

    @pytest.mark.parametrize(
        "error",
        [
            DocumentCreationError(),
            FinalizationError(),
            SheetNotFoundError(1),
        ],
    )
    def test_hierarchy(self, error: WriteContextError) -> None:
        assert isinstance(error, DocumentError)
        assert isinstance(error, WriteContextError)

    def test_document_creation_defaults(self) -> None:
        error = DocumentCreationError(template="template.xlsx")
        assert error.message == "Create workbook failure"
        assert error.error_code is ErrorCode.DOCUMENT_CREATION_FAILED
        assert error.details == {"template": "template.xlsx"}

    def test_finalization_steps(self) -> None:
        error = FinalizationError(step="write", failed_steps=["write", "close_output"])
        assert error.message == "Can not close IO"
        assert error.error_code is ErrorCode.FINALIZATION_FAILED
        assert error.step == "write"
        assert error.failed_steps == ["write", "close_output"]

    def test_finalization_without_steps(self) -> None:
        error = FinalizationError()
        assert error.step is None
        assert error.failed_steps == []
        assert error.details == {}

    def test_sheet_not_found(self) -> None:
        error = SheetNotFoundError(3)
        assert error.sheet_no == 3
        assert error.error_code is ErrorCode.SHEET_NOT_FOUND
        assert "3" in error.message


class TestHookExecutionError:
    """Tests for handler failures."""

    def test_attributes(self) -> None:
        error = HookExecutionError(
            "Write handler failed", handler="pkg.Styler", kind="cell", phase="after"
        )
        assert error.error_code is ErrorCode.HOOK_EXECUTION_FAILED
        assert error.handler == "pkg.Styler"
        assert error.kind == "cell"
        assert error.phase == "after"
        assert error.details == {
            "handler": "pkg.Styler",
            "kind": "cell",
            "phase": "after",
        }
