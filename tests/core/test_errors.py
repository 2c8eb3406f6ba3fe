"""Tests for error types and codes."""

import pytest

from rxmigrate.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    MigrationError,
    ParseError,
    RxMigrateError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.PARSE_UNSUPPORTED_LANGUAGE, 3000),
            (ErrorCode.MIGRATION_NOT_CONVERGED, 4000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        # When
        value = code.value

        # Then
        assert expected_range <= value < expected_range + 1000


class TestRxMigrateError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = RxMigrateError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        # Given
        error = RxMigrateError(code=ErrorCode.INTERNAL_ERROR, message="Something broke")

        # When
        result = str(error)

        # Then
        assert result == "[9001] INTERNAL_ERROR: Something broke"

    def test_given_error_when_raised_then_catchable_as_exception(self) -> None:
        """Errors are real exceptions."""
        with pytest.raises(RxMigrateError):
            raise ParseError.unsupported_language("a.js")


class TestConfigError:
    """ConfigError factory method tests."""

    @pytest.mark.parametrize(
        ("factory", "kwargs", "expected_code"),
        [
            (
                "parse_error",
                {"path": "/foo", "reason": "bad yaml"},
                ErrorCode.CONFIG_PARSE_ERROR,
            ),
            (
                "invalid_value",
                {"field": "migration.max_rounds", "value": 0, "reason": "too small"},
                ErrorCode.CONFIG_INVALID_VALUE,
            ),
            ("file_not_found", {"path": "/missing"}, ErrorCode.CONFIG_FILE_NOT_FOUND),
        ],
    )
    def test_given_factory_when_called_then_correct_code(
        self, factory: str, kwargs: dict[str, object], expected_code: ErrorCode
    ) -> None:
        """Factory methods produce errors with correct error codes."""
        # When
        error = getattr(ConfigError, factory)(**kwargs)

        # Then
        assert error.code == expected_code

    def test_given_parse_error_when_created_then_path_in_details(self) -> None:
        """Parse error includes file path in details."""
        # When
        error = ConfigError.parse_error("/config.yaml", "invalid syntax")

        # Then
        assert error.details["path"] == "/config.yaml"
        assert "invalid syntax" in error.message


class TestParseError:
    """ParseError factory tests."""

    def test_unsupported_language_names_the_path(self) -> None:
        error = ParseError.unsupported_language("src/app.js")
        assert error.code == ErrorCode.PARSE_UNSUPPORTED_LANGUAGE
        assert error.details == {"path": "src/app.js"}

    def test_grammar_unavailable_keeps_reason(self) -> None:
        error = ParseError.grammar_unavailable("tsx", "No module named 'tree_sitter_typescript'")
        assert error.code == ErrorCode.PARSE_GRAMMAR_UNAVAILABLE
        assert "tsx" in error.message
        assert error.details["reason"].startswith("No module")


class TestMigrationError:
    """MigrationError factory tests."""

    def test_not_converged_is_not_retryable(self) -> None:
        error = MigrationError.not_converged("src/app.ts", 10)
        assert error.code == ErrorCode.MIGRATION_NOT_CONVERGED
        assert error.details == {"path": "src/app.ts", "rounds": 10}
        assert not error.retryable

    def test_write_failed_is_retryable(self) -> None:
        error = MigrationError.write_failed("src/app.ts", "Permission denied")
        assert error.code == ErrorCode.MIGRATION_WRITE_FAILED
        assert error.retryable


class TestInternalError:
    """InternalError tests."""

    def test_given_unexpected_error_when_created_then_includes_extras(self) -> None:
        """Unexpected error captures arbitrary extra details."""
        # Given
        extras = {"rule": "collapse-imports", "start": 42}

        # When
        error = InternalError.unexpected("boom", **extras)

        # Then
        assert error.details == extras
        assert error.code == ErrorCode.INTERNAL_ERROR
