"""Tests for the worklane error hierarchy."""

import pytest

from worklane.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    OrchestrationError,
    WorklaneError,
    categorize_error,
)
from worklane.orchestration.exceptions import (
    DuplicateStepNameError,
    StepDefinitionError,
    StepIndexError,
    StepLookupError,
    UnknownStepNameError,
    WorkError,
)


class TestErrorContext:
    def test_empty_to_dict(self):
        assert ErrorContext().to_dict() == {}

    def test_only_set_fields(self):
        ctx = ErrorContext(run_id=3, position=1, metadata={"processed": 1})
        assert ctx.to_dict() == {"run_id": 3, "position": 1, "processed": 1}


class TestWorklaneError:
    def test_defaults(self):
        err = WorklaneError("broken")
        assert err.message == "broken"
        assert str(err) == "broken"
        assert err.category == ErrorCategory.INTERNAL
        assert err.retryable is False
        assert err.cause is None

    def test_cause_chains(self):
        cause = ImportError("no module")
        err = ConfigError("cannot import", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "no module"

    def test_with_context_known_and_metadata_keys(self):
        err = OrchestrationError("x").with_context(step="fetch", position=2, attempt=1)
        assert err.context.step == "fetch"
        assert err.context.position == 2
        assert err.context.metadata == {"attempt": 1}

    def test_to_dict(self):
        err = ConfigError("bad ref").with_context(run_id=7)
        assert err.to_dict() == {
            "error_type": "ConfigError",
            "message": "bad ref",
            "category": "CONFIG",
            "retryable": False,
            "context": {"run_id": 7},
        }

    def test_category_override(self):
        err = OrchestrationError("x", category=ErrorCategory.UNKNOWN, retryable=True)
        assert err.category == ErrorCategory.UNKNOWN
        assert err.retryable is True

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestOrchestrationHierarchy:
    def test_family_caught_by_base(self):
        for err in (
            StepDefinitionError("x"),
            DuplicateStepNameError("a", 0, 1),
            UnknownStepNameError("a"),
            StepIndexError(3, 1),
        ):
            assert isinstance(err, WorkError)
            assert isinstance(err, OrchestrationError)
            assert isinstance(err, WorklaneError)

    def test_lookup_errors_are_builtin_lookup_errors(self):
        assert isinstance(UnknownStepNameError("a"), KeyError)
        assert isinstance(StepIndexError(0, 0), IndexError)
        assert issubclass(StepLookupError, LookupError)

    def test_unknown_name_message_not_quoted(self):
        assert str(UnknownStepNameError("fetch")) == "Named index fetch doesn't exist!"

    def test_index_error_context(self):
        err = StepIndexError(4, 2)
        assert str(err) == "Index 4 is out of bound!"
        assert err.context.position == 4
        assert err.context.metadata == {"processed": 2}
        assert err.category == ErrorCategory.LOOKUP

    def test_definition_error_category(self):
        err = StepDefinitionError("bad", position=1)
        assert err.category == ErrorCategory.VALIDATION
        assert err.to_dict()["context"] == {"position": 1}

    def test_duplicate_name_context(self):
        err = DuplicateStepNameError("a", 0, 2)
        assert err.context.step == "a"
        assert err.context.position == 2
        assert "positions 0 and 2" in str(err)

    def test_raise_and_catch_as_key_error(self):
        with pytest.raises(KeyError):
            raise UnknownStepNameError("a")


class TestCategorizeError:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (ConfigError("x"), ErrorCategory.CONFIG),
            (StepIndexError(0, 0), ErrorCategory.LOOKUP),
            (ValueError("x"), ErrorCategory.VALIDATION),
            (TypeError("x"), ErrorCategory.VALIDATION),
            (KeyError("x"), ErrorCategory.LOOKUP),
            (RuntimeError("x"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, error, expected):
        assert categorize_error(error) == expected
