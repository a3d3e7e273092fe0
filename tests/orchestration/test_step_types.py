"""Tests for StepDescriptor normalization.

Covers every accepted spec shape, the construction failures for malformed
specs, position assignment, the name index and duplicate-name rejection.
"""

import pytest

from worklane.orchestration.exceptions import (
    DuplicateStepNameError,
    StepDefinitionError,
    WorkError,
)
from worklane.orchestration.step_types import (
    StepDescriptor,
    describe_callable,
    normalize_steps,
    step,
)
from worklane.orchestration.work import Work


async def _handler(work):
    return 1


async def _other(work):
    return 2


def _always(work):
    return True


def _never(work):
    return False


# ---------------------------------------------------------------------------
# StepDescriptor.create
# ---------------------------------------------------------------------------


class TestCreate:
    """Each accepted spec shape normalizes to the same descriptor shape."""

    def test_bare_callable(self):
        d = StepDescriptor.create(_handler, 0)
        assert d.handler is _handler
        assert d.name is None
        assert d.enabled is None
        assert d.position == 0

    def test_handler_only_tuple(self):
        d = StepDescriptor.create((_handler,), 3)
        assert d.handler is _handler
        assert d.position == 3

    def test_handler_and_predicate(self):
        d = StepDescriptor.create((_handler, _never), 0)
        assert d.handler is _handler
        assert d.enabled is _never
        assert d.name is None

    def test_name_and_handler(self):
        d = StepDescriptor.create(("fetch", _handler), 0)
        assert d.name == "fetch"
        assert d.handler is _handler
        assert d.enabled is None

    def test_name_handler_predicate(self):
        d = StepDescriptor.create(["fetch", _handler, _always], 1)
        assert d.name == "fetch"
        assert d.enabled is _always

    def test_list_spec_is_not_mutated(self):
        spec = ["fetch", _handler]
        StepDescriptor.create(spec, 0)
        assert spec == ["fetch", _handler]

    def test_existing_descriptor_is_repositioned(self):
        original = StepDescriptor(position=7, handler=_handler, name="x")
        d = StepDescriptor.create(original, 2)
        assert d.position == 2
        assert d.name == "x"
        assert original.position == 7

    def test_descriptor_is_frozen(self):
        d = StepDescriptor.create(_handler, 0)
        with pytest.raises(AttributeError):
            d.position = 5  # type: ignore[misc]


class TestCreateFailures:
    """Malformed specs fail at construction."""

    def test_missing_handler(self):
        with pytest.raises(StepDefinitionError, match="handler required"):
            StepDescriptor.create(("only-a-name",), 0)

    def test_empty_tuple(self):
        with pytest.raises(StepDefinitionError, match="handler required"):
            StepDescriptor.create((), 0)

    def test_non_callable_handler(self):
        with pytest.raises(StepDefinitionError, match="handler required, got int"):
            StepDescriptor.create(("name", 42), 4)

    def test_non_callable_predicate(self):
        with pytest.raises(StepDefinitionError, match="enabled predicate must be callable"):
            StepDescriptor.create((_handler, "yes"), 0)

    def test_trailing_elements(self):
        with pytest.raises(StepDefinitionError, match="unexpected trailing"):
            StepDescriptor.create(("n", _handler, _always, _never), 0)

    def test_unsupported_shape(self):
        with pytest.raises(StepDefinitionError, match="Unsupported step spec"):
            StepDescriptor.create({"handler": _handler}, 0)

    def test_string_alone_is_unsupported(self):
        with pytest.raises(StepDefinitionError):
            StepDescriptor.create("fetch", 0)

    def test_error_carries_position(self):
        with pytest.raises(StepDefinitionError) as exc_info:
            StepDescriptor.create((None,), 5)
        assert exc_info.value.position == 5
        assert exc_info.value.context.position == 5

    def test_is_work_error(self):
        with pytest.raises(WorkError):
            StepDescriptor.create(None, 0)


# ---------------------------------------------------------------------------
# Predicate evaluation and info
# ---------------------------------------------------------------------------


class TestIsEnabled:
    def test_defaults_to_enabled(self):
        d = StepDescriptor.create(_handler, 0)
        assert d.is_enabled(Work(run_id=1)) is True

    def test_predicate_receives_work(self):
        seen = []

        def predicate(work):
            seen.append(work)
            return 0

        work = Work(run_id=1)
        d = StepDescriptor.create((_handler, predicate), 0)
        assert d.is_enabled(work) is False
        assert seen == [work]

    def test_info_uses_qualname(self):
        d = StepDescriptor.create(_handler, 0)
        assert d.info.endswith("_handler")

    def test_describe_callable_falls_back_to_repr(self):
        class Handler:
            def __call__(self, work):
                return None

        h = Handler()
        assert describe_callable(h) == repr(h)


# ---------------------------------------------------------------------------
# normalize_steps
# ---------------------------------------------------------------------------


class TestNormalizeSteps:
    def test_positions_are_contiguous(self):
        descriptors, _ = normalize_steps([_handler, ("a", _other), (_handler, _never)])
        assert [d.position for d in descriptors] == [0, 1, 2]

    def test_name_index_only_contains_named_steps(self):
        _, names = normalize_steps([_handler, ("a", _other), _handler, ("b", _handler)])
        assert names == {"a": 1, "b": 3}

    def test_empty(self):
        assert normalize_steps([]) == ([], {})

    def test_accepts_generator(self):
        descriptors, _ = normalize_steps(h for h in [_handler, _other])
        assert len(descriptors) == 2

    def test_duplicate_names_rejected(self):
        with pytest.raises(DuplicateStepNameError) as exc_info:
            normalize_steps([("a", _handler), ("b", _other), ("a", _other)])
        err = exc_info.value
        assert err.name == "a"
        assert err.first == 0
        assert err.position == 2
        assert isinstance(err, StepDefinitionError)

    def test_first_malformed_spec_reports_its_position(self):
        with pytest.raises(StepDefinitionError) as exc_info:
            normalize_steps([_handler, _other, ("x", "not callable")])
        assert exc_info.value.position == 2


class TestStepHelper:
    def test_handler_only(self):
        assert step(_handler) == (_handler,)

    def test_full(self):
        assert step(_handler, name="a", enabled=_never) == ("a", _handler, _never)

    def test_round_trips_through_create(self):
        d = StepDescriptor.create(step(_handler, enabled=_always), 0)
        assert d.handler is _handler
        assert d.enabled is _always
