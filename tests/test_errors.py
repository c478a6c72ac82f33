import pytest

from fieldguard.errors import (
    ErrorCode,
    Errors,
    FieldNotFoundError,
    FieldPointerError,
    InternalError,
    RecordReferenceError,
    ValidationError,
    ErrFieldRequired,
    ErrRequired,
    field_not_found_error,
    internal_error,
    is_internal,
    new_error,
    record_reference_error,
)


class TestValidationError:
    def test_renders_params(self):
        err = new_error("too_short", "must be at least {min} characters", {"min": 3})
        assert str(err) == "must be at least 3 characters"

    def test_missing_param_keeps_template(self):
        err = new_error("too_short", "must be at least {min} characters")
        assert str(err) == "must be at least {min} characters"

    def test_field_required_template(self):
        err = ErrFieldRequired.set_params({"field_name": "email"})
        assert str(err) == "missing required field: email"
        assert err.code == "validation_field_required"

    def test_setters_copy(self):
        changed = ErrRequired.set_message("must be given").set_code("custom")
        assert str(changed) == "must be given"
        assert changed.code == "custom"
        assert str(ErrRequired) == "cannot be blank"
        assert ErrRequired.code == ErrorCode.REQUIRED.value

    def test_set_params_copies_mapping(self):
        params = {"min": 1}
        err = new_error("c", "{min}").set_params(params)
        params["min"] = 2
        assert str(err) == "1"

    def test_equality(self):
        assert new_error("c", "m") == new_error("c", "m")
        assert new_error("c", "m") != new_error("d", "m")

    def test_to_dict(self):
        err = new_error("range", "between {lo} and {hi}", {"lo": 1, "hi": 5})
        assert err.to_dict() == {"code": "range", "message": "between 1 and 5", "params": {"lo": 1, "hi": 5}}
        assert ErrRequired.to_dict() == {"code": "validation_required", "message": "cannot be blank"}

    def test_can_be_raised(self):
        with pytest.raises(ValidationError) as exc_info:
            raise ErrRequired
        assert str(exc_info.value) == "cannot be blank"


class TestErrors:
    def test_sorted_rendering(self):
        errs = Errors({"b": new_error("", "second"), "a": new_error("", "first")})
        assert str(errs) == "a: first; b: second."

    def test_nested_rendering(self):
        errs = Errors({
            "address": Errors({"street": ErrRequired, "city": ErrRequired}),
            "name": ErrRequired,
        })
        assert str(errs) == "address: (city: cannot be blank; street: cannot be blank.); name: cannot be blank."

    def test_plain_exception_values(self):
        errs = Errors({"x": ValueError("bad value")})
        assert str(errs) == "x: bad value."

    def test_empty(self):
        errs = Errors()
        assert str(errs) == ""
        assert len(errs) == 0
        assert errs.as_error() is None
        assert errs.filter() is None

    def test_filter_drops_none(self):
        errs = Errors({"a": None, "b": ErrRequired})
        filtered = errs.filter()
        assert filtered is errs
        assert list(filtered) == ["b"]

    def test_mapping_behaviour(self):
        errs = Errors()
        errs["name"] = ErrRequired
        assert "name" in errs
        assert errs["name"] is ErrRequired
        del errs["name"]
        assert "name" not in errs

    def test_equality_with_dict(self):
        assert Errors({"a": ErrRequired}) == {"a": ErrRequired}
        assert Errors({"a": ErrRequired}) == Errors({"a": ErrRequired})
        assert Errors({"a": ErrRequired}) != Errors({"b": ErrRequired})

    def test_to_dict(self):
        errs = Errors({"a": ErrRequired, "b": Errors({"0": new_error("", "bad")})})
        assert errs.to_dict() == {"a": "cannot be blank", "b": {"0": "bad"}}

    def test_can_be_raised(self):
        with pytest.raises(Errors):
            raise Errors({"a": ErrRequired})


class TestInternalError:
    def test_exposes_cause(self):
        cause = ValueError("boom")
        err = InternalError(cause)
        assert str(err) == "boom"
        assert err.cause is cause
        assert err.internal_error is cause
        assert err.__cause__ is cause
        assert is_internal(err)

    def test_without_cause(self):
        err = InternalError(None)
        assert not is_internal(err)
        assert str(err) == "internal validation error"

    def test_is_internal_on_other_errors(self):
        assert not is_internal(ErrRequired)
        assert not is_internal(Errors({"a": ErrRequired}))
        assert not is_internal(None)

    def test_setup_fault_messages(self):
        assert str(FieldNotFoundError(3)) == "field #3 cannot be found in the record"
        assert str(FieldPointerError(5)) == "field #5 must be specified as a reference"
        assert str(RecordReferenceError()) == "only a record or a reference to a record can be validated"

    def test_builders_wrap_faults(self):
        err = field_not_found_error(2)
        assert isinstance(err.cause, FieldNotFoundError)
        assert err.cause.index == 2
        assert isinstance(record_reference_error().cause, RecordReferenceError)
        cause = KeyError("lookup")
        assert internal_error(cause).cause is cause

    def test_to_dict(self):
        err = field_not_found_error(0)
        assert err.to_dict() == {
            "code": "validation_internal",
            "message": "field #0 cannot be found in the record",
            "cause": "FieldNotFoundError",
        }
