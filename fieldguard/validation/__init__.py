"""Composable Validation Engine

Rules are immutable predicates; the engine applies them to any value and then
follows the value's own structure (self-validating values, collections of
them, references). Records are validated field by field with per-field rule
lists and the failures come back keyed by field.

Usage:
    from fieldguard.validation import (
        Validatable, validate_record_with_context, field, refs, Required,
    )

    @dataclass
    class Signup(Validatable):
        name: str = dataclasses.field(default="", metadata={"json": "name"})
        email: str = ""

        def validate(self, ctx):
            f = refs(self)
            return validate_record_with_context(ctx, self,
                field(f.name, Required),
                field(f.email, Required),
            )

    err = validate(Signup())
    str(err)  # "email: cannot be blank; name: cannot be blank."
"""

from .rules import (
    Rule,
    Validatable,
    Reference,
    Ref,
    SkipRule,
    Skip,
)

from .context import (
    Context,
    Options,
    Option,
    Valuer,
    BACKGROUND,
    default_options,
    build_default_options,
    default_unwrap,
    get_options,
    with_options,
    with_unwrap,
    with_error_key_name,
    with_find_field_by_name,
)

from .engine import (
    ValueShape,
    shape_of,
    validate,
    validate_with_context,
    indirect,
    as_error,
)

from .combinators import (
    InlineRule,
    WhenRule,
    by,
    When,
)

from .records import (
    Embedded,
    RecordField,
    FieldRef,
    FieldRules,
    PointerFieldRules,
    NamedFieldRules,
    refs,
    is_record,
    record_fields,
    find_field,
    field,
    field_struct,
    named_field,
    named_struct_field,
    validate_record,
    validate_record_with_context,
    default_find_field_by_name,
    default_error_key_name,
    tag_error_key_name,
    error_field_name,
)

from .validators import (
    RequiredRule,
    NotNilRule,
    StringRule,
    Required,
    NilOrNotEmpty,
    NotNil,
    ErrNotString,
    string_rule,
    string_rule_with_context,
    is_empty,
    ensure_string,
)

__all__ = [
    # Contracts
    "Rule", "Validatable", "Reference", "Ref", "SkipRule", "Skip",
    # Context / options
    "Context", "Options", "Option", "Valuer", "BACKGROUND", "default_options",
    "build_default_options", "default_unwrap", "get_options", "with_options",
    "with_unwrap", "with_error_key_name", "with_find_field_by_name",
    # Dispatch
    "ValueShape", "shape_of", "validate", "validate_with_context", "indirect", "as_error",
    # Combinators
    "InlineRule", "WhenRule", "by", "When",
    # Records
    "Embedded", "RecordField", "FieldRef", "FieldRules", "PointerFieldRules",
    "NamedFieldRules", "refs", "is_record", "record_fields", "find_field",
    "field", "field_struct", "named_field", "named_struct_field",
    "validate_record", "validate_record_with_context",
    "default_find_field_by_name", "default_error_key_name", "tag_error_key_name",
    "error_field_name",
    # Leaf rules
    "RequiredRule", "NotNilRule", "StringRule", "Required", "NilOrNotEmpty",
    "NotNil", "ErrNotString", "string_rule", "string_rule_with_context",
    "is_empty", "ensure_string",
]
