"""Record Field Engine

Validates the fields of a record (a dataclass or pydantic model instance)
against per-field rule lists and aggregates the failures into ``Errors``.

Fields are located two ways:

- by reference: ``field(refs(user).email, Required)``. ``FieldRef`` is a live
  lens onto one attribute; it matches when its owner *is* the record (or an
  embedded sub-record of it) and its name is a declared field.
- by name: ``named_field("email", Required)``, resolved through the
  options' ``find_field_by_name``.

Embedded sub-records (``base: Annotated[Base, Embedded]``) are searched by
reference resolution, and their field errors are merged into the parent
without an extra nesting level.

Setup faults (unknown field, non-record target, ...) come back as
``InternalError`` and abort the whole call; data failures never do.
"""
from __future__ import annotations

import ast
import dataclasses
from abc import ABC, abstractmethod
from functools import lru_cache
from types import MappingProxyType
from typing import Annotated, Any, Mapping, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from ..errors import (
    Errors,
    InternalError,
    field_not_found_error,
    field_pointer_error,
    is_internal,
    record_reference_error,
)
from ..logging import validation_logger
from .combinators import by
from .context import Context, Options, ensure_context
from .engine import validate_with_context
from .rules import Reference, Rule

log = validation_logger()


class _EmbeddedMarker:
    """``Annotated`` marker for anonymous (embedded) record fields."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Embedded"


Embedded = _EmbeddedMarker()


@dataclasses.dataclass(frozen=True, slots=True)
class RecordField:
    """Metadata of one declared record field."""
    name: str
    type: Any = None
    tags: Mapping[str, str] = dataclasses.field(default_factory=lambda: MappingProxyType({}))
    anonymous: bool = False

    def tag(self, key: str) -> str:
        return self.tags.get(key, "")


# ============================================================================
# Introspection
# ============================================================================

def is_record(value: Any) -> bool:
    """True for dataclass instances and pydantic model instances."""
    if isinstance(value, BaseModel): return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _split_annotated(hint: Any) -> tuple[Any, bool]:
    if isinstance(hint, str):
        return hint, _embedded_in_source(hint)
    if get_origin(hint) is Annotated:
        base, *extras = get_args(hint)
        return base, any(extra is Embedded for extra in extras)
    return hint, False


def _dotted_tail(node: ast.expr) -> str:
    if isinstance(node, ast.Attribute): return node.attr
    if isinstance(node, ast.Name): return node.id
    return ""


def _embedded_in_source(annotation: str) -> bool:
    """Detect ``Annotated[..., Embedded]`` in an annotation that is still a string."""
    try:
        node = ast.parse(annotation, mode="eval").body
    except SyntaxError:
        return False
    if not isinstance(node, ast.Subscript) or _dotted_tail(node.value) != "Annotated":
        return False
    args = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
    return any(_dotted_tail(arg) == "Embedded" for arg in args[1:])


def _dataclass_fields(cls: type) -> tuple[RecordField, ...]:
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # names local to a function cannot be resolved; string annotations
        # are kept and still inspected for the Embedded marker
        hints = {}
    result = []
    for f in dataclasses.fields(cls):
        declared, embedded = _split_annotated(hints.get(f.name, f.type))
        tags = {k: v for k, v in f.metadata.items() if isinstance(k, str) and isinstance(v, str)}
        result.append(RecordField(
            name=f.name,
            type=declared,
            tags=MappingProxyType(tags),
            anonymous=embedded or bool(f.metadata.get("embedded", False)),
        ))
    return tuple(result)


def _model_fields(cls: type[BaseModel]) -> tuple[RecordField, ...]:
    result = []
    for name, info in cls.model_fields.items():
        tags = {}
        if alias := (info.serialization_alias or info.alias):
            tags["json"] = alias
        result.append(RecordField(
            name=name,
            type=info.annotation,
            tags=MappingProxyType(tags),
            anonymous=any(m is Embedded for m in info.metadata),
        ))
    return tuple(result)


@lru_cache(maxsize=None)
def _fields_for_type(cls: type) -> tuple[RecordField, ...]:
    if issubclass(cls, BaseModel): return _model_fields(cls)
    return _dataclass_fields(cls)


def record_fields(record: Any) -> tuple[RecordField, ...]:
    """Declared fields of a record, in declaration order (cached per type)."""
    return _fields_for_type(type(record))


# ============================================================================
# Field references
# ============================================================================

class FieldRef(Reference):
    """Live reference to attribute ``name`` of ``owner``."""

    __slots__ = ("owner", "name")

    def __init__(self, owner: Any, name: str):
        self.owner = owner
        self.name = name

    def deref(self) -> Any: return getattr(self.owner, self.name)

    def set(self, value: Any) -> None: setattr(self.owner, self.name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldRef): return NotImplemented
        return self.owner is other.owner and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.owner), self.name))

    def __repr__(self) -> str:
        return f"FieldRef({type(self.owner).__name__}.{self.name})"


class _RefProxy:
    __slots__ = ("_record",)

    def __init__(self, record: Any):
        object.__setattr__(self, "_record", record)

    def __getattr__(self, name: str) -> FieldRef:
        return FieldRef(self._record, name)


def refs(record: Any) -> Any:
    """Attribute access on the result yields ``FieldRef``s into ``record``.

    ``refs(user).email`` is ``FieldRef(user, "email")``.
    """
    return _RefProxy(record)


def find_field(record: Any, ref: FieldRef) -> RecordField | None:
    """Locate the field ``ref`` points at, searching embedded sub-records."""
    for f in reversed(record_fields(record)):
        if ref.owner is record and ref.name == f.name:
            return f
        if f.anonymous:
            sub = getattr(record, f.name)
            if isinstance(sub, Reference):
                sub = sub.deref()
            if is_record(sub) and (found := find_field(sub, ref)) is not None:
                return found
    return None


def _to_field_name(name: str) -> str:
    if name[0].islower():
        return name[0].upper() + name[1:]
    return name


def default_find_field_by_name(record: Any, name: str) -> tuple[Any, RecordField | None, bool]:
    """Resolve ``name`` among the record's own (non-embedded-searching) fields.

    Tries the name as given, then with its first letter upper-cased.
    Returns ``(FieldRef, RecordField, True)`` or ``(None, None, False)``.
    """
    if not name or name.startswith("_"):
        return None, None, False
    by_name = {f.name: f for f in record_fields(record)}
    for candidate in (name, _to_field_name(name)):
        if (f := by_name.get(candidate)) is not None:
            return FieldRef(record, f.name), f, True
    return None, None, False


def tag_error_key_name(f: RecordField, tag: str) -> str:
    """Error key from tag ``tag`` (``name,options`` form), else the field name."""
    value = f.tag(tag)
    if value and value != "-":
        if name := value.split(",", 1)[0]:
            return name
    return f.name


def default_error_key_name(f: RecordField) -> str:
    return tag_error_key_name(f, "json")


# ============================================================================
# Field locators
# ============================================================================

class FieldRules(ABC):
    """A record field locator bound to a rule list."""

    rules: tuple[Rule, ...]
    validate_container: bool

    @abstractmethod
    def resolve(self, record: Any, index: int, options: Options) -> tuple[RecordField, Any] | None:
        """Locate the field and extract the value to validate.

        Returns None when the locator should be skipped. Raises
        ``InternalError`` when the field cannot be located.
        """


class PointerFieldRules(FieldRules):
    """Locator identifying its field by a ``FieldRef``."""

    __slots__ = ("field_ref", "rules", "validate_container")

    def __init__(self, field_ref: Any, rules: tuple[Rule, ...], validate_container: bool = False):
        self.field_ref = field_ref
        self.rules = rules
        self.validate_container = validate_container

    def resolve(self, record: Any, index: int, options: Options) -> tuple[RecordField, Any]:
        if not isinstance(self.field_ref, FieldRef):
            raise field_pointer_error(index)
        if (f := find_field(record, self.field_ref)) is None:
            raise field_not_found_error(index)
        return f, self.field_ref if self.validate_container else self.field_ref.deref()


class NamedFieldRules(FieldRules):
    """Locator identifying its field by name."""

    __slots__ = ("name", "rules", "validate_container", "_skip_if_not_found")

    def __init__(self, name: str, rules: tuple[Rule, ...], validate_container: bool = False,
                 skip_if_not_found: bool = False):
        self.name = name
        self.rules = rules
        self.validate_container = validate_container
        self._skip_if_not_found = skip_if_not_found

    @property
    def skips_if_not_found(self) -> bool:
        return self._skip_if_not_found

    def skip_if_not_found(self, skip: bool = True) -> NamedFieldRules:
        """Copy of this locator that silently skips an absent field."""
        return NamedFieldRules(self.name, self.rules, self.validate_container, skip)

    def resolve(self, record: Any, index: int, options: Options) -> tuple[RecordField, Any] | None:
        ref, f, found = options.find_field_by_name(record, self.name)
        if not found or f is None:
            if self._skip_if_not_found:
                return None
            raise field_not_found_error(index)
        if isinstance(ref, Reference) and not self.validate_container:
            return f, ref.deref()
        return f, ref


def _nested_record_rule(fields: tuple[FieldRules, ...]) -> Rule:
    return by(lambda ctx, value: validate_record_with_context(ctx, value, *fields))


def field(field_ref: Any, *rules: Rule) -> PointerFieldRules:
    """Rules for the field ``field_ref`` points at (see ``refs``)."""
    return PointerFieldRules(field_ref, tuple(rules))


def field_struct(field_ref: Any, *fields: FieldRules) -> PointerFieldRules:
    """Validate the nested record behind ``field_ref`` with its own locators."""
    return PointerFieldRules(field_ref, (_nested_record_rule(fields),), validate_container=True)


def named_field(name: str, *rules: Rule) -> NamedFieldRules:
    """Rules for the field called ``name``."""
    return NamedFieldRules(name, tuple(rules))


def named_struct_field(name: str, *fields: FieldRules) -> NamedFieldRules:
    """Validate the nested record in field ``name`` with its own locators."""
    return NamedFieldRules(name, (_nested_record_rule(fields),), validate_container=True)


# ============================================================================
# Record validation
# ============================================================================

def _dereference_record(target: Any) -> Any:
    """The record behind ``target``; None when nil; raises on non-records."""
    if isinstance(target, Reference):
        target = target.deref()
    if target is None:
        return None
    if not is_record(target):
        raise record_reference_error()
    return target


def validate_record(record: Any, *fields: FieldRules) -> Exception | None:
    """Validate ``record`` field by field using the background context."""
    return validate_record_with_context(None, record, *fields)


def validate_record_with_context(ctx: Context | None, record: Any, *fields: FieldRules) -> Exception | None:
    """Validate each located field and aggregate failures by error key.

    Every locator runs even after earlier ones fail. An ``InternalError``
    from resolution or from a field's rules is returned immediately.
    """
    ctx = ensure_context(ctx)
    try:
        target = _dereference_record(record)
    except InternalError as e:
        log.warning("validation_setup_fault", target=type(record).__name__, error=str(e))
        return e
    if target is None:
        return None

    options = ctx.get_options()
    errs = Errors()

    for index, rules in enumerate(fields):
        try:
            resolved = rules.resolve(target, index, options)
        except InternalError as e:
            log.warning("validation_setup_fault", record=type(target).__name__, index=index, error=str(e))
            return e
        if resolved is None:
            continue

        f, value = resolved
        if (err := validate_with_context(ctx, value, *rules.rules)) is None:
            continue
        if is_internal(err):
            return err
        if f.anonymous and isinstance(err, Errors):
            errs.update(err)
            continue
        errs[options.error_key_name(f)] = err

    log.debug("record_validated", record=type(target).__name__, fields=len(fields), errors=len(errs))
    return errs.as_error()


def error_field_name(record: Any, field_ref: Any, tag: str = "json") -> str:
    """Key a field's errors would be reported under when using ``tag``.

    Returns "" for a nil record; raises ``InternalError`` on setup faults.
    """
    if (target := _dereference_record(record)) is None:
        return ""
    if not isinstance(field_ref, FieldRef):
        raise field_pointer_error(0)
    if (f := find_field(target, field_ref)) is None:
        raise field_not_found_error(0)
    return tag_error_key_name(f, tag)
