"""Annotated configuration parameters: UI schemas and JSON views of config objects.

One configuration class is described once; each field that should be shown
to a front end is registered with a :class:`Parameter`.  The schema of the
registered fields, and the values of those fields, can then be rendered as
JSON, read back from JSON, and compared.
"""

from __future__ import annotations

import ast
import dataclasses
import json
import math
import re
import sys
import types
import typing
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Union

INPUT_TEXT = "text"
INPUT_TEXT_AREA = "textarea"
INPUT_PASSWORD = "password"

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_INT_KEY_RE = re.compile(r"[+-]?[0-9]+")
_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    '"': '\\"',
    "\\": "\\\\",
}

# Names that string annotations may use without the class being registered.
_BASE_NAMES: dict[str, Any] = {
    "int": int,
    "float": float,
    "str": str,
    "bool": bool,
    "list": list,
    "dict": dict,
    "tuple": tuple,
    "None": type(None),
    "Any": Any,
    "Optional": typing.Optional,
    "Union": Union,
    "List": typing.List,
    "Dict": typing.Dict,
    "ClassVar": typing.ClassVar,
}


@dataclass
class Range:
    min: float
    max: float
    step: float


@dataclass
class Candidate:
    value: str
    label_en: str = ""
    label_zh: str = ""


@dataclass
class Parameter:
    """How a front end should present one configuration field.

    Empty strings mean "use the default": ``visible`` and ``editable`` default
    to ``"true"``; ``required`` defaults to ``"false"`` for optional fields
    and ``"true"`` otherwise.
    """

    label_en: str = ""
    label_zh: str = ""
    description_en: str = ""
    description_zh: str = ""
    visible: str = ""
    required: str = ""
    input_type: str = ""
    filter: str = ""
    candidates: list[Candidate] = field(default_factory=list)
    default: str = ""
    regexp: str = ""
    range: Range | None = None
    editable: str = ""


def _type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _as_class(value: Any) -> type:
    return value if isinstance(value, type) else type(value)


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is getattr(types, "UnionType", None)


def _unwrap_optional(tp: Any) -> tuple[bool, Any]:
    """Return (is_optional, inner type) for ``X | None`` annotations."""
    if _is_union(typing.get_origin(tp)):
        args = typing.get_args(tp)
        rest = [arg for arg in args if arg is not type(None)]
        if len(rest) == 1 and len(args) == 2:
            return True, rest[0]
        raise TypeError(f"Cannot use {tp!r} as a parameter, unsupported union")
    return False, tp


def _namespace(owner: type, known: dict[str, type]) -> dict[str, Any]:
    namespace: dict[str, Any] = dict(_BASE_NAMES)
    namespace.update(known)
    namespace[owner.__name__] = owner
    namespace[owner.__qualname__] = owner
    return namespace


def _lookup(name: str, namespace: dict[str, Any]) -> Any:
    try:
        return namespace[name]
    except KeyError:
        raise TypeError(f"Cannot resolve annotation name {name!r}") from None


def _resolve_node(node: ast.AST, namespace: dict[str, Any]) -> Any:
    if isinstance(node, ast.Constant):
        if node.value is None:
            return type(None)
        if isinstance(node.value, str):
            return _resolve_node(ast.parse(node.value, mode="eval").body, namespace)
        raise TypeError(f"Unsupported annotation constant {node.value!r}")
    if isinstance(node, ast.Name):
        return _lookup(node.id, namespace)
    if isinstance(node, ast.Attribute):
        return _lookup(node.attr, namespace)
    if isinstance(node, ast.Subscript):
        base = _resolve_node(node.value, namespace)
        if isinstance(node.slice, ast.Tuple):
            args = tuple(_resolve_node(elt, namespace) for elt in node.slice.elts)
            return base[args]
        return base[_resolve_node(node.slice, namespace)]
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        left = _resolve_node(node.left, namespace)
        right = _resolve_node(node.right, namespace)
        return Union[left, right]
    raise TypeError(f"Unsupported annotation {ast.dump(node)}")


def _resolve(annotation: Any, owner: type, known: dict[str, type]) -> Any:
    """Turn a string annotation into the type it names."""
    if not isinstance(annotation, str):
        return annotation
    tree = ast.parse(annotation, mode="eval")
    return _resolve_node(tree.body, _namespace(owner, known))


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        text = annotation.strip()
        return text.startswith("ClassVar") or text.startswith("typing.ClassVar")
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def _own_annotations(klass: type) -> dict[str, Any]:
    """Annotations declared on ``klass`` itself, not inherited ones."""
    annotations = klass.__dict__.get("__annotations__", {})
    return dict(annotations) if isinstance(annotations, dict) else {}


def _annotations(cls: type) -> dict[str, tuple[Any, type]]:
    collected: dict[str, tuple[Any, type]] = {}
    for klass in reversed(cls.__mro__):
        for name, ann in _own_annotations(klass).items():
            collected[name] = (ann, klass)
    return {name: item for name, item in collected.items() if not _is_classvar(item[0])}


def _field_names(cls: type) -> list[str]:
    if dataclasses.is_dataclass(cls):
        return [f.name for f in dataclasses.fields(cls)]
    return list(_annotations(cls))


def _owner(cls: type, name: str) -> type:
    for klass in cls.__mro__:
        if name in _own_annotations(klass):
            return klass
    return cls


def _field_hints(cls: type, known: dict[str, type]) -> list[tuple[str, Any]]:
    if dataclasses.is_dataclass(cls):
        return [
            (f.name, _resolve(f.type, _owner(cls, f.name), known))
            for f in dataclasses.fields(cls)
        ]
    return [
        (name, _resolve(ann, klass, known))
        for name, (ann, klass) in _annotations(cls).items()
    ]


def _quote(text: str) -> str:
    """Double-quote ``text`` with backslash escapes for unprintable characters."""
    out = ['"']
    for char in text:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif char.isprintable():
            out.append(char)
        else:
            code = ord(char)
            if code < 0x20 or code == 0x7F:
                out.append(f"\\x{code:02x}")
            elif 0xD800 <= code <= 0xDFFF:
                out.append("\\ufffd")
            elif code < 0x10000:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def _nullable(text: str) -> str:
    return "null" if text == "" else _quote(text)


def _format_float(value: float) -> str:
    """Shortest representation, switching to exponent form outside [1e-4, 1e6)."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    count = len(digits)
    point = count + exponent
    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        return f"{sign}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= count:
        return sign + digits + "0" * (point - count)
    return f"{sign}{digits[:point]}.{digits[point:]}"


def _format_e3(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return f"{value:.3e}"


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def _get_type(tp: Any) -> tuple[str, type | None]:
    """Schema type name of ``tp`` and the struct class it contains, if any."""
    _, tp = _unwrap_optional(tp)
    if tp is bool:
        return "bool", None
    if tp is int:
        return "int", None
    if tp is float:
        return "float", None
    if tp is str:
        return "string", None
    origin = typing.get_origin(tp)
    if origin is dict or tp is dict:
        args = typing.get_args(tp)
        if len(args) != 2 or args[1] is not str:
            raise TypeError(f"Type {tp!r} is map-struct, unsupported")
        return "map", None
    if origin is list or tp is list:
        args = typing.get_args(tp)
        if not args:
            raise TypeError(f"Cannot use {tp!r} as a parameter, list element type unknown")
        inner, struct_cls = _get_type(args[0])
        return f"list-{inner}", struct_cls
    if isinstance(tp, type):
        return "struct", tp
    raise TypeError(f"Cannot use {tp!r} as a parameter, unsupported kind")


def _zero(tp: Any, known: dict[str, type]) -> Any:
    optional, base = _unwrap_optional(tp)
    if optional:
        return None
    if base is bool:
        return False
    if base is int:
        return 0
    if base is float:
        return 0.0
    if base is str:
        return ""
    if typing.get_origin(base) in (list, dict) or base in (list, dict):
        return None
    if isinstance(base, type):
        return _new_struct(base, known)
    return None


def _new_struct(cls: type, known: dict[str, type]) -> Any:
    if dataclasses.is_dataclass(cls):
        hints = dict(_field_hints(cls, known))
        kwargs = {
            f.name: _zero(hints.get(f.name, f.type), known)
            for f in dataclasses.fields(cls)
            if f.init
        }
        return cls(**kwargs)
    return cls()


def _no_fields(cls: type) -> ValueError:
    return ValueError(f"Type {_type_name(cls)} has no fields registered as a parameter")


class ConfigParams(dict):
    """Registry of :class:`Parameter` objects keyed by ``module.Class.field``."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._types: dict[str, type] = {}

    def _key(self, cls: type, name: str) -> str:
        return f"{_type_name(cls)}.{name}"

    def _registered(self, cls: type) -> list[tuple[str, Any]]:
        names = [name for name in _field_names(cls) if self._key(cls, name) in self]
        if not names:
            return []
        hints = dict(_field_hints(cls, self._types))
        return [(name, hints[name]) for name in names]

    def must_register(self, cls: Any, field: str, param: Parameter) -> None:
        """Attach ``param`` to ``field`` of ``cls``; raise if there is no such field."""
        cls = _as_class(cls)
        if field not in _field_names(cls):
            raise ValueError(f"{_type_name(cls)} has no field named {field}")
        self._types[cls.__name__] = cls
        self._types[cls.__qualname__] = cls
        self[self._key(cls, field)] = param

    # -- schema -----------------------------------------------------------

    def marshal_schema(self, cls: Any) -> str:
        """JSON schema of the registered fields of ``cls``."""
        return self._schema_struct(_as_class(cls))

    def _schema_struct(self, cls: type) -> str:
        parts = [
            f"{_quote(name)}: {self._schema_field(hint, self[self._key(cls, name)])}"
            for name, hint in self._registered(cls)
        ]
        if not parts:
            raise _no_fields(cls)
        return "{" + ", ".join(parts) + "}"

    def _schema_field(self, hint: Any, param: Parameter) -> str:
        optional, base = _unwrap_optional(hint)
        required = param.required or ("false" if optional else "true")
        parts = [
            f'"label_en": {_nullable(param.label_en)}',
            f'"label_zh": {_nullable(param.label_zh)}',
            f'"description_en": {_nullable(param.description_en)}',
            f'"description_zh": {_nullable(param.description_zh)}',
            f'"visiable": {_nullable(param.visible or "true")}',
            f'"required": {_nullable(required)}',
            f'"editable": {_nullable(param.editable or "true")}',
        ]
        str_type, struct_cls = _get_type(base)
        parts.append(f'"type": {_nullable(str_type)}')
        if str_type in ("string", "int", "float"):
            parts.append(f'"input_type": {_nullable(param.input_type or INPUT_TEXT)}')
            if not param.candidates:
                parts.append('"candidates": null')
            else:
                entries = []
                for index, cand in enumerate(param.candidates):
                    if cand.value == "":
                        raise ValueError(
                            f"Type {base!r} candidate {index} value shall not be empty"
                        )
                    entries.append(
                        f'{{"label_en": {_nullable(cand.label_en)}, '
                        f'"label_zh": {_nullable(cand.label_zh)}, '
                        f'"value": {_nullable(cand.value)}}}'
                    )
                parts.append(f'"candidates": [{", ".join(entries)}]')
                parts.append(f'"filter": {_nullable(param.filter)}')
            parts.append(f'"default": {_nullable(param.default)}')
            if str_type == "string":
                parts.append(f'"regexp": {_nullable(param.regexp)}')
            else:
                rng = param.range
                if rng is None and base is float:
                    rng = Range(-sys.float_info.max, sys.float_info.max, 1)
                if rng is not None:
                    parts.append(
                        f'"range": {{"min": {_format_float(rng.min)}, '
                        f'"max": {_format_float(rng.max)}, '
                        f'"step": {_format_float(rng.step)}}}'
                    )
        elif struct_cls is not None:
            parts.append(f'"struct": {self._schema_struct(struct_cls)}')
        return "{" + ", ".join(parts) + "}"

    # -- values -----------------------------------------------------------

    def marshal_config(self, obj: Any) -> str:
        """JSON text holding the registered fields of ``obj``."""
        return self._encode_struct(obj)

    def _encode_struct(self, obj: Any) -> str:
        cls = type(obj)
        parts = [
            f"{_quote(name)}: {self._encode(getattr(obj, name, None))}"
            for name, _ in self._registered(cls)
        ]
        if not parts:
            raise _no_fields(cls)
        return "{" + ", ".join(parts) + "}"

    def _encode(self, value: Any) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return _format_e3(value)
        if isinstance(value, str):
            return _quote(value)
        if isinstance(value, (list, tuple)):
            return "[" + ", ".join(self._encode(item) for item in value) + "]"
        if isinstance(value, dict):
            items = (f"{_quote(str(k))}: {self._encode(v)}" for k, v in value.items())
            return "{" + ", ".join(items) + "}"
        return self._encode_struct(value)

    def unmarshal_config(self, data: str, obj: Any) -> None:
        """Set the registered fields of ``obj`` from JSON text, in place."""
        raw = json.loads(data)
        self._decode_struct(type(obj), raw, obj)

    def _decode_struct(self, cls: type, raw: Any, target: Any) -> Any:
        fields = self._registered(cls)
        if not fields:
            raise _no_fields(cls)
        for name, hint in fields:
            item = raw.get(name) if isinstance(raw, dict) else None
            setattr(target, name, self._decode(hint, item, getattr(target, name, None)))
        return target

    def _decode(self, tp: Any, raw: Any, current: Any) -> Any:
        optional, base = _unwrap_optional(tp)
        origin = typing.get_origin(base)
        if raw is None:
            if optional or origin in (list, dict) or base in (list, dict):
                return None
            return current
        if base is bool:
            if isinstance(raw, bool):
                return raw
            raise ValueError("unmarshal error: expected a boolean")
        if base is int:
            if isinstance(raw, int) and not isinstance(raw, bool):
                if not _INT64_MIN <= raw <= _INT64_MAX:
                    raise ValueError(f"unmarshal error: {raw} out of range")
                return raw
            raise ValueError("unmarshal error: expected an integer")
        if base is float:
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                return float(raw)
            raise ValueError("unmarshal error: expected a number")
        if base is str:
            if isinstance(raw, str):
                return raw
            raise ValueError("unmarshal error: expected a string")
        if origin is list or base is list:
            args = typing.get_args(base)
            if not args:
                raise TypeError(f"Cannot use {base!r} as a parameter, list element type unknown")
            if not isinstance(raw, list):
                raise ValueError("unmarshal error: expected an array")
            elem = args[0]
            return [self._decode(elem, item, _zero(elem, self._types)) for item in raw]
        if origin is dict or base is dict:
            args = typing.get_args(base)
            if len(args) != 2:
                raise TypeError(f"Cannot use {base!r} as a parameter, map types unknown")
            if not isinstance(raw, dict):
                raise ValueError("unmarshal error: expected an object")
            key_type, value_type = args
            return {
                self._decode_key(key_type, key): self._decode(
                    value_type, value, _zero(value_type, self._types)
                )
                for key, value in raw.items()
            }
        if isinstance(base, type):
            target = current if isinstance(current, base) else _new_struct(base, self._types)
            return self._decode_struct(base, raw, target)
        raise TypeError(f"Cannot use {base!r} as a parameter, unsupported kind")

    @staticmethod
    def _decode_key(key_type: Any, key: str) -> Any:
        if key_type is str:
            return key
        if key_type is int:
            if not _INT_KEY_RE.fullmatch(key):
                raise ValueError(f"unmarshal error: invalid integer key {key!r}")
            number = int(key)
            if not _INT64_MIN <= number <= _INT64_MAX:
                raise ValueError(f"unmarshal error: key {key!r} out of range")
            return number
        raise ValueError(f"unmarshal error: unsupported key type {key_type!r}")

    # -- comparison -------------------------------------------------------

    def compare_config(self, v1: Any, v2: Any) -> tuple[bool, str]:
        """Compare the registered fields; return (equal, first difference)."""
        return self._compare(v1, v2, "")

    def _compare(self, v1: Any, v2: Any, path: str) -> tuple[bool, str]:
        if (v1 is None) != (v2 is None):
            return False, (
                f"json_path {path}, Isvalid differ, "
                f"left {_format_value(v1 is not None)}, right {_format_value(v2 is not None)}"
            )
        if v1 is None:
            return True, ""
        t1, t2 = type(v1), type(v2)
        if t1 is not t2:
            return False, (
                f"json path {path}, left type {_type_name(t1)}, right type {_type_name(t2)}"
            )
        if isinstance(v1, (bool, int, float, str)):
            if v1 != v2:
                return False, (
                    f"json_path {path}, values differ, "
                    f"{_format_value(v1)} != {_format_value(v2)}"
                )
            return True, ""
        if isinstance(v1, (list, tuple)):
            if len(v1) != len(v2):
                return False, f"json_path {path}, list lengths differ, {len(v1)} != {len(v2)}"
            for index, (a, b) in enumerate(zip(v1, v2)):
                equals, diff = self._compare(a, b, f"{path}[{index}]")
                if not equals:
                    return equals, diff
            return True, ""
        if isinstance(v1, dict):
            left = {str(k): v for k, v in v1.items()}
            right = {str(k): v for k, v in v2.items()}
            return self._compare_map(left, right, path)
        names = [name for name in _field_names(t1) if self._key(t1, name) in self]
        left = {name: getattr(v1, name, None) for name in names}
        right = {name: getattr(v2, name, None) for name in names}
        return self._compare_map(left, right, path)

    def _compare_map(self, m1: dict, m2: dict, path: str) -> tuple[bool, str]:
        if len(m1) != len(m2):
            return False, f"json_path {path}, number of elements differ, {len(m1)} != {len(m2)}"
        for name, left in m1.items():
            if name not in m2:
                return False, f"json_path {path}.{name}, left present, right missing"
            equals, diff = self._compare(left, m2[name], f"{path}.{name}")
            if not equals:
                return equals, diff
        return True, ""