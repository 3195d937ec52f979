"""Incremental writer for indented XML configuration files."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass
class XMLAttr:
    key: str
    value: Any


def _escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("'", "&apos;")
        .replace('"', "&quot;")
    )


def _final(value: Any) -> Any:
    return _escape(value) if isinstance(value, str) else value


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        text = str(int(value))
        return "-0" if text == "0" and math.copysign(1.0, value) < 0 else text
    return repr(value)


def _format(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(item) for item in value) + "]"
    return str(value)


def _attrs_text(attrs: Iterable[XMLAttr] | None) -> str:
    return "".join(f' {attr.key}="{_format(_final(attr.value))}"' for attr in attrs or ())


def convert_mapping(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Turn ``a/b/c`` keys into nested dicts and ``[x,y]`` strings into lists."""
    output: dict[str, Any] = {}
    for key, value in mapping.items():
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                value = stripped[1:-1].split(",")
        parts = key.strip().split("/")
        if len(parts) == 1:
            output[key] = value
            continue
        current = output
        for part in parts[:-1]:
            child = current.setdefault(part, {})
            if not isinstance(child, dict):
                raise TypeError(f"key {part!r} in {key!r} already holds a value")
            current = child
        current[parts[-1]] = value
    return output


def _parse_tags(key: str) -> tuple[str, list[XMLAttr] | None]:
    """Split ``tag[@a='x', @b=2]`` into the tag and its attributes."""
    if "[" not in key:
        return key, None
    index = key.index("[")
    attrs = []
    for item in key[index:].lstrip("[").rstrip("]").split(","):
        pair = item.split("=")
        if len(pair) == 2:
            attrs.append(
                XMLAttr(
                    key=pair[0].strip().removeprefix("@"),
                    value=pair[1].strip("'").strip('"'),
                )
            )
    return key[:index], attrs


@dataclass
class XMLFile:
    """Accumulates XML text in ``context``, indenting four spaces per level."""

    name: str
    context: str = ""
    indent: int = 0

    @property
    def _pad(self) -> str:
        return " " * (self.indent * 4)

    def write(self, tag: str, value: Any) -> None:
        """Append ``<tag>value</tag>``; a ``None`` value writes nothing."""
        value = _final(value)
        if value is None:
            return
        self.context += f"{self._pad}<{tag}>{_format(value)}</{tag}>\n"

    def write_with_attr(self, tag: str, value: Any, attrs: Iterable[XMLAttr] | None) -> None:
        value = _final(value)
        if value is None:
            return
        self.context += f"{self._pad}<{tag}{_attrs_text(attrs)}>{_format(value)}</{tag}>\n"

    def begin(self, tag: str) -> None:
        self.context += f"{self._pad}<{tag}>\n"
        self.indent += 1

    def begin_with_attr(self, tag: str, attrs: Iterable[XMLAttr] | None) -> None:
        self.context += f"{self._pad}<{tag}{_attrs_text(attrs)}>\n"
        self.indent += 1

    def end(self, tag: str) -> None:
        self.indent -= 1
        self.context += f"{self._pad}</{tag}>\n"

    def comment(self, comment: str) -> None:
        self.context += f"{self._pad}<!-- {comment} -->\n"

    def append(self, context: str) -> None:
        self.context += context

    def dump(self) -> None:
        """Write the accumulated text to the file ``name``."""
        if not self.name:
            raise ValueError("xml name is not exist")
        if not self.context:
            raise ValueError(f"xml {self.name} context is empty")
        with open(self.name, "w", encoding="utf-8") as handle:
            handle.write(self.context)

    def _mapping(self, output: Mapping[str, Any]) -> None:
        for key in sorted(output):
            value = output[key]
            tag, attrs = _parse_tags(key)
            if isinstance(value, Mapping):
                self.begin_with_attr(tag, attrs)
                self._mapping(value)
                self.end(tag)
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if isinstance(item, Mapping):
                        self.begin_with_attr(tag, attrs)
                        self._mapping(item)
                        self.end(tag)
                    else:
                        self.write_with_attr(tag, item, attrs)
            else:
                self.write_with_attr(tag, value, attrs)

    def merge(self, mapping: Mapping[str, Any]) -> None:
        """Append elements for a flat ``path/to/tag`` mapping, keys in sorted order."""
        self._mapping(convert_mapping(mapping))