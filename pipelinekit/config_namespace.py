"""Strict, stage-owned option parsing for `pipelinekit` stages."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable

_MISSING = object()


@dataclass
class ConfigNamespace:
    """One stage's options plus a record of which keys the stage has read.

    Builders read every option they understand and then call `assert_consumed()`,
    so a misspelled key fails the build instead of being silently ignored.
    """

    data: Mapping[str, Any]
    path: str
    _consumed: set[str] = field(default_factory=set, init=False, repr=False)

    @classmethod
    def empty(cls, *, path: str) -> "ConfigNamespace":
        return cls({}, path=path)

    def key_path(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def consumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._consumed))

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(key for key in self.data if key not in self._consumed))

    def assert_consumed(self) -> None:
        unknown = self.unconsumed_keys()
        if unknown:
            consumed = ", ".join(self.consumed_keys()) or "<none>"
            raise ValueError(
                f"Unknown config keys under {self.path or '<root>'}: {', '.join(unknown)} "
                f"(consumed: {consumed})"
            )

    def _read(self, key: str, default: Any) -> tuple[str, Any]:
        if not isinstance(key, str) or not key.strip():
            raise TypeError("ConfigNamespace key must be a non-empty string")
        key = key.strip()
        self._consumed.add(key)
        if key in self.data:
            return key, self.data[key]
        if default is _MISSING:
            raise ValueError(f"Missing required config key: {self.key_path(key)}")
        return key, default

    def get_str(
        self,
        key: str,
        *,
        default: str | None | object = _MISSING,
        allow_empty: bool = False,
        choices: Iterable[str] | None = None,
    ) -> str | None:
        key, raw = self._read(key, default)
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise TypeError(f"{self.key_path(key)} must be a string (type={type(raw).__name__})")

        value = raw.strip()
        if not value and not allow_empty:
            raise ValueError(f"{self.key_path(key)} cannot be empty")
        if choices is not None:
            allowed = sorted({str(choice).strip() for choice in choices})
            if value not in allowed:
                raise ValueError(
                    f"{self.key_path(key)} must be one of: {', '.join(allowed)} (got {value!r})"
                )
        return value

    def get_optional_list_str(
        self,
        key: str,
        *,
        default: list[str] | tuple[str, ...] | None | object = _MISSING,
        allow_empty: bool = False,
    ) -> list[str] | None:
        """A list of non-empty strings, or an explicit null."""

        key, raw = self._read(key, default)
        if raw is None:
            return None
        if not isinstance(raw, (list, tuple)):
            raise TypeError(
                f"{self.key_path(key)} must be a list[str] or null (type={type(raw).__name__})"
            )

        items: list[str] = []
        for idx, item in enumerate(raw):
            if not isinstance(item, str):
                raise TypeError(
                    f"{self.key_path(key)}[{idx}] must be a string (type={type(item).__name__})"
                )
            if not item.strip():
                raise ValueError(f"{self.key_path(key)}[{idx}] cannot be empty")
            items.append(item.strip())
        if not items and not allow_empty:
            raise ValueError(f"{self.key_path(key)} cannot be empty")
        return items

    def get_mapping_str(
        self,
        key: str,
        *,
        default: Mapping[str, Any] | object = _MISSING,
    ) -> dict[str, str]:
        """A flat mapping of string keys to scalars, rendered as strings (`true`/`false` for bools)."""

        key, raw = self._read(key, default)
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise TypeError(f"{self.key_path(key)} must be a mapping (type={type(raw).__name__})")

        out: dict[str, str] = {}
        for item_key, item_value in raw.items():
            if not isinstance(item_key, str) or not item_key.strip():
                raise TypeError(f"{self.key_path(key)} keys must be non-empty strings")
            if item_value is None or isinstance(item_value, (Mapping, list, tuple)):
                raise TypeError(
                    f"{self.key_path(key)}.{item_key} must be a scalar "
                    f"(type={type(item_value).__name__})"
                )
            if isinstance(item_value, bool):
                out[item_key.strip()] = "true" if item_value else "false"
            else:
                out[item_key.strip()] = str(item_value)
        return out
