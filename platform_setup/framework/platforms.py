"""Platform identifiers and their families.

`PIPELINE_PLATFORM_ORDER` is the fixed order in which platform configurators run.
"""

from __future__ import annotations

from typing import Literal, get_args

Platform = Literal[
    "ios",
    "android",
    "androidtv",
    "androidwear",
    "tizen",
    "tizenwatch",
    "webos",
    "web",
    "macos",
    "windows",
    "kaios",
    "tvos",
]
PlatformFamily = Literal["android", "apple", "tizen", "webos", "web", "electron", "kaios"]

ALL_PLATFORMS: tuple[str, ...] = get_args(Platform)
ALL_FAMILIES: tuple[str, ...] = get_args(PlatformFamily)

PLATFORM_FAMILIES: dict[str, tuple[str, ...]] = {
    "android": ("android", "androidtv", "androidwear"),
    "apple": ("ios", "tvos"),
    "tizen": ("tizen", "tizenwatch"),
    "webos": ("webos",),
    "web": ("web",),
    "electron": ("macos", "windows"),
    "kaios": ("kaios",),
}

PIPELINE_PLATFORM_ORDER: tuple[str, ...] = (
    "android",
    "androidtv",
    "androidwear",
    "tizen",
    "tizenwatch",
    "webos",
    "web",
    "macos",
    "windows",
    "kaios",
    "ios",
    "tvos",
)

_FAMILY_BY_PLATFORM: dict[str, str] = {
    platform: family for family, members in PLATFORM_FAMILIES.items() for platform in members
}


def parse_platform(value: object, path: str = "platform") -> str:
    if not isinstance(value, str):
        raise ValueError(f"Invalid platform for {path}: {value!r}")
    normalized = value.strip().lower()
    if normalized not in _FAMILY_BY_PLATFORM:
        raise ValueError(
            f"Unknown platform for {path}: {value!r} (expected one of: {', '.join(ALL_PLATFORMS)})"
        )
    return normalized


def family_of(platform: str) -> str:
    return _FAMILY_BY_PLATFORM[parse_platform(platform)]
