from __future__ import annotations

from platform_setup.framework.context import OrchestrationContext
from platform_setup.framework.platforms import PLATFORM_FAMILIES, parse_platform


def is_platform_active(context: OrchestrationContext, platform: str) -> bool:
    """Whether `platform` participates in this run.

    Callers treat False as a successful no-op for their step, never as an error.
    """

    return bool(context.enabled_platforms.get(parse_platform(platform), False))


def is_family_active(context: OrchestrationContext, family: str) -> bool:
    members = PLATFORM_FAMILIES.get(family)
    if members is None:
        raise ValueError(f"Unknown platform family: {family!r}")
    return any(is_platform_active(context, platform) for platform in members)


def skipped_result(platform: str) -> dict[str, object]:
    return {"platform": platform, "skipped": True}
