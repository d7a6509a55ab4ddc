from __future__ import annotations

from platform_setup.stages.staging.plugin_overrides import STAGE as PLUGIN_OVERRIDES
from platform_setup.stages.staging.runtime_assets import STAGE as RUNTIME_ASSETS

__all_stages__ = [
    RUNTIME_ASSETS,
    PLUGIN_OVERRIDES,
]
