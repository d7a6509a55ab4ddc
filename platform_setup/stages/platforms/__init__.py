from __future__ import annotations

from platform_setup.stages.platforms.android import STAGE as GRADLE
from platform_setup.stages.platforms.apple import STAGE as XCODE
from platform_setup.stages.platforms.electron import STAGE as ELECTRON
from platform_setup.stages.platforms.kaios import STAGE as KAIOS
from platform_setup.stages.platforms.tizen import STAGE as TIZEN
from platform_setup.stages.platforms.web import STAGE as WEB
from platform_setup.stages.platforms.webos import STAGE as WEBOS

__all_stages__ = [
    GRADLE,
    TIZEN,
    WEBOS,
    WEB,
    ELECTRON,
    KAIOS,
    XCODE,
]
