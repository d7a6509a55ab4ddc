from __future__ import annotations

from platform_setup.stages.bootstrap.credentials import STAGE as CREDENTIALS
from platform_setup.stages.bootstrap.scaffold import STAGE as SCAFFOLD

__all_stages__ = [
    CREDENTIALS,
    SCAFFOLD,
]
