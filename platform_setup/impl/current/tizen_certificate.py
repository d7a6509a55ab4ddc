"""Tizen author certificate generation through the Tizen Studio CLI."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence

from platform_setup.framework.context import OrchestrationContext
from platform_setup.framework.errors import CollaboratorError

TIZEN_CLI_ENV_VAR = "TIZEN_CLI_PATH"
TIZEN_CLI_NAME = "tizen"

DEFAULT_AUTHOR = "rnv"
DEFAULT_PASSWORD = "1234"
DEFAULT_TIMEOUT_S = 120.0


def resolve_tizen_cli(explicit_path: str | None = None) -> str:
    """Find the `tizen` executable: explicit path, then $TIZEN_CLI_PATH, then PATH."""

    for candidate in (explicit_path, os.environ.get(TIZEN_CLI_ENV_VAR)):
        if candidate and candidate.strip():
            candidate = os.path.expanduser(candidate.strip())
            if not os.path.isfile(candidate):
                raise CollaboratorError(f"Tizen CLI not found at {candidate}")
            return candidate

    found = shutil.which(TIZEN_CLI_NAME)
    if not found:
        raise CollaboratorError(
            f"Tizen CLI not found on PATH; install Tizen Studio or set {TIZEN_CLI_ENV_VAR}"
        )
    return found


class TizenCertificateGenerator:
    """Creates `<dir>/<name>.p12` by running `tizen certificate`."""

    def __init__(
        self,
        *,
        cli_path: str | None = None,
        author: str = DEFAULT_AUTHOR,
        password: str = DEFAULT_PASSWORD,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        logger: logging.Logger | None = None,
    ) -> None:
        self._cli_path = cli_path
        self._author = author
        self._password = password
        self._timeout_s = timeout_s
        self._logger = logger or logging.getLogger(__name__)

    def command(self, target_path: str) -> list[str]:
        target_dir = os.path.dirname(os.path.abspath(target_path))
        name, _ext = os.path.splitext(os.path.basename(target_path))
        return [
            resolve_tizen_cli(self._cli_path),
            "certificate",
            "--",
            target_dir,
            "-a",
            self._author,
            "-f",
            name,
            "-p",
            self._password,
        ]

    def generate(self, context: OrchestrationContext, target_path: str) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(target_path)), exist_ok=True)
        cmd = self.command(target_path)
        self._logger.info("Running %s", _render(cmd))
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_s,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CollaboratorError(
                f"tizen certificate timed out after {self._timeout_s:g}s"
            ) from exc
        except OSError as exc:
            raise CollaboratorError(f"Failed to run tizen certificate: {exc}") from exc

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise CollaboratorError(
                f"tizen certificate failed (exit={completed.returncode}): {detail or '<no output>'}"
            )
        if not os.path.isfile(target_path):
            raise CollaboratorError(f"tizen certificate succeeded but {target_path} was not created")
        self._logger.info("Created Tizen author certificate at %s", target_path)


def _render(cmd: Sequence[str]) -> str:
    return " ".join(cmd)
