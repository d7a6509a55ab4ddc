import subprocess

import pytest

from platform_setup.framework.context import build_context
from platform_setup.framework.errors import CollaboratorError
from platform_setup.impl.current import tizen_certificate
from platform_setup.impl.current.tizen_certificate import TizenCertificateGenerator, resolve_tizen_cli


def _fake_cli(tmp_path):
    cli = tmp_path / "tizen"
    cli.write_text("#!/bin/sh\n", encoding="utf-8")
    return str(cli)


def test_generate_runs_tizen_certificate_command(tmp_path, project, make_config, monkeypatch):
    cli = _fake_cli(tmp_path)
    target = project / ".rnv" / "tizen_author.p12"
    seen = {}

    def _run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["timeout"] = kwargs.get("timeout")
        target.write_bytes(b"p12")
        return subprocess.CompletedProcess(cmd, 0, stdout="ok", stderr="")

    monkeypatch.setattr(tizen_certificate.subprocess, "run", _run)

    TizenCertificateGenerator(cli_path=cli, timeout_s=5).generate(build_context(make_config()), str(target))

    assert seen["cmd"] == [
        cli,
        "certificate",
        "--",
        str(project / ".rnv"),
        "-a",
        "rnv",
        "-f",
        "tizen_author",
        "-p",
        "1234",
    ]
    assert seen["timeout"] == 5
    assert target.read_bytes() == b"p12"


def test_generate_nonzero_exit_raises_collaborator_error(tmp_path, project, make_config, monkeypatch):
    cli = _fake_cli(tmp_path)
    monkeypatch.setattr(
        tizen_certificate.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 2, stdout="", stderr="bad password"),
    )

    with pytest.raises(CollaboratorError, match=r"exit=2\): bad password"):
        TizenCertificateGenerator(cli_path=cli).generate(
            build_context(make_config()), str(project / ".rnv" / "tizen_author.p12")
        )


def test_generate_timeout_raises_collaborator_error(tmp_path, project, make_config, monkeypatch):
    cli = _fake_cli(tmp_path)

    def _run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(tizen_certificate.subprocess, "run", _run)

    with pytest.raises(CollaboratorError, match=r"timed out"):
        TizenCertificateGenerator(cli_path=cli, timeout_s=1).generate(
            build_context(make_config()), str(project / ".rnv" / "tizen_author.p12")
        )


def test_generate_without_output_file_raises(tmp_path, project, make_config, monkeypatch):
    cli = _fake_cli(tmp_path)
    monkeypatch.setattr(
        tizen_certificate.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, stdout="", stderr=""),
    )

    with pytest.raises(CollaboratorError, match=r"was not created"):
        TizenCertificateGenerator(cli_path=cli).generate(
            build_context(make_config()), str(project / ".rnv" / "tizen_author.p12")
        )


def test_resolve_tizen_cli_prefers_env_var_then_path(tmp_path, monkeypatch):
    cli = _fake_cli(tmp_path)
    monkeypatch.setenv("TIZEN_CLI_PATH", cli)
    assert resolve_tizen_cli() == cli

    monkeypatch.delenv("TIZEN_CLI_PATH")
    monkeypatch.setattr(tizen_certificate.shutil, "which", lambda name: "/usr/bin/tizen")
    assert resolve_tizen_cli() == "/usr/bin/tizen"


def test_resolve_tizen_cli_missing_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TIZEN_CLI_PATH", raising=False)
    monkeypatch.setattr(tizen_certificate.shutil, "which", lambda name: None)

    with pytest.raises(CollaboratorError, match=r"not found on PATH"):
        resolve_tizen_cli()

    with pytest.raises(CollaboratorError, match=r"Tizen CLI not found at"):
        resolve_tizen_cli(str(tmp_path / "missing"))
