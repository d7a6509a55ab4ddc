import json

from platform_setup import cli


def _write_settings(project, logs_dir):
    (project / "config").mkdir(exist_ok=True)
    (project / "config" / "config.yaml").write_text(
        "\n".join(
            [
                "project:",
                "  app_config: myApp",
                "paths:",
                f"  global_config: '{(project / '.rnv').as_posix()}'",
                "logging:",
                f"  log_dir: '{logs_dir.as_posix()}'",
                "  level: WARNING",
                "",
            ]
        ),
        encoding="utf-8",
    )


def test_cli_list_stages_smoke(capsys):
    rc = cli.main(["list-stages"])
    assert rc == 0

    out = capsys.readouterr().out
    assert "bootstrap.credentials" in out
    assert "platforms.gradle" in out


def test_cli_list_app_configs(project, tmp_path, capsys):
    _write_settings(project, tmp_path / "logs")

    rc = cli.main(["list", "--project-root", str(project)])

    assert rc == 0
    assert capsys.readouterr().out.split() == ["helloWorld", "myApp"]


def test_cli_info_shows_active_platforms(project, tmp_path, capsys):
    _write_settings(project, tmp_path / "logs")

    rc = cli.main(["info", "--project-root", str(project)])

    assert rc == 0
    out = capsys.readouterr().out
    assert "app_id\tcom.example.app" in out
    assert "active_platforms\tandroid, web" in out


def test_cli_configure_smoke(project, tmp_path, capsys):
    logs_dir = tmp_path / "logs"
    _write_settings(project, logs_dir)

    rc = cli.main(["configure", "--project-root", str(project)])

    assert rc == 0
    assert "configured: android, web" in capsys.readouterr().out

    manifest = json.loads(
        (project / "platformBuilds" / "com.example.app_android" / "platform.json").read_text(encoding="utf-8")
    )
    assert manifest["platform"] == "android"
    assert (project / "platformAssets" / "runtime" / "logo.png").exists()
    assert (project / "platformAssets" / "config.json").exists()

    summaries = sorted(logs_dir.glob("*_summary.json"))
    oplogs = sorted(logs_dir.glob("*_oplog.log"))
    assert len(summaries) == 1
    assert len(oplogs) == 1
    summary = json.loads(summaries[0].read_text(encoding="utf-8"))
    assert summary["state"] == "DONE"
    assert summary["context"]["active_platforms"] == ["android", "web"]
    assert summary["nested"][0]["state"] == "DONE"


def test_cli_configure_failure_reports_error_and_exits_1(project, tmp_path, capsys):
    logs_dir = tmp_path / "logs"
    _write_settings(project, logs_dir)
    (project / "platformBuilds").mkdir()
    (project / "platformTemplates" / "web" / "README.txt").unlink()
    (project / "platformTemplates" / "web").rmdir()

    rc = cli.main(["configure", "--project-root", str(project)])

    assert rc == 1
    err = capsys.readouterr().err
    assert "error: Platform template not found" in err
    assert "failed stage: web/action" in err

    summary = json.loads(next(logs_dir.glob("*_summary.json")).read_text(encoding="utf-8"))
    assert summary["state"] == "FAILED"
    assert summary["error"]["type"] == "MissingPrerequisiteError"


def test_cli_list_stages_filtered_by_tag(capsys):
    rc = cli.main(["list-stages", "--tag", "platforms"])
    assert rc == 0

    stage_ids = [line.split("\t", 1)[0] for line in capsys.readouterr().out.splitlines()]
    assert stage_ids == [
        "platforms.electron",
        "platforms.gradle",
        "platforms.kaios",
        "platforms.tizen",
        "platforms.web",
        "platforms.webos",
        "platforms.xcode",
    ]


def test_cli_configure_failure_inside_bootstrap_run_names_the_nested_stage(project, tmp_path, capsys):
    _write_settings(project, tmp_path / "logs")
    (project / "platformTemplates" / "web" / "README.txt").unlink()
    (project / "platformTemplates" / "web").rmdir()

    rc = cli.main(["configure", "--project-root", str(project)])

    assert rc == 1
    err = capsys.readouterr().err
    assert "failed stage: scaffold/action/bootstrap/web/action" in err


def test_cli_invalid_settings_yaml_reports_error_and_exits_1(project, tmp_path, capsys):
    bad = tmp_path / "bad.yaml"
    bad.write_text("project: [myApp\n", encoding="utf-8")

    rc = cli.main(["info", "--project-root", str(project), "--config", str(bad)])

    assert rc == 1
    assert "error: Invalid YAML" in capsys.readouterr().err


def test_cli_info_with_unknown_app_config_reports_error_and_exits_1(project, tmp_path, capsys):
    _write_settings(project, tmp_path / "logs")

    rc = cli.main(["info", "--project-root", str(project), "--app-config", "nope"])

    assert rc == 1
    assert "error: App config file not found" in capsys.readouterr().err
