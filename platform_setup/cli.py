from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--project-root", default=None, help="Project root (default: discovered from cwd)")
    parser.add_argument("--config", dest="config_path", default=None, help="Single YAML settings file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="platform-setup", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    configure = sub.add_parser("configure", help="Configure every enabled platform project")
    _add_settings_arguments(configure)
    configure.add_argument("--app-config", default=None, help="App config id under the app configs folder")

    info = sub.add_parser("info", help="Show resolved paths and active platforms")
    _add_settings_arguments(info)
    info.add_argument("--app-config", default=None, help="App config id under the app configs folder")

    list_cmd = sub.add_parser("list", help="List available app configs")
    _add_settings_arguments(list_cmd)

    stages_cmd = sub.add_parser("list-stages", help="List available stages")
    stages_cmd.add_argument("--tag", default=None, help="Only stages carrying this tag (e.g. platforms)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    if args.command == "list-stages":
        from .app.configure import list_stages

        list_stages(tag=args.tag)
        return 0

    try:
        return _run_command(args)
    except Exception as exc:  # noqa: BLE001
        print(f"error: {exc}", file=sys.stderr)
        path = getattr(exc, "pipeline_path", None)
        if path:
            print(f"failed stage: {path}", file=sys.stderr)
        return 1


def _run_command(args: argparse.Namespace) -> int:
    from .app.configure import list_app_configs, load_settings, run_configure, show_info

    config, warnings, _meta = load_settings(
        project_root=args.project_root, config_path=args.config_path
    )

    if args.command == "list":
        for config_id in list_app_configs(config):
            print(config_id)
        return 0

    if args.command == "info":
        show_info(config, app_config_id=args.app_config)
        return 0

    if args.command == "configure":
        result = run_configure(config, app_config_id=args.app_config, warnings=warnings)
        print(f"configured: {', '.join(result.context.active_platforms()) or '<none>'}")
        return 0

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
