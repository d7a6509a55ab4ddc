import ast
from pathlib import Path


def _offending_imports(directory: Path, forbidden_prefixes: tuple[str, ...]) -> list[str]:
    offenders: list[str] = []
    for path in sorted(directory.rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name.startswith(forbidden_prefixes):
                        offenders.append(f"{path}: import {alias.name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module is None:
                    continue
                if node.module.startswith(forbidden_prefixes):
                    offenders.append(f"{path}: from {node.module} import ...")
    return offenders


def test_foundation_does_not_import_framework_or_impl():
    repo_root = Path(__file__).resolve().parents[1]
    forbidden = ("platform_setup.framework", "platform_setup.impl", "platform_setup.stages", "pipelinekit")

    assert _offending_imports(repo_root / "platform_setup" / "foundation", forbidden) == []


def test_framework_source_does_not_import_stages_or_impl():
    repo_root = Path(__file__).resolve().parents[1]
    forbidden = ("platform_setup.impl", "platform_setup.stages", "platform_setup.app")

    assert _offending_imports(repo_root / "platform_setup" / "framework", forbidden) == []


def test_stages_source_does_not_import_impl():
    repo_root = Path(__file__).resolve().parents[1]
    forbidden = ("platform_setup.impl", "platform_setup.app")

    assert _offending_imports(repo_root / "platform_setup" / "stages", forbidden) == []
