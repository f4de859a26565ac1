from __future__ import annotations

import ast
from pathlib import Path

_PACKAGE = Path(__file__).resolve().parents[1] / "src" / "runecache"


def _collect_python_files(directory: Path) -> list[Path]:
    return sorted(path for path in directory.rglob("*.py") if path.is_file())


def _find_forbidden_imports(files: list[Path], forbidden_prefixes: tuple[str, ...]) -> list[str]:
    violations: list[str] = []
    for path in files:
        module = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(module):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name.startswith(forbidden_prefixes):
                        violations.append(f"{path}: import {alias.name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module is None:
                    continue
                if node.module.startswith(forbidden_prefixes):
                    violations.append(f"{path}: from {node.module} import ...")
    return violations


def test_contracts_do_not_import_implementations() -> None:
    files = _collect_python_files(_PACKAGE / "core" / "contracts")
    forbidden = tuple(
        f"runecache.core.{name}" for name in ("cache", "stores", "remote", "visited", "auth", "config")
    )
    violations = _find_forbidden_imports(files, forbidden)
    assert not violations, f"contracts import implementation modules: {violations}"


def test_cache_does_not_import_concrete_backends() -> None:
    files = _collect_python_files(_PACKAGE / "core" / "cache")
    violations = _find_forbidden_imports(files, ("runecache.core.stores", "runecache.core.remote", "httpx"))
    assert not violations, f"cache imports concrete backends: {violations}"


def test_visited_overlay_does_not_touch_persistence() -> None:
    files = _collect_python_files(_PACKAGE / "core" / "visited")
    violations = _find_forbidden_imports(files, ("runecache.core.stores", "sqlalchemy"))
    assert not violations, f"visited overlay imports persistence modules: {violations}"


def test_core_and_sdk_do_not_import_cli_layer() -> None:
    files = _collect_python_files(_PACKAGE / "core") + [_PACKAGE / "sdk.py"]
    violations = _find_forbidden_imports(files, ("runecache.cli", "rich"))
    assert not violations, f"core imports forbidden cli layer modules: {violations}"
