"""
Import boundary tests.

Layering, lowest first:

    seafood_kernel  <-  seafood_engines  <-  seafood_modules
    seafood_config  <-  seafood_modules

1. seafood_kernel/** imports none of engines, config or modules.
2. seafood_engines/** imports only the kernel (no config, no modules).
3. seafood_config/** imports nothing from the other packages.
4. Engines never read the wall clock.

These tests read source code via AST and cannot break anything.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(path: Path) -> list[tuple[int, str]]:
    """(line_number, module) for every import in a file."""
    tree = ast.parse(path.read_text(), filename=str(path))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for path in _python_files(package):
        for lineno, module in _extract_imports(path):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {path.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestLayering:

    def test_packages_present(self):
        for package in ("seafood_kernel", "seafood_engines", "seafood_config", "seafood_modules"):
            assert _python_files(package), f"{package} has no source files"

    def test_kernel_has_no_upward_imports(self):
        violations = _violations(
            "seafood_kernel", ("seafood_engines", "seafood_config", "seafood_modules"),
        )
        assert not violations, (
            "Kernel boundary violation:\n" + "\n".join(violations)
        )

    def test_engines_import_only_kernel(self):
        violations = _violations("seafood_engines", ("seafood_config", "seafood_modules"))
        assert not violations, (
            "Engine boundary violation:\n" + "\n".join(violations)
        )

    def test_config_is_standalone(self):
        violations = _violations(
            "seafood_config", ("seafood_kernel", "seafood_engines", "seafood_modules"),
        )
        assert not violations, (
            "Config boundary violation:\n" + "\n".join(violations)
        )


class TestEnginePurity:

    def test_engines_do_not_read_wall_clock(self):
        offenders = [
            str(path.relative_to(ROOT))
            for path in _python_files("seafood_engines")
            if "datetime.now" in path.read_text() or "date.today" in path.read_text()
        ]
        assert not offenders, f"Engines must not read the wall clock: {offenders}"

    def test_engines_do_not_open_sessions(self):
        violations = _violations("seafood_engines", ("sqlalchemy",))
        assert not violations, (
            "Engines must stay free of persistence:\n" + "\n".join(violations)
        )
