"""Boundary check: keep backend and the medvault engine cleanly separated.

Run from repo root:

    python scripts/check_engine_boundary.py

Rules enforced:

1) In backend/app/**/*.py, the only allowed engine imports are:
   - medvault.api
   - medvault.contracts...

2) In medvault/**/*.py, forbid imports from:
   - backend...
   - fastapi / starlette / uvicorn

This script is intentionally small and dependency-free so it can run in CI.
"""

from __future__ import annotations

import ast
import sys
from dataclasses import dataclass
from pathlib import Path

ENGINE = "medvault"
ALLOWED_BACKEND_IMPORTS = ("medvault.api", "medvault.contracts")
FORBIDDEN_IN_ENGINE = {
    "backend": "Engine must not import backend",
    "fastapi": "Engine must not import fastapi (keep framework adapters in backend/)",
    "starlette": "Engine must not import starlette",
    "uvicorn": "Engine must not import uvicorn",
}


@dataclass(frozen=True)
class Violation:
    file: Path
    lineno: int
    kind: str
    detail: str


def _repo_root() -> Path:
    # This file is <repo_root>/scripts/check_engine_boundary.py
    return Path(__file__).resolve().parents[1]


def _iter_py_files(root: Path) -> list[Path]:
    return [p for p in root.rglob("*.py") if "__pycache__" not in p.parts]


def _is_module(mod: str, prefix: str) -> bool:
    return mod == prefix or mod.startswith(prefix + ".")


def _parse_imports(py_file: Path) -> list[tuple[int, str]]:
    """Return (lineno, module) for each absolute import in ``py_file``."""

    tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    out: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            out.extend((node.lineno or 1, a.name) for a in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module is not None and not node.level:
            out.append((node.lineno or 1, node.module))
    return out


def _scan(root: Path) -> tuple[list[tuple[Path, int, str]], list[Violation]]:
    imports: list[tuple[Path, int, str]] = []
    errors: list[Violation] = []
    for py_file in _iter_py_files(root):
        try:
            imports.extend((py_file, lineno, mod) for lineno, mod in _parse_imports(py_file))
        except SyntaxError as e:
            errors.append(Violation(py_file, int(getattr(e, "lineno", 1) or 1), "syntax", str(e)))
    return imports, errors


def check_backend(repo_root: Path) -> list[Violation]:
    backend_dir = repo_root / "backend" / "app"
    if not backend_dir.exists():
        return []
    imports, violations = _scan(backend_dir)
    for py_file, lineno, mod in imports:
        if _is_module(mod, ENGINE) and not any(_is_module(mod, a) for a in ALLOWED_BACKEND_IMPORTS):
            violations.append(
                Violation(
                    py_file,
                    lineno,
                    "backend->engine",
                    f"Disallowed engine import '{mod}'. Allowed: {', '.join(ALLOWED_BACKEND_IMPORTS)}",
                )
            )
    return violations


def check_engine(repo_root: Path) -> list[Violation]:
    engine_dir = repo_root / ENGINE
    if not engine_dir.exists():
        return []
    imports, violations = _scan(engine_dir)
    for py_file, lineno, mod in imports:
        for prefix, message in FORBIDDEN_IN_ENGINE.items():
            if _is_module(mod, prefix):
                violations.append(Violation(py_file, lineno, f"engine->{prefix}", f"{message} ('{mod}')."))
    return violations


def main() -> int:
    repo_root = _repo_root()
    all_violations = check_backend(repo_root) + check_engine(repo_root)

    if not all_violations:
        print("ENGINE BOUNDARY CHECK: OK")
        return 0

    print("ENGINE BOUNDARY CHECK: FAILED\n")
    for v in sorted(all_violations, key=lambda x: (str(x.file), x.lineno)):
        print(f"- {v.file.relative_to(repo_root)}:{v.lineno} [{v.kind}] {v.detail}")
    print("\nImport the engine through medvault.api and medvault.contracts from backend code.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
