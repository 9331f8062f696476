"""Smoke test: verify the `medvault/` package is importable and wired.

Run from the repository root:

    python scripts/smoke_engine_imports.py

This is intended to fail fast during refactors if imports drift/break.
"""

from __future__ import annotations

import importlib
import subprocess
import sys
from pathlib import Path


def _ensure_repo_root_on_syspath() -> Path:
    """Ensure repo root is on sys.path.

    This allows running the script from any working directory.
    """

    # This file is <repo_root>/scripts/smoke_engine_imports.py
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)
    return repo_root


MODULES = [
    "medvault",
    "medvault.api",
    "medvault.config",
    "medvault.contracts",
    "medvault.contracts.choices",
    "medvault.contracts.events",
    "medvault.contracts.records",
    "medvault.contracts.stats",
    "medvault.core",
    "medvault.core.clock",
    "medvault.core.errors",
    "medvault.core.events",
    "medvault.core.ids",
    "medvault.io",
    "medvault.io.serialization",
    "medvault.io.stores",
    "medvault.io.stores.store",
    "medvault.io.stores.memory_store",
    "medvault.io.stores.filesystem_store",
    "medvault.use_cases",
    "medvault.use_cases.factory",
    "medvault.use_cases.file_service",
    "medvault.use_cases.metadata_tracker",
    "medvault.use_cases.policies",
]


def main() -> int:
    repo_root = _ensure_repo_root_on_syspath()

    # Boundary guard: backend must only import the engine via medvault.api + medvault.contracts.
    chk = subprocess.run(
        [sys.executable, str(repo_root / "scripts" / "check_engine_boundary.py")],
        cwd=str(repo_root),
    )
    if chk.returncode != 0:
        return chk.returncode

    failures: list[tuple[str, BaseException]] = []
    for mod in MODULES:
        try:
            importlib.import_module(mod)
        except BaseException as e:  # noqa: BLE001 - this is a smoke test
            failures.append((mod, e))

    if failures:
        print("ENGINE IMPORT SMOKE TEST: FAILED\n")
        for mod, e in failures:
            print(f"- {mod}: {type(e).__name__}: {e}")
        return 1

    # Guard: importing the engine must not pull in the web stack.
    leaked = sorted(m for m in sys.modules if m.split(".")[0] in ("fastapi", "starlette", "backend"))
    if leaked:
        print("ENGINE IMPORT SMOKE TEST: FAILED\n")
        print("Engine imports unexpectedly loaded: " + ", ".join(leaked))
        return 1

    # One end-to-end pass through an in-memory service.
    from medvault.api import InMemoryEventSink, ManualClock, Settings, build_service

    events = InMemoryEventSink()
    service = build_service(Settings(), clock=ManualClock(step=1), events=events)
    model_id = service.upload_model("smoke", "smoke test model", "detection", "1", b"\x00\x01", "smoke", True)
    service.download_model(model_id, "smoke")
    assert service.get_file_metadata(model_id).access_count == 1, "download was not counted"
    service.delete_file(model_id, "model")
    assert service.get_stats().total == 0, "delete left records behind"
    assert len(events.events) == 3, "expected upload, download and delete events"

    print("ENGINE IMPORT SMOKE TEST: OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
