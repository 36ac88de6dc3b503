"""Sanity check for local dev Python environment."""

from __future__ import annotations

import importlib
import sys

REQUIRED_MODULES = ("uvicorn", "fastapi", "sqlalchemy", "yaml", "click")


def main() -> int:
    print("Python executable:", sys.executable)
    missing = []
    for name in REQUIRED_MODULES:
        try:
            importlib.import_module(name)
        except ImportError as exc:  # pragma: no cover - dev-only script
            print(f"FAILED: {name} import error:", repr(exc))
            missing.append(name)

    if missing:
        return 1

    print("OK: " + ", ".join(REQUIRED_MODULES) + " are installed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
