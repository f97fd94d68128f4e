"""
Write the OpenAPI document of the todo service to interfaces/openapi.json.

API clients and documentation tools can consume the document without a running
server (or a reachable MongoDB: the schema is built without starting the app).

Usage:
    python -m todo_api.generate_openapi [output-path]
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .main import create_app
from .settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path(__file__).resolve().parents[2] / "interfaces" / "openapi.json"


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[Path] = None) -> Path:
    """Generate the OpenAPI schema file and return the written file path."""
    app = create_app(Settings(persistence_backend="memory"))
    schema = app.openapi()

    target = Path(out_path) if out_path is not None else DEFAULT_OUTPUT
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", target)
    return target


def main() -> None:
    generate_openapi(Path(sys.argv[1]) if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
