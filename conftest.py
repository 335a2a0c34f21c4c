"""Root conftest: test environment is fixed before any itas_realtime import.

``.env.test`` values are loaded first, and the credential file is pointed at a
throwaway location so a developer's real session is never read.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

os.environ.setdefault(
    "ITAS_CREDENTIALS_PATH",
    str(Path(tempfile.mkdtemp(prefix="itas-test-")) / "credentials.json"),
)
