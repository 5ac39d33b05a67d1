from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


def default_db_path() -> Path:
    """
    Default per-user task database:
      ~/.erii/erii.db

    Override with ERII_DB env var or --db CLI option.
    """
    env = os.getenv("ERII_DB")
    if env:
        return Path(env).expanduser().resolve()

    return (Path.home() / ".erii" / "erii.db").resolve()


def default_log_path() -> Optional[Path]:
    """Debug log file from ERII_LOG; None disables file logging."""
    env = os.getenv("ERII_LOG")
    if env:
        return Path(env).expanduser().resolve()
    return None
