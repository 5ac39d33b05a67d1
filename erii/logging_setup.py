from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

_OWNED = "_erii_handler"


def setup_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger:
    - stderr: WARNING and up (DEBUG with verbose) so the menu stays readable
    - optional file: everything at DEBUG

    Called once from the CLI entry point.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Only replace handlers added by an earlier call; leave foreign ones alone.
    for h in list(root.handlers):
        if getattr(h, _OWNED, False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logging.DEBUG if verbose else logging.WARNING)
    ch.setFormatter(fmt)
    setattr(ch, _OWNED, True)
    root.addHandler(ch)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        setattr(fh, _OWNED, True)
        root.addHandler(fh)

    logging.captureWarnings(True)
