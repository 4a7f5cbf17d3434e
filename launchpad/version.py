"""
Version helpers for the launchpad package.

- __version__: package version (PEP 440), overridable at build time via
  LAUNCHPAD_VERSION
- version(): __version__ with a local git segment when run from a checkout
  (e.g. '0.1.0+g1a2b3c4.dirty')
- runtime_banner(): one-line banner for logs and `launchpad-dist --version`
"""
from __future__ import annotations

import os
import subprocess
from typing import List, Optional

__version__ = os.getenv("LAUNCHPAD_VERSION", "0.1.0")


def _run_git(args: List[str]) -> Optional[str]:
    """stdout of a git command, or None outside a repo / without git."""
    try:
        out = subprocess.check_output(["git", *args], stderr=subprocess.DEVNULL, timeout=1.0)
    except (OSError, subprocess.SubprocessError):
        return None
    return out.decode("utf-8", "replace").strip()


def version() -> str:
    commit = _run_git(["rev-parse", "--short", "HEAD"])
    if not commit:
        return __version__
    meta = [f"g{commit}"]
    if _run_git(["status", "--porcelain"]):
        meta.append("dirty")
    return f"{__version__}+{'.'.join(meta)}"


def runtime_banner(prefix: str = "launchpad") -> str:
    return f"{prefix} {version()}"


__all__ = ["__version__", "version", "runtime_banner"]
