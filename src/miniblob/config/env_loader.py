"""Prefix-scoped environment loading for MiniBlob settings.

Only ``{prefix}_*`` variables are collected; everything else in the process
environment is ignored. Sources are layered, later ones winning:

    .env file  ->  OS environment  ->  explicit overrides

A missing .env file is not an error. An empty value in a later layer still
replaces the earlier one, so ``MINIBLOB_JWT_SECRET=`` in the OS environment
clears a secret set in the .env file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

from dotenv import dotenv_values

DEFAULT_PREFIX = "MINIBLOB"


class EnvLoader:
    """Collect ``{prefix}_*`` settings from .env, the OS environment and overrides.

    Example:
        env = EnvLoader(".env").load({"MINIBLOB_PORT": "9000"})
        env["MINIBLOB_PORT"]  # "9000"
    """

    def __init__(self, env_file: Optional[Path | str] = None, prefix: str = DEFAULT_PREFIX) -> None:
        self.env_file = Path(env_file) if env_file else None
        self.prefix = prefix

    @property
    def env_path(self) -> Path:
        """The .env file consulted (./.env unless one was given)"""
        return self.env_file or Path.cwd() / ".env"

    def _scoped(self, items: Iterable[Tuple[str, Optional[str]]]) -> Dict[str, str]:
        marker = f"{self.prefix}_"
        return {k: str(v) for k, v in items if v is not None and k.startswith(marker)}

    def load(self, overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Merge the three sources for this loader's prefix."""
        data: Dict[str, str] = {}
        if self.env_path.is_file():
            data.update(self._scoped(dotenv_values(self.env_path).items()))
        data.update(self._scoped(os.environ.items()))
        if overrides:
            data.update(self._scoped(overrides.items()))
        return data


__all__ = ["DEFAULT_PREFIX", "EnvLoader"]
