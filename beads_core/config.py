"""Configuration for beads-board - data locations and backend selection."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from beads_core.bridge import BdCliStore
from beads_core.store import IssueStore, JsonFileStorage, LocalIssueStore

__all__ = [
    "BACKENDS",
    "BeadsConfig",
    "get_beads_home",
    "load_config",
    "create_store",
    "configure_logging",
]

logger = logging.getLogger(__name__)

BACKENDS = ("local", "bd")


def get_beads_home() -> Path:
    """Get the beads-board home directory (~/.beads-board).

    Can be overridden via BEADS_HOME environment variable.
    This is primarily used for test isolation to prevent tests
    from modifying real user data.
    """
    beads_home = os.environ.get("BEADS_HOME")
    if beads_home:
        return Path(beads_home)
    return Path.home() / ".beads-board"


@dataclass
class BeadsConfig:
    home: Path
    backend: str = "local"
    bd_bin: str = "bd"
    bd_cwd: Optional[Path] = None
    log_level: str = "WARNING"

    @property
    def data_path(self) -> Path:
        """Local store file (<home>/issues.json)."""
        return self.home / "issues.json"

    @property
    def lock_path(self) -> Path:
        return self.home / ".lock"


def load_config(backend: Optional[str] = None) -> BeadsConfig:
    """Build the configuration from the environment.

    Args:
        backend: Backend override (e.g. from a CLI flag); wins over BEADS_BACKEND

    Returns:
        BeadsConfig

    Raises:
        ValueError: If the backend is not one of BACKENDS

    Environment:
        BEADS_HOME, BEADS_BACKEND, BEADS_BD_BIN, BEADS_BD_CWD, BEADS_LOG_LEVEL
    """
    backend = backend or os.environ.get("BEADS_BACKEND") or "local"
    if backend not in BACKENDS:
        raise ValueError(f"Invalid backend: {backend}. Must be one of {BACKENDS}")

    bd_cwd = os.environ.get("BEADS_BD_CWD")

    return BeadsConfig(
        home=get_beads_home(),
        backend=backend,
        bd_bin=os.environ.get("BEADS_BD_BIN") or "bd",
        bd_cwd=Path(bd_cwd) if bd_cwd else None,
        log_level=(os.environ.get("BEADS_LOG_LEVEL") or "WARNING").upper(),
    )


def create_store(config: BeadsConfig) -> IssueStore:
    """Build the IssueStore selected by config.backend."""
    if config.backend == "bd":
        logger.debug("Using bd CLI store (%s)", config.bd_bin)
        return BdCliStore(bd_bin=config.bd_bin, cwd=config.bd_cwd)

    if config.backend == "local":
        logger.debug("Using local store at %s", config.data_path)
        return LocalIssueStore(JsonFileStorage(config.data_path, lock_path=config.lock_path))

    raise ValueError(f"Invalid backend: {config.backend}. Must be one of {BACKENDS}")


def configure_logging(level: str) -> None:
    """Send log records to stderr at the given level name."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
