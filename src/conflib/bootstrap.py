"""Startup sequence: load the config, then apply its process-level side effects."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Union

from .config import AppConfig, load_config
from .fs import Filesystem, LocalFs, RcloneDriver
from .log import configure_logging
from .records import RCloneConfig, SystemConfig

log = logging.getLogger(__name__)

UNSET = "UNSET"
BIND_PLATFORM = "linux"


@dataclass(frozen=True)
class Runtime:
    config: AppConfig
    fs: Filesystem = field(default_factory=LocalFs)


def adjust_logging(system: SystemConfig) -> None:
    """Drop debug output unless ``System.Debug`` is on; never raises verbosity."""
    if system.debug:
        return
    if logging.getLogger().getEffectiveLevel() < logging.INFO:
        configure_logging(logging.INFO)


def init_remote_binds(
    rclone: RCloneConfig,
    driver: RcloneDriver,
    platform: Optional[str] = None,
    exists: Callable[[str], bool] = os.path.exists,
) -> Optional[Filesystem]:
    """Build the bind-point filesystem described by the ``RClone`` section.

    Returns ``None`` whenever binding is disabled or cannot be set up; every
    such case only logs a warning. A single malformed entry cancels all
    binds, while an entry whose local path cannot be made absolute is
    skipped on its own.
    """
    platform = platform or sys.platform
    if not platform.startswith(BIND_PLATFORM):
        log.warning("RClone binds are not supported on %s yet", platform)
        return None

    if not rclone.binds or rclone.binds[0] == UNSET:
        return None

    if not exists(rclone.config):
        log.warning("RClone config file not found: %s", rclone.config)
        return None
    driver.set_config_path(rclone.config)

    points: Dict[str, Filesystem] = {"/": LocalFs()}
    for entry in rclone.binds:
        bind = entry.split(":", 1)
        if len(bind) != 2:
            log.warning("RClone bind is malformed, expected 'local:remote': %s", entry)
            return None
        local, remote = bind
        log.info("RClone bind: '%s' -> '%s'", remote, local)
        try:
            target = os.path.abspath(local)
        except OSError as e:
            log.warning("Cannot resolve bind path '%s': %s", local, e)
            continue
        points[target] = driver.new_fs(remote)

    return driver.new_bind_fs(points)


def initialize(
    path: Union[str, os.PathLike],
    driver: Optional[RcloneDriver] = None,
    platform: Optional[str] = None,
) -> Runtime:
    """Run the full startup sequence for the config file at ``path``.

    Raises :class:`~conflib.config.ConfigError` on any fatal problem; the
    caller decides how to exit. Remote bind problems only degrade to the
    plain local filesystem.
    """
    config = load_config(path)
    log.debug("Configuration loaded from %s", config.source_path)

    adjust_logging(config.system)

    bind_fs = init_remote_binds(config.rclone, driver or RcloneDriver(), platform=platform)
    if bind_fs is None:
        return Runtime(config=config)
    return Runtime(config=config, fs=bind_fs)
