"""Filesystem handles the rest of the application resolves paths through.

These are thin stand-ins for the remote filesystem driver: they know where a
path lives (local disk or an rclone remote) but do not perform any I/O.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Tuple


class Filesystem(Protocol):
    kind: str

    def locate(self, path: str) -> str: ...


@dataclass(frozen=True)
class LocalFs:
    root: str = "/"
    kind: str = field(default="local", init=False)

    def locate(self, path: str) -> str:
        return posixpath.join(self.root, path.lstrip("/"))


@dataclass(frozen=True)
class RcloneFs:
    target: str
    config_path: Optional[str] = None
    kind: str = field(default="rclone", init=False)

    def locate(self, path: str) -> str:
        rel = path.lstrip("/")
        if not rel:
            return self.target
        if self.target.endswith((":", "/")):
            return self.target + rel
        return f"{self.target}/{rel}"


class BindPathFs:
    """Composite filesystem dispatching each path to its longest bound prefix."""

    kind = "bind"

    def __init__(self, points: Dict[str, Filesystem]):
        self.points: Dict[str, Filesystem] = dict(points)

    def mounts(self) -> Tuple[str, ...]:
        return tuple(sorted(self.points, key=len, reverse=True))

    def resolve(self, path: str) -> Tuple[str, Filesystem, str]:
        """Return ``(mount, handle, path relative to mount)`` for ``path``."""
        norm = posixpath.normpath(posixpath.join("/", path))
        for mount in self.mounts():
            prefix = mount.rstrip("/") + "/"
            if norm == mount or norm.startswith(prefix):
                return mount, self.points[mount], norm[len(mount):].lstrip("/")
        raise KeyError(f"no bind point covers {path!r}")

    def locate(self, path: str) -> str:
        _, handle, rel = self.resolve(path)
        return handle.locate(rel)

    def __repr__(self) -> str:
        return f"BindPathFs({self.points!r})"


class RcloneDriver:
    """Factory for rclone-backed handles sharing one rclone config file."""

    def __init__(self) -> None:
        self.config_path: Optional[str] = None

    def set_config_path(self, path: str) -> None:
        self.config_path = str(path)

    def new_fs(self, target: str) -> RcloneFs:
        return RcloneFs(target=target, config_path=self.config_path)

    def new_bind_fs(self, points: Dict[str, Filesystem]) -> BindPathFs:
        return BindPathFs(points)
