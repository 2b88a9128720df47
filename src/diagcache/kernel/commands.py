"""External tool resolution with a run-scoped cache.

find_command locates a tool executable from document attributes or PATH and
memoizes the outcome (including a negative outcome) in a CommandConfig that
lives for one processing run.
"""

from __future__ import annotations

import os
import shutil
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from loguru import logger

from diagcache.errors import MissingExecutable

AttrLookup = Callable[..., Any]
WhichFunc = Callable[..., Optional[str]]

CACHE_KEY_PREFIX = "cmd-"


def which(cmd: str, path: Optional[str] = None) -> Optional[str]:
    """Locate an executable on a PATH-style search path.

    Args:
        cmd: Executable name (PATHEXT is honoured on Windows)
        path: os.pathsep-separated directories, or None for $PATH

    Returns:
        Absolute path of the first match, or None
    """
    found = shutil.which(cmd, path=path)
    return os.path.abspath(found) if found else None


def is_executable(path: Optional[str]) -> bool:
    return bool(path) and os.path.isfile(path) and os.access(path, os.X_OK)


class CommandConfig:
    """Run-scoped cache of resolved command paths.

    Maps 'cmd-<attribute>' keys to a resolved path or None (a cached miss).
    The lock serializes the check-then-store sequence in find_command when
    several diagrams are processed concurrently.
    """

    def __init__(self, entries: Optional[Dict[str, Optional[str]]] = None):
        self._entries: Dict[str, Optional[str]] = dict(entries or {})
        self.lock = threading.RLock()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> Optional[str]:
        return self._entries[key]

    def __setitem__(self, key: str, value: Optional[str]) -> None:
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get(key, default)

    def clear(self) -> None:
        with self.lock:
            self._entries.clear()

    def __repr__(self) -> str:
        return f"CommandConfig({self._entries!r})"


def cache_key(attr_names: Sequence[str]) -> str:
    """Cache key derived from the primary (first) attribute name only."""
    return CACHE_KEY_PREFIX + attr_names[0]


def find_command(
    cmd: str,
    config: CommandConfig,
    attr: AttrLookup,
    attrs: Optional[Sequence[str]] = None,
    alt_attrs: Sequence[str] = (),
    alt_cmds: Sequence[str] = (),
    path: Optional[str] = None,
    raise_on_error: bool = True,
    which_func: Optional[WhichFunc] = None,
) -> Optional[str]:
    """Resolve the executable for an external tool.

    Resolution order: cached entry, first non-null attribute naming an
    executable file, then a PATH search over cmd followed by alt_cmds. The
    outcome is cached under 'cmd-<primary attribute>' even when nothing was
    found, so a run never repeats the search. A cached miss is returned as
    None without raising again.

    Args:
        cmd: Canonical tool name
        config: Run-scoped cache
        attr: Attribute lookup callable with signature (name, default, inherit)
        attrs: Attribute names to check; defaults to alt_attrs + [cmd]
        alt_attrs: Attribute names checked before cmd when attrs is not given
        alt_cmds: Alternate executable names searched after cmd
        path: Search path overriding $PATH
        raise_on_error: Raise MissingExecutable instead of returning None
        which_func: PATH lookup, defaults to which()

    Returns:
        Executable path, or None when not found and raise_on_error is False

    Raises:
        MissingExecutable: If nothing was found and raise_on_error is True
    """
    attr_names: List[str] = list(attrs) if attrs else list(alt_attrs) + [cmd]
    cmd_names: List[str] = [cmd] + list(alt_cmds)
    key = cache_key(attr_names)
    search = which_func or which

    with config.lock:
        if key in config:
            cmd_path = config[key]
            logger.debug(f"Command cache hit for {key}: {cmd_path}")
        else:
            cmd_path = next(
                (v for v in (attr(name, None, True) for name in attr_names) if v is not None),
                None,
            )
            if cmd_path is not None and not is_executable(cmd_path):
                logger.debug(f"Attribute value for {cmd} is not executable: {cmd_path}")
                cmd_path = None

            if cmd_path is None:
                for name in cmd_names:
                    cmd_path = search(name, path=path)
                    if cmd_path is not None:
                        break

            config[key] = cmd_path
            if cmd_path is not None:
                logger.info(f"Resolved {cmd} to {cmd_path}")
            else:
                logger.debug(f"Could not resolve {cmd}; caching miss under {key}")
                if raise_on_error:
                    raise MissingExecutable(cmd_names, attr_names[0])

    return cmd_path
