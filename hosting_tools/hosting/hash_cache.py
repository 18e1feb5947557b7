"""Upload hash cache.

Between deploys the upload pipeline remembers the content hash it computed
for each file, together with the file's modification time. A file whose
mtime has not changed can reuse its hash instead of being re-hashed and
re-uploaded.

Cache layout, one file per cache name::

    {root}/.firebase/
    └── hosting.{name}.cache     # "path,mtime,hash" per line

The cache is a hint, never a source of truth. Loading degrades to an empty
cache on any error, and a failed write never aborts a deploy. Paths
containing commas are not escaped and will not round-trip.
"""

from __future__ import annotations

import contextlib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

import structlog

logger = structlog.get_logger()

DEFAULT_CACHE_DIR = ".firebase"


@dataclass(frozen=True)
class HashCacheEntry:
    """Cached hash of a single file.

    Attributes:
        mtime: Modification time in milliseconds when the hash was computed
        hash: Hex content hash
    """

    mtime: int
    hash: str


class LoadStatus(StrEnum):
    """Outcome of loading a hash cache."""
    LOADED = "loaded"
    MISSING = "missing"
    ERROR = "error"


@dataclass
class HashCacheLoad:
    """Result of ``load``.

    ``entries`` is empty unless ``status`` is ``LOADED``; ``error`` holds the
    reason when ``status`` is ``ERROR``.
    """

    status: LoadStatus
    entries: dict[str, HashCacheEntry] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.LOADED


def cache_path(root_dir: Path | str, name: str, dir_name: str = DEFAULT_CACHE_DIR) -> Path:
    """Return the cache file location for ``name`` under ``root_dir``."""
    return Path(root_dir).resolve() / dir_name / f"hosting.{name}.cache"


def parse(text: str) -> dict[str, HashCacheEntry]:
    """Parse cache file contents, skipping malformed lines."""
    entries: dict[str, HashCacheEntry] = {}
    for line in text.split("\n"):
        fields = line.split(",")
        if len(fields) != 3:
            continue
        path, mtime, hash_str = fields
        try:
            entries[path] = HashCacheEntry(mtime=int(mtime), hash=hash_str)
        except ValueError:
            continue
    return entries


def serialize(entries: Mapping[str, HashCacheEntry]) -> str:
    """Serialize entries as ``path,mtime,hash`` lines."""
    return "".join(
        f"{path},{entry.mtime},{entry.hash}\n" for path, entry in entries.items()
    )


def load(root_dir: Path | str, name: str, dir_name: str = DEFAULT_CACHE_DIR) -> HashCacheLoad:
    """Load the hash cache ``name`` for a project root.

    Args:
        root_dir: Project root directory
        name: Cache name, e.g. "source" or "target"
        dir_name: Hidden cache directory relative to the root

    Returns:
        Loaded entries, or an empty result describing why none were loaded
    """
    try:
        text = cache_path(root_dir, name, dir_name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return HashCacheLoad(status=LoadStatus.MISSING)
    except (OSError, UnicodeDecodeError) as e:
        return HashCacheLoad(status=LoadStatus.ERROR, error=str(e))

    return HashCacheLoad(status=LoadStatus.LOADED, entries=parse(text))


def dump(
    root_dir: Path | str,
    name: str,
    entries: Mapping[str, HashCacheEntry],
    dir_name: str = DEFAULT_CACHE_DIR,
) -> bool:
    """Store the hash cache ``name``, replacing any previous contents.

    Args:
        root_dir: Project root directory
        name: Cache name
        entries: Mapping of relative path to cache entry
        dir_name: Hidden cache directory relative to the root

    Returns:
        True if the cache was written, False if the entries could not be
        serialized or the write failed
    """
    path = cache_path(root_dir, name, dir_name)
    temp_path = path.with_suffix(".tmp")
    try:
        text = serialize(entries)
    except (AttributeError, TypeError) as e:
        logger.debug("hash_cache_store_failed", name=name, path=str(path), error=str(e))
        return False

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(text, encoding="utf-8")
        temp_path.replace(path)
    except OSError as e:
        logger.debug("hash_cache_store_failed", name=name, path=str(path), error=str(e))
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        return False

    logger.debug("hash_cache_stored", name=name, files=len(entries))
    return True


def lookup(entries: Mapping[str, HashCacheEntry], path: str, mtime: int) -> str | None:
    """Return the cached hash for ``path`` if its mtime still matches."""
    entry = entries.get(path)
    if entry is None or entry.mtime != mtime:
        return None
    return entry.hash
