"""Best-effort build cache keyed by the lock file hash.

Each configured path is stored as its own tar.gz under
<cache.dir>/<key>/<index>.tar.gz. A missing or broken entry is a cache miss;
nothing here ever aborts a release.
"""

import contextlib
import hashlib
import logging
import os
import shutil
import tarfile
import zlib
from pathlib import Path

from reltagger.config import CacheConfig

LOG = logging.getLogger("reltagger.services.cache")

# gzip raises EOFError or zlib.error on truncated or damaged archives
ARCHIVE_ERRORS = (OSError, EOFError, zlib.error, tarfile.TarError)


def _is_within_root(root: Path, path: Path) -> bool:
    try:
        path.resolve().relative_to(root)
    except ValueError:
        return False
    return True


def hash_lock_files(repo_dir: Path, pattern: str) -> str:
    """SHA-256 over all files matching pattern, in sorted path order.

    Returns an empty string when no file matches.
    """
    files = sorted(p for p in repo_dir.glob(pattern) if p.is_file() and ".git" not in p.parts)
    if not files:
        return ""
    h = hashlib.sha256()
    for path in files:
        h.update(path.relative_to(repo_dir).as_posix().encode())
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                h.update(chunk)
    return h.hexdigest()


def resolve_cache_dir(value: str) -> Path:
    """Absolute cache directory for cache.dir.

    Relative values live under the user cache dir ($XDG_CACHE_HOME or
    ~/.cache), never inside the working copy: cargo release refuses a dirty
    tree.
    """
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return Path(os.environ.get("XDG_CACHE_HOME") or "~/.cache").expanduser() / path


class BuildCache:
    """Restore and save build directories of a working copy."""

    def __init__(self, config: CacheConfig, repo_dir: Path, log: logging.Logger | None = None) -> None:
        self._config = config
        self._repo_dir = Path(repo_dir).resolve()
        self._log = log or LOG
        self._cache_dir = resolve_cache_dir(config.dir)

    def key(self) -> str:
        """Cache key: <shared_key>-<lock hash>."""
        return f"{self._config.shared_key}-{hash_lock_files(self._repo_dir, self._config.lock_glob)}"

    def entry_dir(self) -> Path:
        return self._cache_dir / self.key()

    def restore(self) -> bool:
        """Extract the cache entry for the current key.

        Returns True on a hit. Misses and errors return False; an entry that
        fails to extract is removed so the next save() can replace it.
        """
        if not self._config.enabled:
            return False
        entry = None
        try:
            entry = self.entry_dir()
            if not entry.is_dir():
                self._log.info("Cache miss for key %s", entry.name)
                return False
            restored = 0
            for index, rel in enumerate(self._config.paths):
                archive = entry / f"{index}.tar.gz"
                if archive.is_file():
                    self._extract(archive, self._repo_dir / rel)
                    restored += 1
            self._log.info("Cache hit for key %s (%d path(s) restored)", entry.name, restored)
            return True
        except ARCHIVE_ERRORS as e:
            self._log.warning("Cache restore failed, continuing without cache: %s", e)
            if entry is not None and entry.is_dir():
                self._log.info("Removing broken cache entry %s", entry.name)
                shutil.rmtree(entry, ignore_errors=True)
            return False

    def save(self) -> bool:
        """Archive configured paths under the current key if not stored yet.

        Returns True if a new entry was written.
        """
        if not self._config.enabled:
            return False
        try:
            entry = self.entry_dir()
            if entry.is_dir():
                self._log.debug("Cache entry %s already exists, not saving", entry.name)
                return False
            tmp = entry.with_name(entry.name + ".tmp")
            if tmp.exists():
                shutil.rmtree(tmp)
            tmp.mkdir(parents=True)
            for index, rel in enumerate(self._config.paths):
                source = self._repo_dir / rel
                if not source.is_dir():
                    continue
                with tarfile.open(tmp / f"{index}.tar.gz", "w:gz") as tar:
                    tar.add(source, arcname=".")
            tmp.rename(entry)
            self._log.info("Saved cache entry %s", entry.name)
            return True
        except ARCHIVE_ERRORS as e:
            self._log.warning("Cache save failed: %s", e)
            return False

    def _extract(self, archive: Path, target: Path) -> None:
        target.mkdir(parents=True, exist_ok=True)
        root = target.resolve()
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar.getmembers():
                # Regular files only; links and devices are skipped
                if not member.isreg():
                    continue
                dest = target / member.name
                if not _is_within_root(root, dest):
                    self._log.warning("Skipping cache member outside target: %s", member.name)
                    continue
                src = tar.extractfile(member)
                if src is None:
                    continue
                dest.parent.mkdir(parents=True, exist_ok=True)
                with src, open(dest, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                mode = member.mode & 0o777
                if mode:
                    with contextlib.suppress(OSError):
                        os.chmod(dest, mode)
