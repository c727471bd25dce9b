"""Resolve user-supplied file references into readable local paths."""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterator, List, Optional, Protocol, Tuple, Union
from urllib.parse import unquote, urlparse
from uuid import uuid4

from cardnews.config import settings
from cardnews.errors import FileAccessError, FileAccessErrorKind
from cardnews.utils.strategies import first_success

logger = logging.getLogger(__name__)

FileReference = Union[str, os.PathLike]

HOSTILE_CHARS_PATTERN = re.compile(r'[/:*?"<>|()\\]')
WHITESPACE_PATTERN = re.compile(r"\s+")
NON_WORD_PATTERN = re.compile(r"[^\w]")
MAX_STEM_LENGTH = 30


class ScopedAccessProvider(Protocol):
    """Grants and revokes temporary read access to a path outside private storage."""

    def start_accessing(self, path: Path) -> bool:
        ...

    def stop_accessing(self, path: Path) -> None:
        ...


class BookmarkResolver(Protocol):
    """Creates durable bookmarks for a path and resolves them back."""

    def create(self, path: Path) -> bytes:
        ...

    def resolve(self, bookmark: bytes) -> Tuple[Path, bool]:
        """Return the bookmarked path and whether the bookmark is stale."""
        ...


class PosixScopedAccess:
    """Access is granted when the OS reports the file as readable."""

    def start_accessing(self, path: Path) -> bool:
        return os.access(path, os.R_OK)

    def stop_accessing(self, path: Path) -> None:
        return None


class InodeBookmarkResolver:
    """Bookmarks a file by its real path and inode; stale once either changes."""

    def create(self, path: Path) -> bytes:
        real = Path(os.path.realpath(path))
        stat = real.stat()
        payload = {"path": str(real), "device": stat.st_dev, "inode": stat.st_ino}
        return json.dumps(payload).encode("utf-8")

    def resolve(self, bookmark: bytes) -> Tuple[Path, bool]:
        payload = json.loads(bookmark.decode("utf-8"))
        path = Path(payload["path"])
        try:
            stat = path.stat()
        except OSError:
            return path, True
        stale = stat.st_dev != payload["device"] or stat.st_ino != payload["inode"]
        return path, stale


@contextmanager
def scoped_access(provider: ScopedAccessProvider, path: Path) -> Iterator[None]:
    """Hold a scoped-access token for the duration of the block."""
    if not provider.start_accessing(path):
        raise FileAccessError(
            FileAccessErrorKind.DENIED, "scoped access was not granted", file_name=path.name
        )
    logger.debug("Scoped access acquired for %s", path.name)
    try:
        yield
    finally:
        provider.stop_accessing(path)
        logger.debug("Scoped access released for %s", path.name)


def reference_to_path(reference: FileReference) -> Path:
    """Turn a path or ``file://`` URI into a ``Path``."""
    raw = os.fspath(reference)
    if isinstance(raw, bytes):
        raw = os.fsdecode(raw)
    if not raw:
        raise FileAccessError(FileAccessErrorKind.NOT_FOUND, "empty file reference")
    if raw.startswith("file://"):
        return Path(unquote(urlparse(raw).path))
    return Path(raw)


def sanitize_file_name(file_name: str, extension: str) -> str:
    """Strip path-hostile characters, cap the stem and add a random suffix."""
    suffix = f".{extension}"
    if file_name.lower().endswith(suffix.lower()):
        stem = file_name[: -len(suffix)]
    else:
        stem = PurePath(file_name).stem
    stem = HOSTILE_CHARS_PATTERN.sub("_", stem)
    stem = WHITESPACE_PATTERN.sub("_", stem)
    stem = NON_WORD_PATTERN.sub("_", stem)[:MAX_STEM_LENGTH]
    return f"{stem}_{uuid4().hex[:8]}{suffix}"


def _verify_readable(path: Path) -> int:
    """Return the file size if the path exists, is readable and non-empty."""
    if not path.is_file():
        raise FileAccessError(FileAccessErrorKind.NOT_FOUND, file_name=path.name)
    if not os.access(path, os.R_OK):
        raise FileAccessError(FileAccessErrorKind.DENIED, file_name=path.name)
    size = path.stat().st_size
    if size <= 0:
        raise FileAccessError(FileAccessErrorKind.CORRUPTED, "file is empty", file_name=path.name)
    with path.open("rb") as handle:
        handle.read(1)
    return size


@dataclass
class AccessRequest:
    """State of one resolution: the reference plus temporary copies made for it."""

    path: Path
    extension: str
    temp_dirs: List[Path] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class ResolvedFile:
    path: Path
    strategy: str
    temporary: bool = False


class FileAccessResolver:
    """Tries escalating access strategies until one yields a readable path.

    Strategies run one at a time in a fixed order and the first success wins.
    Copies made along the way live under ``private_root`` and are deleted when
    the ``resolve`` block exits.
    """

    def __init__(
        self,
        private_root: Optional[Path] = None,
        scoped_access_provider: Optional[ScopedAccessProvider] = None,
        bookmark_resolver: Optional[BookmarkResolver] = None,
    ) -> None:
        self.private_root = Path(private_root or settings.private_root_path)
        self.scoped_access_provider = scoped_access_provider or PosixScopedAccess()
        self.bookmark_resolver = bookmark_resolver or InodeBookmarkResolver()
        self.strategies = [
            self._direct_access,
            self._scoped_copy,
            self._normalized_copy,
            self._bookmark,
            self._passthrough,
        ]

    @contextmanager
    def resolve(
        self, reference: FileReference, extension: Optional[str] = None
    ) -> Iterator[ResolvedFile]:
        path = reference_to_path(reference)
        ext = (extension or path.suffix.lstrip(".")).lower()
        request = AccessRequest(path=path, extension=ext)
        resolved = first_success(self.strategies, request)
        if resolved is None:
            raise FileAccessError(FileAccessErrorKind.NOT_FOUND, file_name=path.name)
        logger.info("Resolved %s via %s", path.name, resolved.strategy)
        try:
            yield resolved
        finally:
            self._cleanup(request)

    def is_private(self, path: Path) -> bool:
        try:
            return Path(os.path.realpath(path)).is_relative_to(os.path.realpath(self.private_root))
        except OSError:
            return False

    def _direct_access(self, request: AccessRequest) -> Optional[ResolvedFile]:
        if not self.is_private(request.path):
            return None
        try:
            _verify_readable(request.path)
        except (FileAccessError, OSError) as exc:
            logger.debug("Direct access failed for %s: %s", request.file_name, exc)
            return None
        return ResolvedFile(path=request.path, strategy="direct")

    def _scoped_copy(self, request: AccessRequest) -> Optional[ResolvedFile]:
        return self._copy_with_scoped_access(request, request.file_name, "scoped_copy")

    def _normalized_copy(self, request: AccessRequest) -> Optional[ResolvedFile]:
        name = sanitize_file_name(request.file_name, request.extension)
        return self._copy_with_scoped_access(request, name, "normalized_copy")

    def _bookmark(self, request: AccessRequest) -> Optional[ResolvedFile]:
        try:
            bookmark = self.bookmark_resolver.create(request.path)
            path, stale = self.bookmark_resolver.resolve(bookmark)
        except (OSError, ValueError) as exc:
            logger.debug("Bookmark resolution failed for %s: %s", request.file_name, exc)
            return None
        if stale:
            logger.debug("Bookmark for %s is stale", request.file_name)
            return None
        return ResolvedFile(path=path, strategy="bookmark")

    def _passthrough(self, request: AccessRequest) -> Optional[ResolvedFile]:
        logger.warning("All access strategies failed for %s; using it as given", request.file_name)
        return ResolvedFile(path=request.path, strategy="passthrough")

    def _copy_with_scoped_access(
        self, request: AccessRequest, target_name: str, strategy: str
    ) -> Optional[ResolvedFile]:
        try:
            self.private_root.mkdir(parents=True, exist_ok=True)
            temp_dir = Path(tempfile.mkdtemp(prefix="access-", dir=self.private_root))
        except OSError as exc:
            logger.debug("%s cannot create a private copy for %s: %s", strategy, request.file_name, exc)
            return None
        target = temp_dir / target_name
        try:
            with scoped_access(self.scoped_access_provider, request.path):
                shutil.copyfile(request.path, target)
            _verify_readable(target)
        except (FileAccessError, OSError) as exc:
            logger.debug("%s failed for %s: %s", strategy, request.file_name, exc)
            shutil.rmtree(temp_dir, ignore_errors=True)
            return None
        request.temp_dirs.append(temp_dir)
        return ResolvedFile(path=target, strategy=strategy, temporary=True)

    def _cleanup(self, request: AccessRequest) -> None:
        for temp_dir in request.temp_dirs:
            shutil.rmtree(temp_dir, ignore_errors=True)
            logger.debug("Removed temporary copy %s", temp_dir)
        request.temp_dirs.clear()
