"""Filesystem-backed document store for a vault of interlinked notes."""

import logging
import os
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Optional, Set


logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS = {
    ".obsidian", ".trash",
    ".git", ".hg", ".svn",
    "node_modules", "__pycache__",
}


class LockHeldError(Exception):
    """A running process holds the lock file."""

    def __init__(self, lock_path: Path):
        self.lock_path = lock_path
        super().__init__(f"{lock_path} is held by a running process")


def _is_stale_lock(lock_path: Path) -> bool:
    """
    Check whether a lock file was left behind by a process that is gone.
    
    A lock without a readable PID is treated as held.
    """
    try:
        pid = int(lock_path.read_text(encoding="ascii").strip())
    except FileNotFoundError:
        return True
    except (OSError, ValueError):
        return False
    if pid <= 0:
        return False

    try:
        os.kill(pid, 0)
    except (ProcessLookupError, OverflowError):
        return True
    except PermissionError:
        # Alive, owned by another user
        return False
    return False


class Document:
    """
    A file in the vault, identified by its vault-relative POSIX path.
    """

    def __init__(self, path: str):
        self.path = path
        pure = PurePosixPath(path)
        self.name = pure.name
        self.basename = pure.stem
        self.extension = pure.suffix[1:] if pure.suffix else ""
        parent = str(pure.parent)
        self.parent = "" if parent == "." else parent

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"Document({self.path!r})"


class VaultStore:
    """
    Read and write documents below a vault root directory.
    
    All paths handed in and out are relative to the root and use "/" as the
    separator, whatever the host platform.
    """

    def __init__(self, root: Path, exclude_dirs: Optional[Set[str]] = None):
        self.root = Path(root).resolve()
        self.exclude_dirs = DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs

    def list_documents(self, extension: Optional[str] = None) -> List[Document]:
        """
        List documents in a stable, name-sorted walk order.
        
        Args:
            extension: Only return documents with this extension (without the
                       dot, case-insensitive). None returns every file.
        
        Returns:
            Documents in enumeration order.
        """
        wanted = extension.lower().lstrip(".") if extension else None

        def _walk(current: Path) -> Iterator[Path]:
            try:
                entries = sorted(current.iterdir())
            except PermissionError:
                logger.warning("Skipping unreadable directory %s", current)
                return

            for entry in entries:
                if not self._inside_root(entry):
                    logger.warning("Skipping %s, it points outside the vault", entry)
                    continue
                if entry.is_dir():
                    if entry.name in self.exclude_dirs or entry.name.startswith("."):
                        continue
                    yield from _walk(entry)
                elif entry.is_file():
                    yield entry

        documents = []
        for file_path in _walk(self.root):
            document = Document(file_path.relative_to(self.root).as_posix())
            if wanted is None or document.extension.lower() == wanted:
                documents.append(document)
        return documents

    def read_content(self, document: Document) -> str:
        """Read a document as UTF-8 text."""
        return self._absolute(document.path).read_text(encoding="utf-8")

    def resource_location(self, document: Document) -> str:
        """Return a URI pointing at the document on disk."""
        return self._absolute(document.path).as_uri()

    def get_entity_at(self, path: str) -> Optional[Document]:
        """Return the document at a vault path, or None if there is no file."""
        if self._absolute(path).is_file():
            return Document(self._normalize(path))
        return None

    def create_entity(self, path: str, content: str) -> Document:
        """
        Create a new document.
        
        Raises:
            FileExistsError: If something already exists at the path.
        """
        target = self._absolute(path)
        if target.exists():
            raise FileExistsError(f"{path} already exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        self._write_atomic(target, content)
        return Document(self._normalize(path))

    def overwrite_entity(self, document: Document, content: str) -> Document:
        """Replace the content of an existing document."""
        target = self._absolute(document.path)
        if not target.is_file():
            raise FileNotFoundError(f"{document.path} does not exist")
        self._write_atomic(target, content)
        return document

    @contextmanager
    def lock(self, path: str) -> Iterator[None]:
        """
        Hold an exclusive lock file next to a vault path.
        
        The lock file holds the owner's PID. A lock whose owner is no longer
        running is removed and taken over once.
        
        Raises:
            LockHeldError: If a running process holds the lock.
            OSError: If the lock file cannot be created.
        """
        lock_path = self._absolute(path + ".lock")
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = self._open_lock(lock_path)
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
        except OSError:
            os.close(fd)
            lock_path.unlink()
            raise
        os.close(fd)
        try:
            yield
        finally:
            try:
                lock_path.unlink()
            except FileNotFoundError:
                pass

    def _open_lock(self, lock_path: Path) -> int:
        flags = os.O_CREAT | os.O_EXCL | os.O_WRONLY
        try:
            return os.open(lock_path, flags)
        except FileExistsError as e:
            if not _is_stale_lock(lock_path):
                raise LockHeldError(lock_path) from e

        logger.warning("Removing stale lock %s", lock_path)
        try:
            lock_path.unlink()
        except FileNotFoundError:
            pass
        try:
            return os.open(lock_path, flags)
        except FileExistsError as e:
            raise LockHeldError(lock_path) from e

    def _inside_root(self, entry: Path) -> bool:
        try:
            entry.resolve().relative_to(self.root)
            return True
        except ValueError:
            return False

    def _write_atomic(self, target: Path, content: str) -> None:
        # Readers only ever see the old or the new content
        tmp_path = target.with_name(target.name + ".tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(target)
        except OSError:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

    def _normalize(self, path: str) -> str:
        return PurePosixPath(path.replace("\\", "/").lstrip("/")).as_posix()

    def _absolute(self, path: str) -> Path:
        """
        Resolve a vault path to a filesystem path.
        
        Raises ValueError if the resolved path escapes the vault root.
        """
        full_path = (self.root / self._normalize(path)).resolve()
        try:
            full_path.relative_to(self.root)
        except ValueError:
            raise ValueError(f"Path escapes vault root: {path}") from None
        return full_path
