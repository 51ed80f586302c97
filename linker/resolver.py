"""Link resolution for mapping marker payloads to vault documents."""

import logging
import posixpath
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from vault.store import Document, VaultStore
from .parser import extract_aliases


logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = "md"


def split_link(payload: str) -> Tuple[str, Optional[str]]:
    """
    Split a marker payload into its link path and subpath.
    
    "Note#Heading|Shown text" becomes ("Note", "Heading"). The subpath is
    None when the payload has no "#".
    """
    text = payload.split("|", 1)[0]
    linkpath, sep, subpath = text.partition("#")
    return linkpath.strip(), (subpath.strip() if sep else None)


def _link_name(document: Document) -> str:
    """The name a link uses for a document: basename for notes, file name otherwise."""
    if document.extension.lower() == MARKDOWN_EXTENSION:
        return document.basename
    return document.name


class VaultLinkIndex:
    """
    An in-memory index that finds the first document a link points at.
    
    Lookup order is: path relative to the linking document, path from the
    vault root, document name, then front matter alias. Matching is
    case-insensitive. When several documents share a name, exact case wins,
    then the linking document's folder, then the shortest path.
    """

    def __init__(
        self,
        documents: Iterable[Document],
        aliases: Optional[Dict[str, List[str]]] = None,
    ):
        self._by_path: Dict[str, List[Document]] = {}
        self._by_name: Dict[str, List[Document]] = {}
        self._by_alias: Dict[str, List[Document]] = {}

        for document in documents:
            self._by_path.setdefault(document.path.lower(), []).append(document)
            self._by_name.setdefault(_link_name(document).lower(), []).append(document)

        for path, names in (aliases or {}).items():
            for document in self._by_path.get(path.lower(), []):
                for alias in names:
                    self._by_alias.setdefault(alias.lower(), []).append(document)

    @classmethod
    def from_store(cls, store: VaultStore) -> "VaultLinkIndex":
        """Index every file in the store, reading notes for their aliases."""
        documents = store.list_documents()
        aliases: Dict[str, List[str]] = {}

        for document in documents:
            if document.extension.lower() != MARKDOWN_EXTENSION:
                continue
            try:
                content = store.read_content(document)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Cannot read %s for aliases: %s", document.path, e)
                continue
            found = extract_aliases(content)
            if found:
                aliases[document.path] = found

        logger.debug(
            "Link index built",
            extra={"documents": len(documents), "aliased": len(aliases)},
        )
        return cls(documents, aliases)

    def first_link_target(self, payload: str, source_path: str) -> Optional[Document]:
        """
        Find the document a marker payload links to.
        
        Args:
            payload: The raw text between "[[" and "]]".
            source_path: Vault path of the document containing the marker.
        
        Returns:
            The best matching document, or None if nothing matches.
        """
        linkpath, subpath = split_link(payload)
        source_dir = posixpath.dirname(source_path)

        if not linkpath:
            # [[#Heading]] points back at the linking document
            if subpath is None:
                return None
            return self._exact_path(source_path)

        rooted = linkpath.startswith("/")
        key = linkpath.replace("\\", "/").strip("/")
        if PurePosixPath(key).suffix.lower() == "." + MARKDOWN_EXTENSION:
            key = key[: -len(MARKDOWN_EXTENSION) - 1]
        if not key:
            return None

        bases = [""] if rooted or not source_dir else [source_dir, ""]
        for base in bases:
            candidate = posixpath.normpath(posixpath.join(base, key))
            if candidate.startswith(".."):
                continue
            found = self._lookup_path(candidate)
            if found is not None:
                return found

        last = key.rsplit("/", 1)[-1]
        candidates = self._by_name.get(last.lower(), [])
        if "/" in key:
            suffix = "/" + key.lower()
            candidates = [
                doc for doc in candidates
                if self._link_path(doc).lower().endswith(suffix)
            ]
        if candidates:
            return self._pick(candidates, last, source_dir)

        if "/" not in key:
            candidates = self._by_alias.get(key.lower(), [])
            if candidates:
                return self._pick(candidates, key, source_dir)

        return None

    def _lookup_path(self, candidate: str) -> Optional[Document]:
        for path in (f"{candidate}.{MARKDOWN_EXTENSION}", candidate):
            matches = self._by_path.get(path.lower())
            if matches:
                exact = [doc for doc in matches if doc.path == path]
                return (exact or matches)[0]
        return None

    def _exact_path(self, path: str) -> Optional[Document]:
        for document in self._by_path.get(path.lower(), []):
            if document.path == path:
                return document
        return None

    def _link_path(self, document: Document) -> str:
        if document.extension.lower() == MARKDOWN_EXTENSION:
            return document.path[: -len(MARKDOWN_EXTENSION) - 1]
        return document.path

    def _pick(self, candidates: List[Document], name: str, source_dir: str) -> Document:
        return sorted(
            candidates,
            key=lambda doc: (
                _link_name(doc) != name,
                doc.parent != source_dir,
                len(doc.path),
                doc.path,
            ),
        )[0]


class LinkResolver:
    """
    Adapter over a link index.
    
    The index is treated as an opaque oracle: it may return any document or
    None, and callers decide whether the result is usable.
    """

    def __init__(self, index=None, load_index: Optional[Callable[[], Any]] = None):
        if index is None and load_index is None:
            raise ValueError("LinkResolver needs an index or a way to load one")
        self._index = index
        self._load_index = load_index

    @classmethod
    def for_store(cls, store: VaultStore) -> "LinkResolver":
        """Resolve against the whole store, indexing it on first use."""
        return cls(load_index=lambda: VaultLinkIndex.from_store(store))

    def resolve(self, payload: str, source_path: str) -> Optional[Document]:
        """
        Resolve a link payload against the vault, as seen from a source document.
        
        The index is built on first use.
        
        Returns:
            The target document, or None if the link is unresolved.
        """
        if self._index is None:
            self._index = self._load_index()
        return self._index.first_link_target(payload, source_path)
