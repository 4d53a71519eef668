"""Document corpus: the linkable notes of a vault."""

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import aiofiles
import frontmatter
from loguru import logger


@dataclass
class Document:
    """A linkable document: vault-relative POSIX path plus its frontmatter."""
    path: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.path)[1].lstrip(".")

    @property
    def basename(self) -> str:
        """File name without folder or extension."""
        return posixpath.splitext(posixpath.basename(self.path))[0]

    @property
    def path_without_extension(self) -> str:
        if not self.extension:
            return self.path
        return self.path[:-(len(self.extension) + 1)]

    @property
    def folder(self) -> str:
        return posixpath.dirname(self.path)


class Vault(Protocol):
    """Corpus enumeration and document primitives the engine consumes."""

    def list_documents(self) -> List[Document]:
        ...

    def get_document(self, path: str) -> Optional[Document]:
        ...

    def exists(self, path: str) -> bool:
        ...

    async def read(self, path: str) -> str:
        ...

    async def create(self, path: str, content: str) -> Document:
        ...


class FolderVault:
    """
    Vault backed by a directory of markdown files.

    Enumeration is alphabetical by path and skips dot-directories
    (.obsidian, .trash, ...). Frontmatter is parsed on every enumeration so
    alias edits show up on the next keystroke.
    """

    def __init__(self, root: Path, extensions: tuple = ("md",)):
        self.root = Path(root)
        self.extensions = tuple(e.lstrip(".") for e in extensions)

    def _resolve(self, path: str) -> Path:
        """Absolute file path for a vault path. Paths leaving the vault are refused."""
        file_path = self.root / Path(*posixpath.normpath(path).split("/"))
        root = self.root.resolve()
        resolved = file_path.resolve()
        if resolved != root and root not in resolved.parents:
            raise PermissionError(f"Path is outside the vault: {path}")
        return file_path

    def _relative(self, file_path: Path) -> str:
        return file_path.relative_to(self.root).as_posix()

    def _load(self, file_path: Path) -> Document:
        rel = self._relative(file_path)
        try:
            post = frontmatter.load(str(file_path))
            metadata = dict(post.metadata)
        except Exception as e:
            # Broken YAML must not hide the note from the suggestion list
            logger.warning(f"Could not parse frontmatter of {rel}: {e}")
            metadata = {}
        return Document(path=rel, metadata=metadata)

    def list_documents(self) -> List[Document]:
        documents = []
        for ext in self.extensions:
            for file_path in self.root.rglob(f"*.{ext}"):
                rel_parts = file_path.relative_to(self.root).parts
                if any(part.startswith(".") for part in rel_parts):
                    continue
                if file_path.is_file():
                    documents.append(self._load(file_path))
        documents.sort(key=lambda d: d.path)
        logger.debug(f"Enumerated {len(documents)} documents in {self.root}")
        return documents

    def get_document(self, path: str) -> Optional[Document]:
        try:
            file_path = self._resolve(path)
        except PermissionError:
            return None
        if not file_path.is_file():
            return None
        return self._load(file_path)

    def exists(self, path: str) -> bool:
        """True for an existing file or folder at the vault-relative path."""
        if not path:
            return False
        try:
            return self._resolve(path).exists()
        except PermissionError:
            return False

    async def read(self, path: str) -> str:
        async with aiofiles.open(self._resolve(path), "r", encoding="utf-8") as f:
            return await f.read()

    async def create(self, path: str, content: str) -> Document:
        """Create a new document; refuses to overwrite an existing one."""
        file_path = self._resolve(path)
        if file_path.exists():
            raise FileExistsError(f"Document already exists: {path}")
        file_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(file_path, "x", encoding="utf-8") as f:
            await f.write(content)

        logger.info(f"Created document: {path}")
        return self._load(file_path)
