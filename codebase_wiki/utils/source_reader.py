"""Raw file text access, injected into the engines for heuristic fallbacks."""

from pathlib import Path
from typing import Protocol

from loguru import logger

from ..errors import InputUnavailableError


class SourceReader(Protocol):
    """Returns the text of a source file or raises InputUnavailableError."""

    def read(self, path: str) -> str:
        ...


class FileSystemSourceReader:
    """Reads files from disk, resolving relative paths against a root."""

    def __init__(self, root_path: Path | str | None = None, encoding: str = "utf-8"):
        self.root_path = Path(root_path) if root_path is not None else None
        self.encoding = encoding

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute() or self.root_path is None:
            return candidate
        return self.root_path / candidate

    def read(self, path: str) -> str:
        resolved = self.resolve(path)
        try:
            return resolved.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Could not read {resolved}: {e}")
            raise InputUnavailableError(str(path), str(e)) from e


class InMemorySourceReader:
    """Serves file text from a mapping; used for tests and piped input."""

    def __init__(self, sources: dict[str, str]):
        self.sources = dict(sources)

    def read(self, path: str) -> str:
        try:
            return self.sources[path]
        except KeyError:
            raise InputUnavailableError(path, "no source registered") from None
