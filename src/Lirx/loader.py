# src/Lirx/loader.py

from collections.abc import Iterable
from pathlib import Path

import structlog
import tomllib

from Lirx.errors import ParseError
from Lirx.types import CommandDocument, CommandList

log = structlog.get_logger()


def parse_document(path: str | Path) -> CommandDocument:
    """Read a TOML command definition and return it as a plain dict."""
    p = Path(path)
    try:
        with p.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        log.error("commands.file.parse_failed", path=str(p), error=str(e))
        raise ParseError(p, e.strerror or str(e)) from e
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        log.error("commands.file.parse_failed", path=str(p), error=str(e))
        raise ParseError(p, str(e)) from e


class CommandLoader:
    """Accumulates command documents for a later bulk publish.

    ``commands`` only grows. Editing or deleting published commands never
    touches it; it is a staging area, not a mirror of what Discord holds.
    """

    def __init__(self) -> None:
        self.commands: CommandList = []

    def parse_document(self, path: str | Path) -> CommandDocument:
        return parse_document(path)

    def load_document(self, document: CommandDocument) -> CommandDocument:
        self.commands.append(document)
        return document

    def load_file(self, path: str | Path) -> CommandDocument:
        document = self.load_document(self.parse_document(path))
        log.info("commands.file.loaded", path=str(path), name=document.get("name"))
        return document

    def load_files(self, paths: Iterable[str | Path]) -> CommandList:
        """Load each path in order and return the accumulated list.

        Stops at the first file that fails to parse and re-raises its
        ParseError. Documents loaded before it stay in ``commands`` and the
        remaining paths are not read.
        """
        for path in paths:
            self.load_file(path)
        return self.commands

    def load_directory(self, directory: str | Path, pattern: str = "*.toml") -> CommandList:
        """Load every file in ``directory`` matching ``pattern``, sorted by name."""
        d = Path(directory)
        if not d.is_dir():
            raise ParseError(d, "not a directory")
        return self.load_files(sorted(p for p in d.glob(pattern) if p.is_file()))
