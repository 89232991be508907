"""
Output sinks receiving generated files.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeneratedFile:
    """One generated file: a relative POSIX path and its rendered content."""

    path: str
    content: str
    class_name: Optional[str] = None  # None for index files


def join_path(*parts: str) -> str:
    """Join output path segments into a relative POSIX path."""
    return str(PurePosixPath(*[part for part in parts if part]))


class OutputSink(ABC):
    """Receives generated files."""

    @abstractmethod
    def emit(self, generated: GeneratedFile):
        pass


class MemorySink(OutputSink):
    """Keeps every emitted file in order."""

    def __init__(self):
        self.files: List[GeneratedFile] = []

    def emit(self, generated: GeneratedFile):
        self.files.append(generated)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def by_path(self) -> Dict[str, str]:
        return {f.path: f.content for f in self.files}

    def clear(self):
        self.files.clear()

    def __len__(self) -> int:
        return len(self.files)


class DirectorySink(OutputSink):
    """Writes files below a root directory, creating folders as needed."""

    def __init__(self, root: Union[str, Path], encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding
        self.written: List[Path] = []

    def emit(self, generated: GeneratedFile):
        target = self.root / PurePosixPath(generated.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding=self.encoding)
        self.written.append(target)
        logger.debug("Wrote %s", target)


class BufferedSink(OutputSink):
    """Holds emissions until flushed to a target sink."""

    def __init__(self, target: OutputSink):
        self.target = target
        self._pending: List[GeneratedFile] = []

    def emit(self, generated: GeneratedFile):
        self._pending.append(generated)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def flush(self) -> int:
        """Forward pending files to the target; returns how many were sent."""
        count = 0
        while self._pending:
            self.target.emit(self._pending.pop(0))
            count += 1
        return count

    def discard(self) -> int:
        count = len(self._pending)
        self._pending.clear()
        return count



class RecordingSink(OutputSink):
    """Forwards emissions to a target sink and remembers what went through."""

    def __init__(self, target: OutputSink):
        self.target = target
        self.files: List[GeneratedFile] = []

    def emit(self, generated: GeneratedFile):
        self.target.emit(generated)
        self.files.append(generated)
