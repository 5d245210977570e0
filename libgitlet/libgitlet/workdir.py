"""Working-directory access used by the repository."""

import logging
from pathlib import Path

from .exceptions import WorkingFileNotFoundError

logger = logging.getLogger(__name__)


class WorkingDir:
    """Plain files at the top level of a working directory.

    :param root: The working directory.
    :param ignored: Names never listed, such as the repository directory."""

    def __init__(self, root: Path | str, ignored: set[str] | None = None) -> None:
        self.root = Path(root)
        self.ignored = ignored or set()

    def path(self, filename: str) -> Path:
        if not filename or Path(filename).name != filename or filename in self.ignored:
            msg = f'Invalid working file name: {filename!r}'
            raise ValueError(msg)

        return self.root / filename

    def exists(self, filename: str) -> bool:
        return self.path(filename).is_file()

    def read_file(self, filename: str) -> bytes:
        """Read a working file.

        :raises WorkingFileNotFoundError: If the file does not exist."""
        path = self.path(filename)
        if not path.is_file():
            msg = 'File does not exist.'
            raise WorkingFileNotFoundError(msg)

        return path.read_bytes()

    def write_file(self, filename: str, contents: bytes) -> None:
        self.path(filename).write_bytes(contents)
        logger.debug('Wrote %s', filename)

    def delete_file(self, filename: str) -> None:
        path = self.path(filename)
        if path.is_file():
            path.unlink()
            logger.debug('Deleted %s', filename)

    def list_files(self) -> list[str]:
        """Return the sorted names of plain files in the working directory."""
        return sorted(path.name for path in self.root.iterdir()
                      if path.is_file() and path.name not in self.ignored)
