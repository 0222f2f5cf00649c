"""Local file system access."""

from pathlib import Path

from ..interfaces import IFileSystem


class LocalFileSystem(IFileSystem):
    """Reads files from the local disk.

    Text is decoded as UTF-8; a leading byte order mark is stripped.
    """

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def read_all_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8-sig")
