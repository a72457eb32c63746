"""Content fingerprints for discovered files."""

import logging
from pathlib import Path
from typing import Dict

from .utils import calculate_md5, get_file_size

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 8


class DigestIndex:
    """Memoizes file sizes and short content digests per path."""

    def __init__(self, digest_length: int = DIGEST_LENGTH):
        self.digest_length = digest_length
        self._sizes: Dict[Path, int] = {}
        self._digests: Dict[Path, str] = {}

    def size_of(self, path: Path) -> int:
        """
        Get the size of a file in bytes.

        Raises:
            FileOperationError: If the file cannot be stat'ed
        """
        if path not in self._sizes:
            self._sizes[path] = get_file_size(path)
        return self._sizes[path]

    def content_digest(self, path: Path) -> str:
        """
        Get the short hexadecimal digest of a file's full content.

        The digest only makes filenames readable and distinct; duplicates are
        confirmed by full comparison elsewhere.

        Args:
            path: Path to file

        Returns:
            First digest_length hex characters of the file's MD5

        Raises:
            FileOperationError: If the file cannot be read
        """
        if path not in self._digests:
            self._digests[path] = calculate_md5(path)[:self.digest_length]
            logger.debug(f"Digest for {path}: {self._digests[path]}")
        return self._digests[path]
