"""Input discovery for media renaming."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .resolvers import Timestamp
from .utils import find_files, sort_paths

logger = logging.getLogger(__name__)


@dataclass
class FileRecord:
    """A discovered file, enriched as it moves through the pipeline."""
    path: Path
    size: Optional[int] = None
    digest: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    extension: Optional[str] = None
    timestamp: Optional[Timestamp] = None
    model: Optional[str] = None

    @property
    def name(self) -> str:
        """Get filename without path."""
        return self.path.name


class FileScanner:
    """Finds every regular file below a set of input directories."""

    def discover(self, input_dirs: Iterable[Path]) -> List[FileRecord]:
        """
        Recursively enumerate files under all input roots.

        Args:
            input_dirs: Directories to scan

        Returns:
            FileRecords in natural sort order of their paths
        """
        seen = set()
        paths: List[Path] = []

        for input_dir in input_dirs:
            directory = Path(input_dir)
            logger.info(f"Scanning directory: {directory}")
            count = 0
            for file_path in find_files(directory):
                # Overlapping roots reach the same file by different paths
                key = file_path.resolve()
                if key in seen:
                    continue
                seen.add(key)
                paths.append(file_path)
                count += 1
            logger.debug(f"Found {count:,} files in {directory}")

        paths = sort_paths(paths)
        logger.info(f"Found {len(paths):,} files")
        return [FileRecord(path=p) for p in paths]
