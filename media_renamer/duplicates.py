"""Duplicate detection across all input files."""

import logging
import sys
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .config import Config
from .digest import DigestIndex
from .exceptions import DuplicateFilesError, FileOperationError
from .scanner import FileRecord
from .utils import ensure_directory, files_identical, format_bytes, get_current_timestamp, natural_sort_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicatePair:
    """Two byte-identical files, first sorting before second."""
    first: Path
    second: Path
    size: int = 0

    @classmethod
    def of(cls, a: Path, b: Path, size: int = 0) -> 'DuplicatePair':
        """Create a pair with its members in natural sort order."""
        first, second = sorted((a, b), key=natural_sort_key)
        return cls(first=first, second=second, size=size)

    def sort_key(self) -> Tuple:
        return natural_sort_key(self.first), natural_sort_key(self.second)


class DuplicateDetector:
    """Finds byte-identical files by size grouping and full comparison."""

    def __init__(self, config: Config, digest_index: Optional[DigestIndex] = None):
        """
        Initialize duplicate detector with configuration.

        Args:
            config: Configuration instance
            digest_index: Shared size/digest cache
        """
        self.config = config
        self.digest_index = digest_index or DigestIndex()
        self.parallel_jobs = config.get_parallel_jobs()

    def group_by_size(self, records: Sequence[FileRecord]) -> Dict[int, List[FileRecord]]:
        """
        Group files by size, keeping only sizes shared by several files.

        Files of a unique size cannot have a duplicate.
        """
        size_groups: Dict[int, List[FileRecord]] = defaultdict(list)
        for record in records:
            record.size = self.digest_index.size_of(record.path)
            size_groups[record.size].append(record)

        return {size: group for size, group in size_groups.items() if len(group) > 1}

    def find_duplicates(self, records: Sequence[FileRecord]) -> List[DuplicatePair]:
        """
        Find all pairs of byte-identical files.

        Args:
            records: Discovered files

        Returns:
            Confirmed duplicate pairs, sorted by first then second path

        Raises:
            FileOperationError: If a file cannot be read
        """
        possible = self.group_by_size(records)
        candidates = [
            (a.path, b.path, size)
            for size, group in possible.items()
            for a, b in combinations(group, 2)
        ]

        logger.info(f"Comparing {len(candidates):,} same-size pairs "
                    f"from {len(possible):,} size groups")

        pairs = [
            DuplicatePair.of(a, b, size)
            for (a, b, size), identical in zip(candidates, self._compare_all(candidates))
            if identical
        ]
        pairs.sort(key=DuplicatePair.sort_key)

        logger.info(f"Found {len(pairs):,} duplicate pairs")
        return pairs

    def _compare_all(self, candidates: List[Tuple[Path, Path, int]]) -> List[bool]:
        """Compare candidate pairs, keeping results in candidate order."""
        progress = tqdm(total=len(candidates), desc="Comparing files", unit="pairs",
                        disable=not sys.stderr.isatty() or not candidates)
        with progress:
            if self.parallel_jobs <= 1 or len(candidates) < 2:
                results = []
                for a, b, _ in candidates:
                    results.append(files_identical(a, b))
                    progress.update()
                return results

            with ThreadPoolExecutor(max_workers=min(self.parallel_jobs, len(candidates))) as executor:
                futures = [executor.submit(files_identical, a, b) for a, b, _ in candidates]
                results = []
                for future in futures:
                    results.append(future.result())
                    progress.update()
                return results

    def check(self, records: Sequence[FileRecord]) -> None:
        """
        Refuse to continue if any duplicates exist.

        Raises:
            DuplicateFilesError: With every confirmed pair
        """
        pairs = self.find_duplicates(records)
        if not pairs:
            return

        logger.error(f"{len(pairs)} duplicate file pairs found:")
        for pair in pairs:
            logger.error(f"  {pair.first}\t{pair.second}")

        report_path = self.config.get_duplicate_report()
        if report_path:
            try:
                self.write_report(pairs, Path(report_path))
            except FileOperationError as e:
                logger.error(f"Duplicate report not written: {e}")
                raise DuplicateFilesError(pairs) from e

        raise DuplicateFilesError(pairs)

    def write_report(self, pairs: Sequence[DuplicatePair], report_file: Path) -> Path:
        """Write a plain-text report of duplicate pairs."""
        ensure_directory(report_file.parent)

        try:
            with open(report_file, 'w') as f:
                f.write("=== DUPLICATE FILE PAIRS ===\n")
                f.write(f"Generated: {get_current_timestamp()}\n")
                f.write(f"Pairs: {len(pairs):,}\n\n")
                for i, pair in enumerate(pairs, 1):
                    f.write(f"[{i}] {format_bytes(pair.size)}\n")
                    f.write(f"    {pair.first}\n")
                    f.write(f"    {pair.second}\n")
                f.write("\nDelete one file of each pair before renaming.\n")
        except OSError as e:
            raise FileOperationError(report_file, f"Failed to write duplicate report ({e})") from e

        logger.info(f"Duplicate report saved: {report_file}")
        return report_file
