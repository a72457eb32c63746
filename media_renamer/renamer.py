"""Rename orchestration: discovery, duplicate gate and per-file moves."""

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .config import Config
from .digest import DigestIndex
from .duplicates import DuplicateDetector
from .exceptions import ConfigurationError, DestinationExistsError
from .paths import PathBuilder
from .resolvers import ModelResolver, TimestampResolver
from .scanner import FileRecord, FileScanner
from .utils import (
    ensure_directory,
    format_bytes,
    get_available_space,
    get_current_timestamp,
    get_device,
    move_file,
)

logger = logging.getLogger(__name__)


class RenameState(Enum):
    """Lifecycle of a rename run."""
    PENDING = 'pending'
    DISCOVERING = 'discovering'
    DUPLICATE_CHECKING = 'duplicate_checking'
    PROCESSING = 'processing'
    ABORTED = 'aborted'
    DONE = 'done'


class OrdinalCounter:
    """Run-wide counter for files named without a timestamp."""

    def __init__(self, start: int = 1):
        self.start = start
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    @property
    def issued(self) -> int:
        """Number of ordinals handed out so far."""
        return self._next - self.start


@dataclass
class RenameStats:
    """Statistics for a rename run."""
    discovered: int = 0
    renamed: int = 0
    renamed_size: int = 0
    ordinal_named: int = 0
    skipped_unknown_type: int = 0
    skipped_no_timestamp: int = 0
    planned: List[Tuple[Path, Path]] = field(default_factory=list)


class RenameExecutor:
    """Moves every discovered file to its timestamp-derived destination."""

    def __init__(self, config: Config, metadata_reader,
                 scanner: Optional[FileScanner] = None,
                 digest_index: Optional[DigestIndex] = None,
                 on_planned: Optional[Callable[[Path, Path], None]] = None):
        """
        Initialize the executor.

        Args:
            config: Validated configuration
            metadata_reader: Object with read(path) -> tag mapping
            scanner: File discovery, defaults to FileScanner
            digest_index: Shared size/digest cache
            on_planned: Called with (source, destination) for each planned move

        Raises:
            ConfigurationError: If the configuration does not validate
        """
        errors = config.validate_config()
        if errors:
            raise ConfigurationError(errors)

        self.config = config
        self.metadata_reader = metadata_reader
        self.scanner = scanner or FileScanner()
        self.digest_index = digest_index or DigestIndex()
        self.on_planned = on_planned
        self.dry_run = config.is_dry_run()

        tables = config.get_tables()
        self.extensions = tables.extensions
        self.timestamp_resolver = TimestampResolver(
            tables.timestamp_tags(config.check_file_modify_date()),
            use_filename=config.use_filename_for_timestamp(),
        )
        self.model_resolver = ModelResolver(tables.model_aliases, config.get_extra_suffix())
        self.path_builder = PathBuilder(config)
        self.detector = DuplicateDetector(config, self.digest_index)
        self.ordinals = OrdinalCounter(config.get_ordinal_start())

        self.state = RenameState.PENDING
        self._planned_destinations: Set[Path] = set()

    def run(self, input_dirs: Iterable[Path]) -> Dict[str, Any]:
        """
        Rename all files below the input directories.

        Nothing is moved unless the whole input set is free of duplicates.
        Any I/O failure or destination collision stops the run.

        Args:
            input_dirs: Directories to process

        Returns:
            Dictionary with run results

        Raises:
            DuplicateFilesError: If byte-identical files exist
            DestinationExistsError: If a destination is already taken
            FileOperationError: On read, move or directory creation failure
        """
        start_time = time.time()
        stats = RenameStats()
        mode = 'DRY RUN: ' if self.dry_run else ''

        try:
            self.state = RenameState.DISCOVERING
            records = self.scanner.discover(input_dirs)
            stats.discovered = len(records)

            self.state = RenameState.DUPLICATE_CHECKING
            self.detector.check(records)

            self.state = RenameState.PROCESSING
            if not self.dry_run:
                self._check_free_space(records)
            logger.info(f"{mode}Processing {len(records):,} files")
            for record in records:
                self._process_file(record, stats)
        except Exception:
            self.state = RenameState.ABORTED
            logger.error(f"{mode}Run aborted after {stats.renamed:,} of "
                         f"{stats.discovered:,} files were renamed")
            raise

        self.state = RenameState.DONE
        logger.info(
            f"{mode}Rename complete: {stats.renamed:,} renamed, "
            f"{stats.skipped_unknown_type:,} unknown type, "
            f"{stats.skipped_no_timestamp:,} without timestamp, "
            f"{format_bytes(stats.renamed_size)}"
        )
        return self._build_results(stats, time.time() - start_time)

    def _process_file(self, record: FileRecord, stats: RenameStats) -> None:
        """Resolve, plan and move a single file."""
        record.metadata = self.metadata_reader.read(record.path)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Tag info for file {record.path}")
            for tag in sorted(record.metadata):
                logger.debug(f"  {record.path}\t{tag}:\t{record.metadata[tag]}")

        file_type = record.metadata.get('FileType')
        record.extension = self.extensions.get(file_type) if file_type else None
        if not record.extension:
            logger.warning(f"Ignoring unknown file {record.path} (type: {file_type or 'none'})")
            stats.skipped_unknown_type += 1
            return

        record.timestamp = self.timestamp_resolver.resolve(record.metadata, record.path)
        ordinal = None
        if record.timestamp is None:
            if not self.path_builder.can_name_without_timestamp:
                logger.warning(f"No timestamps for {record.path}, skipping")
                stats.skipped_no_timestamp += 1
                return
            ordinal = self.ordinals.next()
            stats.ordinal_named += 1

        record.model = self.model_resolver.resolve(record.metadata)
        record.digest = self.digest_index.content_digest(record.path)

        plan = self.path_builder.build(
            record.timestamp, record.digest, record.model, record.extension, ordinal
        )
        destination = plan.path
        self._check_destination(record.path, destination)
        self._planned_destinations.add(destination)

        if self.dry_run:
            logger.debug(f"DRY RUN: Would move {record.path} -> {destination}")
        else:
            ensure_directory(Path(plan.directory))
            move_file(record.path, destination)

        if self.on_planned:
            self.on_planned(record.path, destination)

        stats.planned.append((record.path, destination))
        stats.renamed += 1
        stats.renamed_size += record.size or 0

    def _check_free_space(self, records: List[FileRecord]) -> None:
        """Warn if files moving to another filesystem may not fit."""
        output_dir = Path(self.config.get_output_dir())
        output_device = get_device(output_dir)
        crossing = sum(
            record.size or 0 for record in records
            if get_device(record.path) != output_device
        )
        if not crossing:
            return

        available = get_available_space(output_dir)
        logger.info(f"{format_bytes(crossing)} to copy across filesystems, "
                    f"{format_bytes(available)} free at {output_dir}")
        if crossing > available:
            logger.warning(f"Output filesystem may run out of space: need up to "
                           f"{format_bytes(crossing)}, {format_bytes(available)} free")

    def _check_destination(self, source: Path, destination: Path) -> None:
        """
        Fail if the destination exists or was already planned in this run.

        Raises:
            DestinationExistsError: On any collision
        """
        if destination in self._planned_destinations or os.path.lexists(destination):
            logger.error(f"Destination collision: {source} -> {destination}")
            raise DestinationExistsError(source, destination)

    def _build_results(self, stats: RenameStats, duration: float) -> Dict[str, Any]:
        return {
            'dry_run': self.dry_run,
            'state': self.state.value,
            'timestamp': get_current_timestamp(),
            'duration_seconds': round(duration, 3),
            'statistics': {
                'discovered': stats.discovered,
                'renamed': stats.renamed,
                'renamed_size_bytes': stats.renamed_size,
                'renamed_size_human': format_bytes(stats.renamed_size),
                'ordinal_named': stats.ordinal_named,
                'skipped_unknown_type': stats.skipped_unknown_type,
                'skipped_no_timestamp': stats.skipped_no_timestamp,
            },
            'planned': [(str(source), str(dest)) for source, dest in stats.planned],
            'output_dir': self.config.get_output_dir(),
        }
