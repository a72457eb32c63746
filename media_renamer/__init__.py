"""
Media Renamer

Renames photo and video files by the date and time they were taken, into a
year/month tree, after checking that no two input files are identical.
"""

__version__ = "0.2.0"
__author__ = "Homelab Team"

from .config import Config, RenameTables
from .digest import DigestIndex
from .duplicates import DuplicateDetector, DuplicatePair
from .exceptions import (
    ConfigurationError,
    DestinationExistsError,
    DuplicateFilesError,
    FileOperationError,
    MetadataExtractionError,
    RenamerError,
)
from .metadata import ExifReadReader, ExifToolReader, create_reader
from .paths import DestinationPlan, PathBuilder
from .renamer import OrdinalCounter, RenameExecutor, RenameState
from .reporter import RenameReporter
from .resolvers import ModelResolver, Timestamp, TimestampResolver
from .scanner import FileRecord, FileScanner

__all__ = [
    'Config',
    'RenameTables',
    'DigestIndex',
    'DuplicateDetector',
    'DuplicatePair',
    'ConfigurationError',
    'DestinationExistsError',
    'DuplicateFilesError',
    'FileOperationError',
    'MetadataExtractionError',
    'RenamerError',
    'ExifReadReader',
    'ExifToolReader',
    'create_reader',
    'DestinationPlan',
    'PathBuilder',
    'OrdinalCounter',
    'RenameExecutor',
    'RenameState',
    'RenameReporter',
    'ModelResolver',
    'Timestamp',
    'TimestampResolver',
    'FileRecord',
    'FileScanner',
]
