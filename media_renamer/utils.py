"""Utility functions for media renaming."""

import filecmp
import hashlib
import logging
import os
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Generator, Iterable, List, Tuple, Union

import psutil

from .exceptions import FileOperationError

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r'(\d+)')


def calculate_md5(file_path: Path, chunk_size: int = 8192) -> str:
    """
    Calculate MD5 hash of a file.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read at a time

    Returns:
        MD5 hash as hexadecimal string

    Raises:
        FileOperationError: If the file cannot be read
    """
    hasher = hashlib.md5()
    try:
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
    except OSError as e:
        raise FileOperationError(file_path, f"Failed to calculate hash ({e})") from e
    return hasher.hexdigest()


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes.

    Raises:
        FileOperationError: If the file cannot be stat'ed
    """
    try:
        return file_path.stat().st_size
    except OSError as e:
        raise FileOperationError(file_path, f"Failed to get size ({e})") from e


def files_identical(first: Path, second: Path) -> bool:
    """
    Compare two files byte for byte.

    Raises:
        FileOperationError: If either file cannot be read
    """
    try:
        return filecmp.cmp(first, second, shallow=False)
    except OSError as e:
        raise FileOperationError(first, f"Failed to compare with {second} ({e})") from e


def format_bytes(bytes_value: int) -> str:
    """
    Format bytes as human-readable string.

    Args:
        bytes_value: Size in bytes

    Returns:
        Formatted string like "1.2GB"
    """
    if bytes_value == 0:
        return "0B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.1f}{units[unit_index]}"


def natural_sort_key(value: Union[str, Path]) -> Tuple:
    """Sort key that orders embedded numbers numerically: img2 < img10."""
    parts = _DIGITS_RE.split(str(value))
    return tuple((0, int(part), part) if part.isdigit() else (1, part, part)
                 for part in parts if part)


def get_available_space(path: Path) -> int:
    """
    Get available disk space for a path in bytes.

    The path itself need not exist yet; its nearest existing parent is used.

    Args:
        path: Path to check

    Returns:
        Available space in bytes, 0 if it cannot be determined
    """
    existing = Path(path).absolute()
    while not existing.exists() and existing != existing.parent:
        existing = existing.parent
    try:
        return psutil.disk_usage(str(existing)).free
    except Exception as e:
        logger.error(f"Failed to get disk space for {path}: {e}")
        return 0


def get_device(path: Path) -> int:
    """Get the device id of a path, or of its nearest existing parent."""
    existing = Path(path).absolute()
    while not existing.exists() and existing != existing.parent:
        existing = existing.parent
    return existing.stat().st_dev


def ensure_directory(path: Path) -> None:
    """
    Ensure directory exists, creating it if necessary.

    Raises:
        FileOperationError: If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(path, f"Failed to create directory ({e})") from e


def move_file(source: Path, destination: Path) -> None:
    """
    Move a file to a destination that is known not to exist.

    Raises:
        FileOperationError: If the move fails
    """
    try:
        shutil.move(str(source), str(destination))
    except OSError as e:
        raise FileOperationError(source, f"Failed to move to {destination} ({e})") from e
    logger.debug(f"Moved {source} -> {destination}")


def find_files(directory: Path) -> Generator[Path, None, None]:
    """
    Recursively find all regular files in a directory.

    Symbolic links are neither followed nor returned.

    Args:
        directory: Directory to search

    Yields:
        Path objects for regular files found
    """
    if not directory.exists() or not directory.is_dir():
        logger.warning(f"Directory does not exist or is not a directory: {directory}")
        return

    def _raise(error: OSError):
        raise FileOperationError(Path(error.filename or directory), f"Error scanning directory ({error})")

    for dirpath, dirnames, filenames in os.walk(str(directory), onerror=_raise):
        for filename in filenames:
            file_path = Path(dirpath) / filename
            if file_path.is_symlink() or not file_path.is_file():
                logger.debug(f"Skipping non-regular file: {file_path}")
                continue
            yield file_path


def sort_paths(paths: Iterable[Path]) -> List[Path]:
    """Sort paths in natural order."""
    return sorted(paths, key=natural_sort_key)


def format_mtime(file_path: Path) -> str:
    """Format a file's modification time like an EXIF date."""
    mtime = get_file_mtime(file_path)
    return datetime.fromtimestamp(mtime).strftime('%Y:%m:%d %H:%M:%S')


def get_file_mtime(file_path: Path) -> float:
    """Get file modification time, raising FileOperationError on failure."""
    try:
        return file_path.stat().st_mtime
    except OSError as e:
        raise FileOperationError(file_path, f"Failed to get modification time ({e})") from e


def get_current_timestamp():
    """Get current timestamp as ISO string."""
    return datetime.now().isoformat()
