"""Metadata readers producing a flat tag name -> value mapping per file."""

import logging
from pathlib import Path
from typing import Dict, Optional

import exifread
import exiftool
from exiftool.exceptions import ExifToolException

from .exceptions import FileOperationError, MetadataExtractionError
from .utils import format_mtime

logger = logging.getLogger(__name__)

# exifread does not report a file type, so guess it from the extension
# using ExifTool's FileType names.
FILE_TYPE_BY_EXTENSION = {
    '3gp': '3GP',
    'avi': 'AVI',
    'heic': 'HEIC',
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'mov': 'MOV',
    'mp4': 'MP4',
    'mpg': 'MPEG',
    'mpeg': 'MPEG',
    'ogv': 'OGV',
    'png': 'PNG',
}

EXIFREAD_TAGS = {
    'Image Model': 'Model',
    'EXIF DateTimeOriginal': 'DateTimeOriginal',
    'EXIF DateTimeDigitized': 'CreateDate',
    'Image DateTime': 'ModifyDate',
}


class ExifToolReader:
    """
    Reads tags through a persistent exiftool process.

    Tag names are returned without group prefixes (FileType, Model,
    CreateDate, ...), the same names the tag priority list uses.
    """

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable
        self._helper: Optional[exiftool.ExifToolHelper] = None

    def _ensure_helper(self) -> exiftool.ExifToolHelper:
        if self._helper is None:
            kwargs = {'common_args': []}
            if self.executable:
                kwargs['executable'] = self.executable
            try:
                helper = exiftool.ExifToolHelper(**kwargs)
                helper.run()
            except (FileNotFoundError, ExifToolException) as e:
                raise MetadataExtractionError(
                    self.executable or 'exiftool',
                    f"Failed to start exiftool ({e}), install it from https://exiftool.org/"
                ) from e
            logger.debug(f"Started exiftool {helper.version}")
            self._helper = helper
        return self._helper

    def read(self, path: Path) -> Dict[str, str]:
        """
        Read all tags of a file.

        Readable files exiftool cannot parse yield an empty mapping, which
        the renamer reports as an unknown file type.

        Raises:
            FileOperationError: If the file itself cannot be read
        """
        helper = self._ensure_helper()
        try:
            results = helper.get_metadata(str(path))
        except ExifToolException as e:
            try:
                with open(path, 'rb') as f:
                    f.read(1)
            except OSError as read_error:
                raise FileOperationError(path, f"Failed to read metadata ({read_error})") from e
            logger.warning(f"exiftool could not read {path}: {e}")
            return {}

        if not results:
            return {}
        return {
            str(tag): str(value)
            for tag, value in results[0].items()
            if tag != 'SourceFile' and value is not None
        }

    def close(self) -> None:
        if self._helper is not None:
            self._helper.terminate()
            self._helper = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class ExifReadReader:
    """Reads EXIF tags with the pure-Python exifread library."""

    def read(self, path: Path) -> Dict[str, str]:
        metadata: Dict[str, str] = {}

        file_type = FILE_TYPE_BY_EXTENSION.get(path.suffix.lower().lstrip('.'))
        if file_type:
            metadata['FileType'] = file_type
        metadata['FileModifyDate'] = format_mtime(path)

        try:
            with open(path, 'rb') as f:
                tags = exifread.process_file(f, details=False)
        except OSError as e:
            raise FileOperationError(path, f"Failed to read metadata ({e})") from e
        except Exception as e:
            logger.warning(f"exifread could not parse {path}: {e}")
            return metadata

        for exif_name, tag_name in EXIFREAD_TAGS.items():
            if exif_name in tags:
                metadata[tag_name] = str(tags[exif_name]).strip()

        gps_date_time = self._gps_date_time(tags)
        if gps_date_time:
            metadata['GPSDateTime'] = gps_date_time

        return metadata

    def _gps_date_time(self, tags) -> Optional[str]:
        """Combine the GPS date stamp and time stamp tags."""
        date = tags.get('GPS GPSDate')
        time = tags.get('GPS GPSTimeStamp')
        if date is None or time is None:
            return None
        try:
            hour, minute, second = (int(float(value)) for value in time.values)
        except (TypeError, ValueError, ZeroDivisionError):
            logger.debug(f"Unusable GPS time stamp: {time}")
            return None
        return f"{str(date).strip()} {hour:02d}:{minute:02d}:{second:02d}"

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def create_reader(name: str = 'exiftool'):
    """
    Create a metadata reader by backend name.

    Args:
        name: 'exiftool' or 'exifread'

    Returns:
        Reader object with read(path) and close() methods
    """
    if name == 'exiftool':
        return ExifToolReader()
    if name == 'exifread':
        return ExifReadReader()
    raise ValueError(f"Unknown metadata reader: {name}")
