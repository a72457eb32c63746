"""Timestamp and camera model resolution from file metadata."""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Mapping, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

# Six fields (year, month, day, hour, minute, second) with any non-digit
# separators, possibly none, between them. Lookahead so that candidates may
# overlap: "IMG_1234_20200501_123000" first tries 1234 and then 2020.
TIMESTAMP_RE = re.compile(
    r"(?<!\d)(?=(\d{4})\D*(\d{2})\D*(\d{2})\D*(\d{2})\D*(\d{2})\D*(\d{2}))"
)

_SEPARATOR_RE = re.compile(r'[\s-]+')

MODEL_TAG = 'Model'


class Timestamp(NamedTuple):
    """Fully specified capture time."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    @classmethod
    def parse(cls, text: str) -> Optional['Timestamp']:
        """
        Extract a timestamp from arbitrary text.

        Args:
            text: Tag value or filename such as "2021:03:04 10:20:30"

        Returns:
            Timestamp, or None if six plausible fields cannot be found
        """
        for match in TIMESTAMP_RE.finditer(str(text)):
            timestamp = cls(*(int(group) for group in match.groups()))
            if timestamp.is_valid():
                return timestamp
        return None

    def is_valid(self) -> bool:
        try:
            datetime(*self)
        except ValueError:
            return False
        return True

    def __str__(self) -> str:
        return (f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
                f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}")


class TimestampResolver:
    """Picks a canonical timestamp from metadata tags or the filename."""

    def __init__(self, tag_order: Sequence[str], use_filename: bool = False):
        """
        Initialize resolver.

        Args:
            tag_order: Tag names in priority order, first present wins.
                Callers append the file modify date tag when that fallback is on.
            use_filename: Whether to parse the filename when no tag matches
        """
        self.tag_order = tuple(tag_order)
        self.use_filename = use_filename

    def resolve(self, metadata: Mapping[str, str], path: Path) -> Optional[Timestamp]:
        """
        Resolve the timestamp of a file.

        Args:
            metadata: Tag name -> value mapping for the file
            path: File path, used for the filename fallback

        Returns:
            Timestamp or None if nothing usable was found
        """
        for tag in self.tag_order:
            if tag not in metadata:
                continue
            timestamp = Timestamp.parse(metadata[tag])
            if timestamp:
                logger.debug(f"Timestamp for {path} from {tag}: {timestamp}")
                return timestamp
            logger.debug(f"Ignoring unusable {tag} value for {path}: {metadata[tag]!r}")

        if self.use_filename:
            timestamp = Timestamp.parse(Path(path).name)
            if timestamp:
                logger.debug(f"Timestamp for {path} from filename: {timestamp}")
                return timestamp

        return None


class ModelResolver:
    """Turns a raw camera model into a filesystem-safe label."""

    def __init__(self, aliases: Mapping[str, str], extra_suffix: Optional[str] = None):
        self.aliases = aliases
        self.extra_suffix = extra_suffix

    def resolve(self, metadata: Mapping[str, str]) -> Optional[str]:
        raw = metadata.get(MODEL_TAG)
        if raw is None:
            return None

        raw = str(raw).strip()
        model = self.aliases.get(raw, raw)
        model = _SEPARATOR_RE.sub('_', model)
        if not model:
            return None

        # Redundant with the suffix appended to every filename
        if self.extra_suffix and model == self.extra_suffix:
            return None
        return model
