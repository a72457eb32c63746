"""Destination path construction."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import Config
from .resolvers import Timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DestinationPlan:
    """Where a file is going: directory and filename strings."""
    directory: str
    filename: str

    @property
    def path(self) -> Path:
        return Path(self.directory) / self.filename


class PathBuilder:
    """
    Builds destination directories and filenames.

    Timestamped files go to
    ``{output}/{YYYY}/{MM}[/{extra_dir}]/{YYYY}_{MM}_{DD}-{hh}_{mm}_{ss}-{digest}[-{model}][-{suffix}].{ext}``,
    files without a timestamp to
    ``{output}[/{extra_dir}]/{prefix}-{ordinal}-{digest}[-{model}][-{suffix}].{ext}``.
    The result depends only on the arguments and the configuration.
    """

    def __init__(self, config: Config):
        self.output_dir = str(config.get_output_dir()).rstrip('/') or '/'
        self.extra_dir = config.get_extra_dir()
        self.extra_suffix = config.get_extra_suffix()
        self.no_exif_prefix = config.get_no_exif_prefix()
        self.zero_pad = config.get_zero_pad()

    @property
    def can_name_without_timestamp(self) -> bool:
        """Files without a timestamp need a configured prefix."""
        return self.no_exif_prefix is not None

    def build(self, timestamp: Optional[Timestamp], digest: str, model: Optional[str],
              extension: str, ordinal: Optional[int] = None) -> DestinationPlan:
        """
        Build the destination for one file.

        Args:
            timestamp: Resolved timestamp, or None for the ordinal branch
            digest: Short content digest
            model: Camera label, or None
            extension: Lowercase extension without dot
            ordinal: Run-wide counter value, required when timestamp is None

        Returns:
            DestinationPlan for the file

        Raises:
            ValueError: If the ordinal branch is used without prefix or ordinal
        """
        tail = self._tail(digest, model, extension)

        if timestamp is not None:
            directory = self._join(self.output_dir, f"{timestamp.year:04d}",
                                   f"{timestamp.month:02d}", self.extra_dir)
            filename = (
                f"{timestamp.year:04d}_{timestamp.month:02d}_{timestamp.day:02d}-"
                f"{timestamp.hour:02d}_{timestamp.minute:02d}_{timestamp.second:02d}-{tail}"
            )
            return DestinationPlan(directory=directory, filename=filename)

        if not self.can_name_without_timestamp:
            raise ValueError("No timestamp and no prefix configured for files without one")
        if ordinal is None:
            raise ValueError("An ordinal is required for files without a timestamp")

        directory = self._join(self.output_dir, self.extra_dir)
        filename = f"{self.no_exif_prefix}-{ordinal:0{self.zero_pad}d}-{tail}"
        return DestinationPlan(directory=directory, filename=filename)

    def _tail(self, digest: str, model: Optional[str], extension: str) -> str:
        parts = [digest]
        if model:
            parts.append(model)
        if self.extra_suffix:
            parts.append(self.extra_suffix)
        return '-'.join(parts) + f".{extension}"

    @staticmethod
    def _join(*parts: Optional[str]) -> str:
        root, rest = parts[0], [p for p in parts[1:] if p]
        if not rest:
            return root
        return root.rstrip('/') + '/' + '/'.join(rest)
