"""Exception hierarchy for media renaming."""

from pathlib import Path
from typing import List, Sequence


class RenamerError(Exception):
    """Base exception for all media renamer errors."""
    pass


class ConfigurationError(RenamerError):
    """Raised when the configuration is missing or invalid."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))


class DuplicateFilesError(RenamerError):
    """Raised when byte-identical input files are found."""

    def __init__(self, pairs):
        self.pairs = list(pairs)
        super().__init__(
            f"{len(self.pairs)} duplicate file pairs found, "
            "please delete all duplicates before proceeding"
        )


class DestinationExistsError(RenamerError):
    """Raised when a computed destination is already taken."""

    def __init__(self, source: Path, destination: Path):
        self.source = source
        self.destination = destination
        super().__init__(f"Destination already exists for {source}: {destination}")


class FileOperationError(RenamerError):
    """Raised when reading, moving or creating a directory fails."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{message}: {path}")


class MetadataExtractionError(RenamerError):
    """Raised when metadata cannot be read at all."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{message}: {path}")
