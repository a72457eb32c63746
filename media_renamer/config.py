"""Configuration management for media renaming."""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


DEFAULT_EXTENSIONS: Mapping[str, str] = MappingProxyType({
    '3GP': '3gp',
    'AVI': 'avi',
    'HEIC': 'heic',
    'JPEG': 'jpg',
    'MOV': 'mov',
    'MP4': 'mp4',
    'MPEG': 'mpg',
    'PNG': 'png',
    'OGV': 'ogv',
})

DEFAULT_MODEL_ALIASES: Mapping[str, str] = MappingProxyType({
    'HTC Desire HD A9191': 'Desire HD',
    'GT-I9300': 'Galaxy S3',
    'SM-G900F': 'Galaxy S5',
    'SM-G930F': 'Galaxy S7',
    'SM-G960F': 'Galaxy S9',
})

DEFAULT_TAG_ORDER: Tuple[str, ...] = (
    'CreateDate',
    'DateTimeOriginal',
    'ModifyDate',
    'GPSDateTime',
)

FILE_MODIFY_DATE_TAG = 'FileModifyDate'

METADATA_READERS = ('exiftool', 'exifread')


@dataclass(frozen=True)
class RenameTables:
    """Fixed lookup tables used while renaming."""
    extensions: Mapping[str, str] = field(default_factory=lambda: DEFAULT_EXTENSIONS)
    model_aliases: Mapping[str, str] = field(default_factory=lambda: DEFAULT_MODEL_ALIASES)
    tag_order: Tuple[str, ...] = DEFAULT_TAG_ORDER

    @classmethod
    def build(cls, extensions: Optional[Mapping[str, str]] = None,
              model_aliases: Optional[Mapping[str, str]] = None,
              tag_order: Optional[List[str]] = None) -> 'RenameTables':
        """
        Build tables from the defaults plus optional additions.

        Args:
            extensions: Extra or replacement FileType -> extension entries
            model_aliases: Extra or replacement model -> label entries
            tag_order: Replacement tag priority list

        Returns:
            Immutable RenameTables instance
        """
        merged_extensions = dict(DEFAULT_EXTENSIONS)
        merged_extensions.update({str(k): str(v).lower() for k, v in (extensions or {}).items()})

        merged_aliases = dict(DEFAULT_MODEL_ALIASES)
        merged_aliases.update({str(k): str(v) for k, v in (model_aliases or {}).items()})

        order = tuple(tag_order) if tag_order else DEFAULT_TAG_ORDER

        return cls(
            extensions=MappingProxyType(merged_extensions),
            model_aliases=MappingProxyType(merged_aliases),
            tag_order=order,
        )

    def timestamp_tags(self, check_file_modify_date: bool = False) -> Tuple[str, ...]:
        """Get the tag priority list, with the file modify date appended if enabled."""
        if check_file_modify_date and FILE_MODIFY_DATE_TAG not in self.tag_order:
            return self.tag_order + (FILE_MODIFY_DATE_TAG,)
        return self.tag_order


class Config:
    """Manages configuration for media renaming from YAML files and overrides."""

    def __init__(self, config_path: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches for config files.
            overrides: Dot-path keys to values, applied on top of the file.
                None values are ignored so unset CLI options keep file values.
        """
        self.config_path = config_path or self._find_config_file()
        self._config: Dict[str, Any] = {}
        self._load_config()
        self._apply_overrides(overrides or {})
        self._tables = self._build_tables()

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        possible_paths = [
            Path.cwd() / "config.local.yml",
            Path.cwd() / "config.yml",
            Path(__file__).parent / "config.local.yml",
            Path(__file__).parent / "config.yml",
        ]

        for config_file in possible_paths:
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return str(config_file.resolve())

        logger.debug("No configuration file found, using defaults")
        return None

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self.config_path:
            return
        try:
            with open(self.config_path, 'r') as f:
                self._config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

    def _apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """Set dot-path override values into the loaded configuration."""
        for key_path, value in overrides.items():
            if value is None:
                continue
            keys = key_path.split('.')
            node = self._config
            for key in keys[:-1]:
                if not isinstance(node.get(key), dict):
                    node[key] = {}
                node = node[key]
            node[keys[-1]] = value

    def _build_tables(self) -> RenameTables:
        return RenameTables.build(
            extensions=self.get('tables.extensions'),
            model_aliases=self.get('tables.model_aliases'),
            tag_order=self.get('tables.tag_order'),
        )

    @property
    def config(self) -> Dict[str, Any]:
        """Copy of the merged configuration data."""
        return copy.deepcopy(self._config)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path like 'rename.output_dir'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        try:
            for key in keys:
                value = value[key]
        except (KeyError, TypeError):
            return default
        return default if value is None else value

    def get_output_dir(self) -> Optional[str]:
        """Get base output directory."""
        return self.get('rename.output_dir')

    def get_extra_dir(self) -> Optional[str]:
        """Get extra subdirectory appended below the month directory."""
        return self.get('rename.extra_dir') or None

    def get_extra_suffix(self) -> Optional[str]:
        """Get extra suffix appended to every filename."""
        return self.get('rename.extra_suffix') or None

    def get_no_exif_prefix(self) -> Optional[str]:
        """Get filename prefix for files without a timestamp."""
        return self.get('rename.no_exif_prefix') or None

    def get_zero_pad(self) -> int:
        """Get zero-pad width for ordinal counters."""
        return int(self.get('rename.zero_pad', 3))

    def get_ordinal_start(self) -> int:
        """Get the first ordinal handed out to files without a timestamp."""
        return int(self.get('rename.ordinal_start', 1))

    def use_filename_for_timestamp(self) -> bool:
        """Check if timestamps may be parsed from filenames."""
        return bool(self.get('rename.use_filename_for_timestamp', False))

    def check_file_modify_date(self) -> bool:
        """Check if the file modify date is a fallback timestamp tag."""
        return bool(self.get('rename.check_file_modify_date', False))

    def is_dry_run(self) -> bool:
        """Check if this is a dry run."""
        return bool(self.get('rename.dry_run', False))

    def is_debug(self) -> bool:
        """Check if debug output is enabled."""
        return bool(self.get('logging.debug', False))

    def get_log_level(self) -> str:
        """Get logging level."""
        if self.is_debug():
            return 'DEBUG'
        return str(self.get('logging.level', 'INFO')).upper()

    def get_log_file(self) -> Optional[str]:
        """Get optional log file path."""
        return self.get('logging.file')

    def get_parallel_jobs(self) -> int:
        """Get number of parallel jobs for duplicate comparison."""
        return int(self.get('process.parallel_jobs', 1))

    def get_metadata_reader(self) -> str:
        """Get the name of the metadata reader backend."""
        return str(self.get('process.metadata_reader', 'exiftool'))

    def get_duplicate_report(self) -> Optional[str]:
        """Get optional path for the duplicate pairs report."""
        return self.get('process.duplicate_report')

    def get_tables(self) -> RenameTables:
        """Get the extension, model alias and tag priority tables."""
        return self._tables

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages
        """
        errors = []

        if not self.get_output_dir():
            errors.append("Output directory not configured")

        for name, value in (('Extra directory', self.get_extra_dir()),
                            ('Extra suffix', self.get_extra_suffix()),
                            ('No-EXIF prefix', self.get_no_exif_prefix())):
            if value and ('/' in value or '\\' in value):
                errors.append(f"{name} must not contain a path separator: {value}")

        try:
            if self.get_zero_pad() < 1:
                errors.append(f"Invalid zero_pad value: {self.get_zero_pad()} (must be >= 1)")
        except (TypeError, ValueError):
            errors.append(f"Invalid zero_pad value: {self.get('rename.zero_pad')}")

        try:
            if self.get_ordinal_start() < 0:
                errors.append(f"Invalid ordinal_start value: {self.get_ordinal_start()} (must be >= 0)")
        except (TypeError, ValueError):
            errors.append(f"Invalid ordinal_start value: {self.get('rename.ordinal_start')}")

        try:
            parallel_jobs = self.get_parallel_jobs()
            if parallel_jobs < 1 or parallel_jobs > 32:
                errors.append(f"Invalid parallel_jobs value: {parallel_jobs} (must be 1-32)")
        except (TypeError, ValueError):
            errors.append(f"Invalid parallel_jobs value: {self.get('process.parallel_jobs')}")

        if self.get_metadata_reader() not in METADATA_READERS:
            errors.append(
                f"Unknown metadata reader: {self.get_metadata_reader()} "
                f"(expected one of {', '.join(METADATA_READERS)})"
            )

        return errors

    def __str__(self) -> str:
        """String representation of configuration."""
        return f"Config(path={self.config_path}, output_dir={self.get_output_dir()})"
