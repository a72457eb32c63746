"""Shared fixtures for media rename tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def tmp_rename_root(tmp_path):
    """Create a temporary input/output directory tree."""
    for d in ['incoming', 'output']:
        (tmp_path / d).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def write_config(tmp_rename_root):
    """Factory fixture: write a YAML config file and return a Config for it."""

    def _write(overrides=None, **sections):
        config_data = {
            'rename': {
                'output_dir': str(tmp_rename_root / 'output'),
                'zero_pad': 3,
                'dry_run': False,
            },
            'logging': {'level': 'DEBUG'},
            'process': {'parallel_jobs': 1, 'metadata_reader': 'exifread'},
        }
        for section, values in sections.items():
            config_data.setdefault(section, {}).update(values)

        config_path = tmp_rename_root / 'config.yml'
        with open(config_path, 'w') as f:
            yaml.dump(config_data, f)

        from media_renamer.config import Config
        return Config(str(config_path), overrides)

    return _write


@pytest.fixture
def sample_config(write_config):
    """Config with an output directory and default tables."""
    return write_config()


@pytest.fixture
def create_test_files(tmp_rename_root):
    """Factory fixture: create files in the rename tree with given content."""

    def _create(relative_path, content=b'test-content', base='incoming'):
        full_path = tmp_rename_root / base / relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        return full_path

    return _create


class FakeMetadataReader:
    """Metadata reader returning canned tags keyed by file name."""

    def __init__(self, tags_by_name=None):
        self.tags_by_name = dict(tags_by_name or {})
        self.read_paths = []

    def read(self, path: Path):
        self.read_paths.append(path)
        return dict(self.tags_by_name.get(path.name, {}))

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


@pytest.fixture
def fake_reader():
    """Factory fixture: build a FakeMetadataReader from {filename: tags}."""

    def _make(tags_by_name=None):
        return FakeMetadataReader(tags_by_name)

    return _make
