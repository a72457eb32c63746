"""Tests for the rename executor."""

import hashlib
from pathlib import Path

import pytest

from media_renamer.digest import DigestIndex
from media_renamer.exceptions import (
    ConfigurationError,
    DestinationExistsError,
    DuplicateFilesError,
)
from media_renamer.renamer import OrdinalCounter, RenameExecutor, RenameState

JPEG_2021 = {
    'FileType': 'JPEG',
    'DateTimeOriginal': '2021:03:04 10:20:30',
    'Model': 'SM-G960F',
}


def _digest(content):
    return hashlib.md5(content).hexdigest()[:8]


class TestLiveRun:
    """Test moving files into the output tree."""

    def test_file_moved_to_timestamped_destination(self, sample_config, create_test_files,
                                                   fake_reader, tmp_rename_root):
        source = create_test_files('IMG_0001.JPG', b'jpeg-bytes')
        reader = fake_reader({'IMG_0001.JPG': JPEG_2021})
        executor = RenameExecutor(sample_config, reader)

        results = executor.run([tmp_rename_root / 'incoming'])

        expected = (tmp_rename_root / 'output' / '2021' / '03' /
                    f"2021_03_04-10_20_30-{_digest(b'jpeg-bytes')}-Galaxy_S9.jpg")
        assert not source.exists()
        assert expected.read_bytes() == b'jpeg-bytes'
        assert executor.state == RenameState.DONE
        assert results['state'] == 'done'
        assert results['statistics']['renamed'] == 1
        assert results['planned'] == [(str(source), str(expected))]

    def test_extension_comes_from_file_type(self, sample_config, create_test_files,
                                            fake_reader, tmp_rename_root):
        create_test_files('clip.bin', b'mpeg-bytes')
        reader = fake_reader({'clip.bin': {'FileType': 'MPEG', 'CreateDate': '2015:07:08 09:10:11'}})

        RenameExecutor(sample_config, reader).run([tmp_rename_root / 'incoming'])

        moved = list((tmp_rename_root / 'output' / '2015' / '07').iterdir())
        assert [p.name for p in moved] == [f"2015_07_08-09_10_11-{_digest(b'mpeg-bytes')}.mpg"]

    def test_several_input_roots(self, sample_config, create_test_files, fake_reader, tmp_rename_root):
        create_test_files('a.jpg', b'first', base='card1')
        create_test_files('b.jpg', b'second', base='card2')
        reader = fake_reader({'a.jpg': JPEG_2021, 'b.jpg': JPEG_2021})

        results = RenameExecutor(sample_config, reader).run(
            [tmp_rename_root / 'card1', tmp_rename_root / 'card2']
        )

        assert results['statistics']['discovered'] == 2
        assert results['statistics']['renamed'] == 2
        assert len(list((tmp_rename_root / 'output' / '2021' / '03').iterdir())) == 2


class TestDiscovery:
    """Test how input roots are walked."""

    def test_overlapping_roots_see_each_file_once(self, sample_config, create_test_files,
                                                  fake_reader, tmp_rename_root):
        source = create_test_files('sub/only.jpg', b'jpeg-bytes')
        incoming = tmp_rename_root / 'incoming'

        results = RenameExecutor(sample_config, fake_reader({'only.jpg': JPEG_2021})).run(
            [incoming, incoming / 'sub' / '..' / 'sub']
        )

        assert results['statistics']['discovered'] == 1
        assert results['statistics']['renamed'] == 1
        assert results['planned'][0][0] == str(source)
        assert not source.exists()


class TestDuplicateGate:
    """Test that duplicates stop the run before anything moves."""

    def test_duplicates_abort_before_any_move(self, sample_config, create_test_files,
                                              fake_reader, tmp_rename_root):
        a = create_test_files('a.jpg', b'same')
        b = create_test_files('sub/b.jpg', b'same')
        c = create_test_files('c.jpg', b'unique')
        reader = fake_reader({name: JPEG_2021 for name in ('a.jpg', 'b.jpg', 'c.jpg')})
        executor = RenameExecutor(sample_config, reader)

        with pytest.raises(DuplicateFilesError) as exc_info:
            executor.run([tmp_rename_root / 'incoming'])

        assert executor.state == RenameState.ABORTED
        assert [(p.first, p.second) for p in exc_info.value.pairs] == [(a, b)]
        assert a.exists() and b.exists() and c.exists()
        assert reader.read_paths == []
        assert list((tmp_rename_root / 'output').iterdir()) == []


class TestCollisions:
    """Test that a destination is never overwritten."""

    def test_existing_destination_is_fatal(self, sample_config, create_test_files,
                                           fake_reader, tmp_rename_root):
        source = create_test_files('IMG_0001.jpg', b'jpeg-bytes')
        taken = create_test_files(
            f"2021/03/2021_03_04-10_20_30-{_digest(b'jpeg-bytes')}-Galaxy_S9.jpg",
            b'already here', base='output',
        )
        executor = RenameExecutor(sample_config, fake_reader({'IMG_0001.jpg': JPEG_2021}))

        with pytest.raises(DestinationExistsError) as exc_info:
            executor.run([tmp_rename_root / 'incoming'])

        assert exc_info.value.destination == taken
        assert executor.state == RenameState.ABORTED
        assert source.exists()
        assert taken.read_bytes() == b'already here'

    def test_existing_destination_is_fatal_in_dry_run(self, write_config, create_test_files,
                                                      fake_reader, tmp_rename_root):
        create_test_files('IMG_0001.jpg', b'jpeg-bytes')
        create_test_files(
            f"2021/03/2021_03_04-10_20_30-{_digest(b'jpeg-bytes')}-Galaxy_S9.jpg",
            b'already here', base='output',
        )
        config = write_config({'rename.dry_run': True})

        with pytest.raises(DestinationExistsError):
            RenameExecutor(config, fake_reader({'IMG_0001.jpg': JPEG_2021})).run(
                [tmp_rename_root / 'incoming']
            )

    def test_planned_destination_collision_caught_in_dry_run(self, write_config, create_test_files,
                                                             fake_reader, tmp_rename_root, monkeypatch):
        create_test_files('a.jpg', b'first')
        create_test_files('b.jpg', b'second')
        index = DigestIndex()
        monkeypatch.setattr(index, 'content_digest', lambda path: 'deadbeef')
        config = write_config({'rename.dry_run': True})
        executor = RenameExecutor(config, fake_reader({'a.jpg': JPEG_2021, 'b.jpg': JPEG_2021}),
                                  digest_index=index)

        with pytest.raises(DestinationExistsError) as exc_info:
            executor.run([tmp_rename_root / 'incoming'])

        assert exc_info.value.source.name == 'b.jpg'


class TestSkips:
    """Test files that are left in place."""

    def test_unknown_type_skipped_without_ordinal(self, write_config, create_test_files,
                                                  fake_reader, tmp_rename_root):
        notes = create_test_files('a_notes.txt', b'text')
        create_test_files('b.jpg', b'jpeg')
        config = write_config({'rename.no_exif_prefix': 'X'})
        reader = fake_reader({'a_notes.txt': {'FileType': 'TXT'}, 'b.jpg': {'FileType': 'JPEG'}})
        executor = RenameExecutor(config, reader)

        results = executor.run([tmp_rename_root / 'incoming'])

        assert notes.exists()
        assert (tmp_rename_root / 'output' / f"X-001-{_digest(b'jpeg')}.jpg").exists()
        assert results['statistics']['skipped_unknown_type'] == 1
        assert results['statistics']['ordinal_named'] == 1
        assert executor.ordinals.issued == 1

    def test_no_timestamp_without_prefix_skipped(self, sample_config, create_test_files,
                                                 fake_reader, tmp_rename_root):
        source = create_test_files('undated.png', b'png')
        reader = fake_reader({'undated.png': {'FileType': 'PNG', 'CreateDate': '0000:00:00 00:00:00'}})

        results = RenameExecutor(sample_config, reader).run([tmp_rename_root / 'incoming'])

        assert source.exists()
        assert results['statistics']['skipped_no_timestamp'] == 1
        assert results['statistics']['renamed'] == 0
        assert results['state'] == 'done'

    def test_ordinals_follow_discovery_order(self, write_config, create_test_files,
                                             fake_reader, tmp_rename_root):
        create_test_files('img10.jpg', b'ten')
        create_test_files('img2.jpg', b'two')
        dated = create_test_files('img5.jpg', b'five')
        config = write_config({'rename.no_exif_prefix': 'X', 'rename.zero_pad': 2})
        reader = fake_reader({
            'img10.jpg': {'FileType': 'JPEG'},
            'img2.jpg': {'FileType': 'JPEG'},
            'img5.jpg': JPEG_2021,
        })

        results = RenameExecutor(config, reader).run([tmp_rename_root / 'incoming'])

        moves = {Path(src).name: Path(dst).name for src, dst in results['planned']}
        assert moves['img2.jpg'] == f"X-01-{_digest(b'two')}.jpg"
        assert moves['img10.jpg'] == f"X-02-{_digest(b'ten')}.jpg"
        assert moves[dated.name].startswith('2021_03_04-10_20_30-')

    def test_ordinals_not_reused_after_unrelated_skip(self, write_config, create_test_files,
                                                      fake_reader, tmp_rename_root):
        create_test_files('a.jpg', b'undated one')
        skipped = create_test_files('b.dat', b'unknown type')
        create_test_files('c.jpg', b'undated two')
        config = write_config({'rename.no_exif_prefix': 'X', 'rename.zero_pad': 2})
        reader = fake_reader({
            'a.jpg': {'FileType': 'JPEG'},
            'b.dat': {'FileType': 'DAT'},
            'c.jpg': {'FileType': 'JPEG'},
        })

        results = RenameExecutor(config, reader).run([tmp_rename_root / 'incoming'])

        names = sorted(p.name for p in (tmp_rename_root / 'output').iterdir())
        assert names == [f"X-01-{_digest(b'undated one')}.jpg",
                         f"X-02-{_digest(b'undated two')}.jpg"]
        assert skipped.exists()
        assert results['statistics']['skipped_unknown_type'] == 1

    def test_ordinal_start_configurable(self, write_config, create_test_files,
                                        fake_reader, tmp_rename_root):
        create_test_files('a.jpg', b'a')
        config = write_config({'rename.no_exif_prefix': 'X', 'rename.ordinal_start': 0})

        results = RenameExecutor(config, fake_reader({'a.jpg': {'FileType': 'JPEG'}})).run(
            [tmp_rename_root / 'incoming']
        )

        assert Path(results['planned'][0][1]).name.startswith('X-000-')


class TestDryRun:
    """Test that dry runs only report."""

    def test_dry_run_moves_nothing(self, write_config, create_test_files, fake_reader, tmp_rename_root):
        source = create_test_files('IMG_0001.jpg', b'jpeg-bytes')
        config = write_config({'rename.dry_run': True})
        planned = []

        results = RenameExecutor(
            config, fake_reader({'IMG_0001.jpg': JPEG_2021}),
            on_planned=lambda src, dst: planned.append((src, dst)),
        ).run([tmp_rename_root / 'incoming'])

        assert source.exists()
        assert list((tmp_rename_root / 'output').iterdir()) == []
        assert results['dry_run'] is True
        assert results['statistics']['renamed'] == 1
        assert planned == [(source, tmp_rename_root / 'output' / '2021' / '03' /
                            f"2021_03_04-10_20_30-{_digest(b'jpeg-bytes')}-Galaxy_S9.jpg")]


class TestExecutorSetup:
    """Test construction and the ordinal counter."""

    def test_invalid_config_rejected(self, write_config, fake_reader):
        config = write_config({'rename.zero_pad': 0})

        with pytest.raises(ConfigurationError) as exc_info:
            RenameExecutor(config, fake_reader())

        assert any('zero_pad' in error for error in exc_info.value.errors)

    def test_initial_state_pending(self, sample_config, fake_reader):
        assert RenameExecutor(sample_config, fake_reader()).state == RenameState.PENDING

    def test_ordinal_counter_counts_from_start(self):
        counter = OrdinalCounter(start=5)

        assert [counter.next(), counter.next()] == [5, 6]
        assert counter.issued == 2
