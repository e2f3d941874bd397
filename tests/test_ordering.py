"""Tests for copy order computation."""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from usb_media_sync.domain import SortKey
from usb_media_sync.services.ordering import compute_order, discover_files, extract_sort_key


def _names(paths):
    return [path.name for path in paths]


class TestExtractSortKey:
    """Test sort key extraction from file names."""

    @pytest.mark.parametrize(
        "filename,number",
        [
            ("track_16_of_17.mp3", 16),
            ("Track_03_Of_10.mp3", 3),
            ("album_track_02_of_12_live.mp3", 2),
            ("song_7_remix.mp3", 7),
            ("01_opening.mp3", 1),
            ("10_.mp3", 10),
            ("side_2_intro.mp3", 2),
        ],
    )
    def test_numeric_keys(self, filename, number):
        """Test track numbers are read from known patterns."""
        assert extract_sort_key(filename) == SortKey.numeric(number)

    def test_track_pattern_wins_over_earlier_numeral(self):
        """Test the track_N_of_M pattern has priority over other numerals."""
        assert extract_sort_key("disc_2_track_05_of_09.mp3") == SortKey.numeric(5)

    def test_first_delimited_numeral_is_used(self):
        """Test the first delimited numeral wins when several are present."""
        assert extract_sort_key("set_4_part_9_.mp3") == SortKey.numeric(4)

    @pytest.mark.parametrize(
        "filename",
        [
            "intro.mp3",
            "mix2019.mp3",
            "a1b.mp3",
            "track_x_of_y.mp3",
            "01 - Opening.mp3",
            "side-2-intro.mp3",
            "10.mp3",
        ],
    )
    def test_text_fallback(self, filename):
        """Test names without an underscore-delimited numeral fall back to the name."""
        key = extract_sort_key(filename)
        assert key == SortKey.textual(filename)
        assert not key.is_numeric


class TestComputeOrder:
    """Test ordering of source files."""

    def test_track_numbers_order_regardless_of_discovery(self):
        """Test track files sort 01, 02, 03 for every input permutation."""
        files = [
            Path("/src/track_03_of_10.mp3"),
            Path("/src/track_01_of_10.mp3"),
            Path("/src/track_02_of_10.mp3"),
        ]
        expected = ["track_01_of_10.mp3", "track_02_of_10.mp3", "track_03_of_10.mp3"]

        for permutation in itertools.permutations(files):
            assert _names(compute_order(permutation)) == expected

    def test_numeric_not_lexical(self):
        """Test track 10 comes after track 9."""
        files = [Path("track_10_of_12.mp3"), Path("track_9_of_12.mp3")]

        assert _names(compute_order(files)) == ["track_9_of_12.mp3", "track_10_of_12.mp3"]

    def test_text_keys_order_lexically(self):
        """Test names without numbers order lexically among themselves."""
        files = [Path("outro.mp3"), Path("intro.mp3")]

        assert _names(compute_order(files)) == ["intro.mp3", "outro.mp3"]

    def test_numeric_keys_before_text_keys(self):
        """Test mixed sets place all numbered files before unnumbered ones."""
        files = [
            Path("intro.mp3"),
            Path("track_02_of_03.mp3"),
            Path("Zeta.mp3"),
            Path("track_01_of_03.mp3"),
            Path("99_bonus_.mp3"),
        ]

        assert _names(compute_order(files)) == [
            "track_01_of_03.mp3",
            "track_02_of_03.mp3",
            "99_bonus_.mp3",
            "Zeta.mp3",
            "intro.mp3",
        ]

    def test_equal_keys_keep_discovery_order(self):
        """Test ties are broken by input position."""
        files = [Path("b_1_x.mp3"), Path("a_1_x.mp3")]

        assert _names(compute_order(files)) == ["b_1_x.mp3", "a_1_x.mp3"]
        assert _names(compute_order(list(reversed(files)))) == ["a_1_x.mp3", "b_1_x.mp3"]

    def test_space_separated_numbers_order_by_name(self):
        """Test numerals delimited by spaces or dashes do not collapse to one key."""
        files = [Path("Vol. 2 - 10 Song.mp3"), Path("Vol. 2 - 09 Song.mp3")]

        for permutation in itertools.permutations(files):
            assert _names(compute_order(permutation)) == [
                "Vol. 2 - 09 Song.mp3",
                "Vol. 2 - 10 Song.mp3",
            ]

    def test_deterministic(self):
        """Test repeated calls return the same sequence."""
        files = [Path(name) for name in ["c.mp3", "track_2_of_3.mp3", "a_5_.mp3", "b.mp3"]]

        first = compute_order(files)
        assert all(compute_order(files) == first for _ in range(5))

    def test_only_file_name_is_considered(self):
        """Test numerals in parent directories do not affect the key."""
        files = [Path("/music/disc_1_/b.mp3"), Path("/music/disc_2_/a.mp3")]

        assert _names(compute_order(files)) == ["a.mp3", "b.mp3"]

    def test_duplicates_kept_once(self):
        """Test a path listed twice is copied once."""
        files = [Path("x.mp3"), Path("x.mp3")]

        assert compute_order(files) == [Path("x.mp3")]

    def test_empty_input(self):
        """Test an empty set orders to an empty list."""
        assert compute_order([]) == []


class TestDiscoverFiles:
    """Test source file discovery."""

    def test_recursive_files_only(self, tmp_path):
        """Test nested files are found and directories are skipped."""
        (tmp_path / "b.mp3").write_bytes(b"b")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.mp3").write_bytes(b"a")
        (tmp_path / "empty").mkdir()

        assert discover_files(tmp_path) == [tmp_path / "b.mp3", tmp_path / "sub" / "a.mp3"]

    def test_stable_order(self, album):
        """Test discovery order does not depend on creation order."""
        assert discover_files(album) == sorted(discover_files(album))
