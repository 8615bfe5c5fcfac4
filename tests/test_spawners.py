import pytest

from shinystash.spawners import (
    MIN_LINE_LENGTH,
    SkipReason,
    SpawnerCatalog,
    SpawnerLocation,
    parse_spawner_line,
)

LINE = '"Vert Plaza" - 00000000AAAAAAAA - spawner_01 - V3f(12.5, -3.0, 400.25)'


def test_parse_valid_line():
    loc = parse_spawner_line(LINE, 2)
    assert isinstance(loc, SpawnerLocation)
    assert loc.hash == 0xAAAAAAAA
    assert (loc.x, loc.y, loc.z) == (12.5, -3.0, 400.25)
    assert loc.map_index == 2
    assert loc.name == "Vert Plaza"


def test_parse_bare_name_and_lowercase_hash():
    loc = parse_spawner_line("  Rouge Sector  - 0123456789abcdef - V3f(1,2,3)", 0)
    assert loc.name == "Rouge Sector"
    assert loc.hash == 0x0123456789ABCDEF


@pytest.mark.parametrize(
    "line, reason",
    [
        ("", SkipReason.TOO_SHORT),
        ("short - line", SkipReason.TOO_SHORT),
        ("no delimiter anywhere in this line V3f(1, 2, 3)", SkipReason.NO_DELIMITER),
        ("Name - 00000000AAAAAAAA V3f(1, 2, 3)", SkipReason.NO_DELIMITER),
        ("Name - 00AAAA - spawner V3f(1, 2, 3)", SkipReason.BAD_HASH),
        ("Name - 00000000AAAAAAAZ - spawner V3f(1, 2, 3)", SkipReason.BAD_HASH),
        ("Name - 00000000AAAAAAAA - spawner without coordinates", SkipReason.NO_COORDINATES),
        ("Name - 00000000AAAAAAAA - spawner V3f(1, 2, 3", SkipReason.NO_COORDINATES),
        ("Name - 00000000AAAAAAAA - spawner V3f(1, 2)", SkipReason.BAD_COORDINATES),
        ("Name - 00000000AAAAAAAA - spawner V3f(1, x, 3)", SkipReason.BAD_COORDINATES),
    ],
)
def test_skip_reasons(line, reason):
    assert parse_spawner_line(line, 0) is reason


def test_add_text_skips_bad_lines():
    catalog = SpawnerCatalog()
    added = catalog.add_text("garbage\n" + LINE + "\n\nName - XYZ - V3f(1,2,3)\n", 0)
    assert added == 1
    assert 0xAAAAAAAA in catalog
    assert catalog.skipped[SkipReason.TOO_SHORT] == 1
    assert catalog.skipped[SkipReason.BAD_HASH] == 1


def test_load_tier_files(tmp_path):
    (tmp_path / "t1_point_spawners.txt").write_text(
        LINE + "\r\n" + '"Plaza" - 00000000BBBBBBBB - x - V3f(1.0, 2.0, 3.0)\r\n',
        encoding="utf-8",
    )
    (tmp_path / "t3_point_spawners.txt").write_text(
        '"Sewer" - 00000000AAAAAAAA - x - V3f(7.0, 8.0, 9.0)\n', encoding="utf-8"
    )
    catalog = SpawnerCatalog.load(str(tmp_path))

    assert len(catalog) == 2
    # later tier wins on a repeated hash
    loc = catalog.find(0xAAAAAAAA)
    assert loc.map_index == 2
    assert loc.name == "Sewer"
    assert [l.hash for l in catalog.on_map(0)] == [0xBBBBBBBB]
    assert catalog.find(0xCCCC) is None


def test_load_empty_directory(tmp_path):
    assert len(SpawnerCatalog.load(str(tmp_path))) == 0


def test_min_length_counts_characters():
    assert MIN_LINE_LENGTH == 20
    assert parse_spawner_line("A - 0123456789ABCDE", 0) is SkipReason.TOO_SHORT
    # 19 characters but 20 bytes in UTF-8
    assert parse_spawner_line("é - 0123456789ABCDE", 0) is SkipReason.TOO_SHORT
    assert parse_spawner_line("A - 0123456789ABCDEF", 0) is SkipReason.NO_DELIMITER
