from marble_machine.config.constants import (
    AIR_GLYPHS,
    BYTE_MODULUS,
    CELL_WIDTH,
    DIRECTION_MARKERS,
    FLUSH_THRESHOLD,
    KEY_CHARACTERS,
    LABEL_PREFIX,
    MAX_STEPS,
    TELEPORTER_PREFIX,
)


def test_cell_width_is_two() -> None:
    assert CELL_WIDTH == 2


def test_byte_modulus_is_256() -> None:
    assert BYTE_MODULUS == 256


def test_air_glyphs_are_cell_width() -> None:
    assert all(len(glyph) == CELL_WIDTH for glyph in AIR_GLYPHS)


def test_direction_markers_are_distinct() -> None:
    assert len(set(DIRECTION_MARKERS)) == 4


def test_key_characters_are_base36() -> None:
    assert len(KEY_CHARACTERS) == 36
    assert len(set(KEY_CHARACTERS)) == 36


def test_key_prefixes_are_not_operator_characters() -> None:
    assert LABEL_PREFIX != TELEPORTER_PREFIX
    assert LABEL_PREFIX not in DIRECTION_MARKERS
    assert TELEPORTER_PREFIX not in DIRECTION_MARKERS


def test_max_steps_is_positive() -> None:
    assert isinstance(MAX_STEPS, int) and MAX_STEPS > 0


def test_flush_threshold_is_large() -> None:
    assert isinstance(FLUSH_THRESHOLD, int) and FLUSH_THRESHOLD >= 1024
