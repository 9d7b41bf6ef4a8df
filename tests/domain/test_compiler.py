"""Tests for marble_machine.domain.compiler module."""

from __future__ import annotations

import pytest

from marble_machine.domain.compiler import CompilationError, Diagnostic, compile_source
from marble_machine.domain.span import Span


class TestGridShape:
    def test_short_rows_are_padded_with_air(self) -> None:
        contraption = compile_source("######\n##").contraption
        assert (contraption.width, contraption.height) == (3, 2)
        assert [cell.kind.name for cell in contraption.grid[1]] == ["wall", "air", "air"]

    def test_trailing_odd_character_is_ignored(self) -> None:
        result = compile_source("##o")
        assert result.ok
        assert result.contraption.width == 1

    def test_trailing_spaces_compile_to_air(self) -> None:
        result = compile_source("##    \n####")
        assert result.ok
        assert result.contraption.width == 3
        assert [cell.kind.name for cell in result.contraption.grid[0]] == ["wall", "air", "air"]
        assert [cell.kind.name for cell in result.contraption.grid[1]] == ["wall", "wall", "air"]

    def test_glyph_followed_by_a_space_is_reported(self) -> None:
        result = compile_source("##o ")
        assert result.diagnostics == [
            Diagnostic("Unknown symbol 'o ' at 1:3", Span(1, 3, 1, 4)),
        ]
        assert result.contraption.width == 2
        assert result.contraption.grid[0][1].kind.name == "error"

    def test_lone_trailing_space_is_the_ignored_odd_character(self) -> None:
        result = compile_source("#  \n####")
        assert result.diagnostics == [
            Diagnostic("Unknown symbol '# ' at 1:1", Span(1, 1, 1, 2)),
        ]
        assert result.contraption.width == 2
        assert result.contraption.grid[0][0].kind.name == "error"
        assert result.contraption.grid[0][1].kind.name == "air"

    def test_windows_line_endings(self) -> None:
        contraption = compile_source("##\r\n++\r\n").contraption
        assert contraption.height == 2
        assert contraption.grid[1][0].kind.name == "increment"

    def test_empty_source(self) -> None:
        result = compile_source("")
        assert result.ok
        assert (result.contraption.width, result.contraption.height) == (0, 0)

    def test_cells_carry_position_and_span(self) -> None:
        contraption = compile_source("....\n..oo").contraption
        cell = contraption.grid[1][1]
        assert cell.position == (1, 1)
        assert cell.span == Span(2, 3, 2, 4)


class TestMarbles:
    @pytest.mark.parametrize(("chunk", "value"), [("00", 0), ("0a", 10), ("0A", 10), ("ff", 255)])
    def test_hex_chunk_places_marble_on_air(self, chunk: str, value: int) -> None:
        contraption = compile_source(f"##{chunk}").contraption
        assert [(m.value, m.position) for m in contraption.marbles] == [(value, (1, 0))]
        assert contraption.grid[0][1].kind.name == "air"

    def test_marbles_in_row_major_order(self) -> None:
        contraption = compile_source("..02\n01..").contraption
        assert [m.value for m in contraption.marbles] == [2, 1]


class TestDiagnostics:
    def test_unknown_symbol_becomes_error_cell(self) -> None:
        result = compile_source("##qq")
        assert not result.ok
        cell = result.contraption.grid[0][1]
        assert cell.kind.name == "error"
        assert cell.is_solid(result.contraption)
        assert cell.render() == "!!"

    def test_diagnostic_message_and_span(self) -> None:
        result = compile_source("####\n..#q")
        assert result.diagnostics == [
            Diagnostic("Unknown symbol '#q' at 2:3", Span(2, 3, 2, 4)),
        ]

    def test_diagnostics_keep_source_order(self) -> None:
        result = compile_source("zz..\n..yy")
        assert [d.span.start_line for d in result.diagnostics] == [1, 2]
        assert [d.span.start_column for d in result.diagnostics] == [1, 3]

    def test_glyph_match_is_case_sensitive(self) -> None:
        assert not compile_source("OO").ok
        assert compile_source("oo").ok

    def test_compilation_error_carries_diagnostics(self) -> None:
        diagnostics = compile_source("zz").diagnostics
        error = CompilationError(diagnostics)
        assert error.diagnostics == diagnostics
        assert "1 diagnostic(s)" in str(error)
