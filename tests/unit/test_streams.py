"""Tests for stream sanitizing and line assembly."""

from runner.streams import LineAssembler, split_keepends, strip_ansi


class TestStripAnsi:
    """Tests for strip_ansi."""

    def test_removes_color_codes(self):
        """Should remove SGR color sequences."""
        assert strip_ansi("\x1b[31mHello\x1b[0m") == "Hello"

    def test_removes_cursor_sequences(self):
        """Should remove cursor movement and erase sequences."""
        assert strip_ansi("\x1b[2J\x1b[1;1HBoot") == "Boot"

    def test_keeps_plain_text(self):
        """Should leave text without escapes untouched."""
        text = "Loading unix... [OK] 100%; done"
        assert strip_ansi(text) == text

    def test_keeps_surrounding_bytes(self):
        """Should only drop the escape substrings."""
        assert strip_ansi("a\x1b[1mb\x1b[;mc") == "abc"

    def test_ignores_non_csi_escape(self):
        """Should not touch a lone ESC that is not a CSI sequence."""
        assert strip_ansi("\x1bcReset") == "\x1bcReset"

    def test_private_mode_sequence_not_stripped(self):
        """'?' is outside the CSI parameter set handled here."""
        assert strip_ansi("\x1b[?25lx") == "\x1b[?25lx"


class TestSplitKeepends:
    """Tests for split_keepends."""

    def test_splits_after_newlines(self):
        assert list(split_keepends(b"a\nb\nc")) == [b"a\n", b"b\n", b"c"]

    def test_trailing_newline(self):
        assert list(split_keepends(b"a\n")) == [b"a\n"]

    def test_empty(self):
        assert list(split_keepends(b"")) == []


class TestLineAssembler:
    """Tests for LineAssembler."""

    def test_returns_complete_lines(self):
        """Should return every line terminated in the chunk."""
        assembler = LineAssembler()
        assert assembler.feed(b"one\ntwo\n") == ["one", "two"]
        assert assembler.pending == b""

    def test_joins_line_split_across_chunks(self):
        """Should keep partial line until its newline arrives."""
        assembler = LineAssembler()
        assert assembler.feed(b"hel") == []
        assert assembler.feed(b"lo\nwor") == ["hello"]
        assert assembler.pending == b"wor"

    def test_strips_carriage_return(self):
        """Should remove CRLF endings from serial output."""
        assembler = LineAssembler()
        assert assembler.feed(b"boot\r\n") == ["boot"]

    def test_flush_returns_remainder(self):
        """Should return the unterminated tail at end of stream."""
        assembler = LineAssembler()
        assembler.feed(b"last")
        assert assembler.flush() == "last"
        assert assembler.flush() is None

    def test_invalid_utf8_is_replaced(self):
        """Should decode invalid bytes with replacement characters."""
        assembler = LineAssembler()
        assert assembler.feed(b"\xffok\n") == ["�ok"]
