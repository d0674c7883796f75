"""Tests for terminal key decoding."""

import pytest

from ptrap.thread.key_reader_thread import decode_keys


class TestDecodeKeys:
    """Test suite for decode_keys."""

    def test_printable_characters(self):
        assert decode_keys("wor") == ["w", "o", "r"]

    def test_pipe_is_a_plain_key(self):
        assert decode_keys("|") == ["|"]

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("\x03", "ctrl+c"),
            ("\x04", "ctrl+d"),
            ("\x19", "ctrl+y"),
            ("\x15", "ctrl+u"),
            ("\x1d", "ctrl+]"),
            ("\r", "enter"),
            ("\x7f", "backspace"),
        ],
    )
    def test_control_keys(self, raw, expected):
        assert decode_keys(raw) == [expected]

    def test_bare_escape_is_ctrl_open_bracket(self):
        assert decode_keys("\x1b") == ["esc"]

    def test_csi_sequences(self):
        assert decode_keys("\x1b[5~\x1b[6~\x1b[A") == ["pageup", "pagedown", "up"]

    def test_unknown_sequence_dropped(self):
        assert decode_keys("\x1b[1;5Cx") == ["x"]

    def test_unicode_text(self):
        assert decode_keys("é") == ["é"]

    def test_unmapped_control_dropped(self):
        assert decode_keys("\x01a") == ["a"]
