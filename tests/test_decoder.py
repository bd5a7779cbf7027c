"""Tests for _decoder.py: the dotenv text decoder."""

import os
import textwrap

import pytest

from dotenv_registry._decoder import Decoder, DotEnvDecoder
from dotenv_registry._types import DecodeError


def _decode(text: str) -> dict[str, str]:
    return DotEnvDecoder().decode(textwrap.dedent(text).encode("utf-8"))


PLAIN = """\
    OPTION_A=1
    OPTION_B=2
    OPTION_C= 3
    OPTION_D =4
    OPTION_E = 5
    OPTION_F =
    OPTION_G=
    OPTION_H=my string
"""

QUOTED = r"""
    OPTION_A='1'
    OPTION_B='2'
    OPTION_C=''
    OPTION_D='\n'
    OPTION_E="1"
    OPTION_F="2"
    OPTION_G=""
    OPTION_H="\n"
    OPTION_I='echo '"'"'asd'"'"''
    OPTION_J="first line
    second line
    third line"
    OPTION_K="Test#123"
    OPTION_Z = "last value"
"""


class TestPlainValues:
    def test_plain_file(self):
        assert _decode(PLAIN) == {
            "OPTION_A": "1",
            "OPTION_B": "2",
            "OPTION_C": "3",
            "OPTION_D": "4",
            "OPTION_E": "5",
            "OPTION_F": "",
            "OPTION_G": "",
            "OPTION_H": "my string",
        }

    def test_keys_are_upper_cased(self):
        assert _decode("lower_key=1") == {"LOWER_KEY": "1"}

    def test_last_occurrence_wins(self):
        assert _decode("A=1\nA=2\n") == {"A": "2"}

    def test_colon_separator(self):
        assert _decode("HOST: localhost") == {"HOST": "localhost"}

    def test_equals_wins_over_colon(self):
        assert _decode("URL=http://example.com:8080") == {"URL": "http://example.com:8080"}

    def test_value_may_contain_equals(self):
        assert _decode("DSN=user=app password=x") == {"DSN": "user=app password=x"}


class TestComments:
    def test_comment_and_blank_lines_skipped(self):
        doc = """\
            # leading comment

               # indented comment
            KEY=1
        """
        assert _decode(doc) == {"KEY": "1"}

    def test_inline_comment_stripped_from_unquoted_value(self):
        assert _decode("A=value # comment") == {"A": "value"}

    def test_hash_without_space_starts_comment(self):
        assert _decode("A=a#b") == {"A": "a"}

    def test_escaped_hash_is_literal(self):
        assert _decode(r"A=pass\#word") == {"A": "pass#word"}

    def test_hash_inside_quotes_is_literal(self):
        assert _decode('A="Test#123"') == {"A": "Test#123"}

    def test_comment_after_quoted_value(self):
        assert _decode('A="value"   # note') == {"A": "value"}


class TestQuoting:
    def test_quoted_file(self):
        assert _decode(QUOTED) == {
            "OPTION_A": "1",
            "OPTION_B": "2",
            "OPTION_C": "",
            "OPTION_D": "\\n",
            "OPTION_E": "1",
            "OPTION_F": "2",
            "OPTION_G": "",
            "OPTION_H": "\n",
            "OPTION_I": "echo 'asd'",
            "OPTION_J": "first line\nsecond line\nthird line",
            "OPTION_K": "Test#123",
            "OPTION_Z": "last value",
        }

    def test_double_quoted_newline(self):
        assert _decode(r'OPTION_D="\n"') == {"OPTION_D": "\n"}

    def test_double_quoted_carriage_return(self):
        assert _decode(r'A="a\rb"') == {"A": "a\rb"}

    def test_double_quoted_generic_escapes(self):
        assert _decode(r'A="say \"hi\" to C:\\temp\q"') == {"A": 'say "hi" to C:\\tempq'}

    def test_single_quoted_is_literal(self):
        assert _decode(r"A='C:\temp\n'") == {"A": r"C:\temp\n"}

    def test_single_quoted_escaped_quote(self):
        assert _decode(r"A='it\'s'") == {"A": "it's"}

    def test_whitespace_inside_quotes_kept(self):
        assert _decode('A="  padded  "') == {"A": "  padded  "}

    def test_adjacent_segments_concatenated(self):
        assert _decode("""A='one '"two"'three'""") == {"A": "one twothree"}

    def test_multiline_keeps_inner_indentation(self):
        doc = 'KEY="first\n  second\nthird"\nNEXT=1\n'
        assert DotEnvDecoder().decode(doc) == {"KEY": "first\n  second\nthird", "NEXT": "1"}

    def test_multiline_single_quoted(self):
        assert DotEnvDecoder().decode("K='a\nb'") == {"K": "a\nb"}

    def test_multiline_with_comment_on_closing_line(self):
        assert DotEnvDecoder().decode('K="a\nb" # done') == {"K": "a\nb"}


class TestEncodingDetails:
    def test_bom_stripped_from_bytes(self):
        assert DotEnvDecoder().decode(b"\xef\xbb\xbfKEY=1") == {"KEY": "1"}

    def test_bom_stripped_from_str(self):
        assert DotEnvDecoder().decode("\ufeffKEY=1") == {"KEY": "1"}

    def test_crlf_line_endings(self):
        assert DotEnvDecoder().decode(b'A=1\r\nB="x\r\ny"\r\n') == {"A": "1", "B": "x\ny"}

    def test_utf8_values(self):
        assert DotEnvDecoder().decode("A=spécial è".encode("utf-8")) == {"A": "spécial è"}

    def test_invalid_utf8_reports_line(self):
        with pytest.raises(DecodeError, match="line 2: invalid UTF-8") as excinfo:
            DotEnvDecoder().decode(b"A=1\nB=\xff\xfe\n")
        assert excinfo.value.line == 2
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_decoding_is_idempotent(self):
        data = textwrap.dedent(QUOTED).encode("utf-8")
        decoder = DotEnvDecoder()
        assert decoder.decode(data) == decoder.decode(data)


class TestLinesWithoutSeparator:
    def test_skipped_silently(self):
        doc = """\
            JUSTAWORD
            KEY=1
            another bare line
        """
        assert _decode(doc) == {"KEY": "1"}


class TestMalformedInput:
    def test_key_with_space_reports_line(self):
        doc = "\n".join(
            [
                "A=1",
                "# comment",
                "B=2",
                "",
                "C=3",
                "D=4",
                "BAD KEY=value",
                "E=5",
            ]
        )
        with pytest.raises(DecodeError, match="line 7") as excinfo:
            DotEnvDecoder().decode(doc)
        assert excinfo.value.line == 7

    def test_key_with_tab_rejected(self):
        with pytest.raises(DecodeError):
            DotEnvDecoder().decode("BAD\tKEY=1")

    def test_empty_key_rejected(self):
        with pytest.raises(DecodeError, match="empty key"):
            DotEnvDecoder().decode("=value")

    def test_unterminated_quote_reports_opening_line(self):
        doc = 'A=1\nB="never closed\nC=3\n'
        with pytest.raises(DecodeError, match="unterminated") as excinfo:
            DotEnvDecoder().decode(doc)
        assert excinfo.value.line == 2

    def test_decode_error_is_value_error(self):
        assert issubclass(DecodeError, ValueError)


class TestExport:
    def test_export_sets_environment_and_is_not_returned(self, forget_env):
        forget_env("DOTENV_REGISTRY_EXPORTED")

        result = _decode("export DOTENV_REGISTRY_EXPORTED=bar\nOTHER=1\n")

        assert result == {"OTHER": "1"}
        assert os.environ["DOTENV_REGISTRY_EXPORTED"] == "bar"

    def test_export_with_quoted_value(self, forget_env):
        forget_env("DOTENV_REGISTRY_EXPORTED")

        _decode(r"export DOTENV_REGISTRY_EXPORTED='\n'")

        assert os.environ["DOTENV_REGISTRY_EXPORTED"] == "\\n"

    def test_export_name_keeps_its_case(self, forget_env):
        forget_env("dotenv_registry_lower")

        _decode("export dotenv_registry_lower=1")

        assert os.environ.get("dotenv_registry_lower") == "1"

    def test_export_with_spaced_name_rejected(self):
        with pytest.raises(DecodeError):
            DotEnvDecoder().decode("export BAD NAME=1")


class TestDecoderProtocol:
    def test_default_decoder_satisfies_protocol(self):
        assert isinstance(DotEnvDecoder(), Decoder)

    def test_any_object_with_decode_satisfies_protocol(self):
        class Custom:
            def decode(self, data):
                return {}

        assert isinstance(Custom(), Decoder)
