"""
Unit tests for body streaming and server-side substitution.
"""

import io

import pytest

from webworker.exceptions import ResourceReadError, ResponseWriteError
from webworker.http.content import (
    ContentWriter,
    NOT_FOUND_BODY,
    substitute,
    write_content,
)
from webworker.http.request import Found, NOT_FOUND

from conftest import FIXED_NOW, FIXED_NOW_TEXT, PLAIN_HTML


class BrokenWriter:
    def write(self, data):
        raise ConnectionResetError("connection reset by peer")


def serve(path, identity="Test Identity"):
    output = io.BytesIO()
    written = ContentWriter(identity).write(output, Found(path), FIXED_NOW)
    return output.getvalue(), written


class TestSubstitute:
    """Tests for token replacement on a single line."""

    def test_every_occurrence_replaced(self):
        line = b"<cs371date>|<cs371server>|<cs371date>|<cs371server>\n"
        assert substitute(line, b"NOW", b"ME") == b"NOW|ME|NOW|ME\n"

    def test_line_without_tokens_untouched(self):
        assert substitute(b"<p>hello</p>\r\n", b"NOW", b"ME") == b"<p>hello</p>\r\n"

    def test_partial_token_untouched(self):
        assert substitute(b"<cs371date <cs371serv>", b"NOW", b"ME") == b"<cs371date <cs371serv>"


class TestNotFoundBody:
    """Tests for the fixed 404 document."""

    def test_writes_fixed_body(self):
        output = io.BytesIO()
        written = ContentWriter("Test Identity").write(output, NOT_FOUND)

        assert output.getvalue() == NOT_FOUND_BODY
        assert written == len(NOT_FOUND_BODY)
        assert output.getvalue().startswith(b"<html><h1>404 NOT FOUND!</h1><body>")
        assert output.getvalue().endswith(b"</body></html>")


class TestStreaming:
    """Tests for streaming a Found resource."""

    def test_round_trip_up_to_closing_tag(self, server_root):
        """Token-free documents go out byte for byte, CRLFs included."""
        body, written = serve(server_root / "plain.html")

        expected = PLAIN_HTML[:PLAIN_HTML.index(b"</html>\r\n") + len(b"</html>\r\n")]
        assert body == expected
        assert written == len(expected)
        assert b"trailing junk" not in body

    def test_tokens_replaced(self, server_root):
        body, _ = serve(server_root / "index.html")

        assert b"<cs371server>" not in body
        assert b"<cs371date>" not in body
        assert f"Served by Test Identity on {FIXED_NOW_TEXT}".encode() in body

    def test_stops_after_closing_tag_line(self, server_root):
        body, _ = serve(server_root / "index.html")

        assert body.endswith(b"</html>\n")
        assert b"never sent" not in body

    def test_closing_tag_mid_line(self, tmp_path):
        doc = tmp_path / "mid.html"
        doc.write_bytes(b"<html><p>a</p></html> tail <cs371server>\nnext line\n")

        body, _ = serve(doc, identity="X")
        assert body == b"<html><p>a</p></html> tail X\n"

    def test_cr_only_line_endings(self, tmp_path):
        """Bare "\\r" ends a line, so nothing after the </html> line leaks."""
        doc = tmp_path / "classic-mac.html"
        doc.write_bytes(b"<html>\r<body>x</body>\r</html>\rSECRET trailing\r")

        body, written = serve(doc)

        assert body == b"<html>\r<body>x</body>\r</html>\r"
        assert written == len(body)
        assert b"SECRET" not in body

    def test_mixed_line_endings_kept(self, tmp_path):
        doc = tmp_path / "mixed.html"
        doc.write_bytes(b"<html>\r\n<p><cs371server></p>\r<p>b</p>\n</html>\n")

        body, _ = serve(doc, identity="Srv")
        assert body == b"<html>\r\n<p>Srv</p>\r<p>b</p>\n</html>\n"

    def test_many_tokens_on_one_line(self, tmp_path):
        doc = tmp_path / "many.html"
        doc.write_bytes(b"<cs371date> <cs371server> <cs371date> <cs371server></html>\n")

        body, _ = serve(doc, identity="Srv")
        assert body == f"{FIXED_NOW_TEXT} Srv {FIXED_NOW_TEXT} Srv</html>\n".encode()

    def test_no_closing_tag_streams_to_end(self, server_root):
        """Without </html> the whole file goes out, unterminated last line included."""
        body, _ = serve(server_root / "notes.txt")
        assert body == b"first\nsecond\nlast without newline"

    def test_empty_file(self, tmp_path):
        doc = tmp_path / "empty.html"
        doc.write_bytes(b"")

        assert serve(doc) == (b"", 0)

    def test_vanished_file(self, tmp_path):
        gone = tmp_path / "gone.html"

        with pytest.raises(ResourceReadError) as exc_info:
            serve(gone)

        assert exc_info.value.path == gone

    def test_write_failure(self, server_root):
        with pytest.raises(ResponseWriteError):
            ContentWriter("Test Identity").write(BrokenWriter(), Found(server_root / "index.html"), FIXED_NOW)

    def test_write_content_shorthand(self, server_root):
        output = io.BytesIO()
        write_content(output, Found(server_root / "plain.html"), "Test Identity", FIXED_NOW)

        assert output.getvalue().startswith(b"<html>\r\n")
