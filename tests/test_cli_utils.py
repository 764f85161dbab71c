"""Tests for CLI utility functions."""

from subweave.cli.utils import expand_inputs, read_subtitle, write_subtitle


class TestExpandInputs:
    def test_txt_file_expansion(self, tmp_path):
        txt_file = tmp_path / "files.txt"
        txt_file.write_text("a.srt\n# comment\nsub/b.vtt\n\n")
        result = expand_inputs([str(txt_file)])
        assert result == ["a.srt", "sub/b.vtt"]

    def test_txt_file_skips_blank_lines(self, tmp_path):
        txt_file = tmp_path / "list.txt"
        txt_file.write_text("\n\nhello.ass\n\n")
        result = expand_inputs([str(txt_file)])
        assert result == ["hello.ass"]

    def test_glob_expansion(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "a.srt").touch()
        (tmp_path / "b.srt").touch()
        (tmp_path / "c.vtt").touch()
        result = expand_inputs(["*.srt"])
        assert len(result) == 2
        assert any("a.srt" in r for r in result)
        assert any("b.srt" in r for r in result)

    def test_unmatched_glob_passes_through(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert expand_inputs(["*.ssa"]) == ["*.ssa"]

    def test_regular_path_passthrough(self):
        result = expand_inputs(["/some/path/movie.srt"])
        assert result == ["/some/path/movie.srt"]

    def test_mixed_inputs(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "movie.ass").touch()
        txt_file = tmp_path / "list.txt"
        txt_file.write_text("other.srt\n")
        result = expand_inputs(["*.ass", str(txt_file), "plain.vtt"])
        assert result == ["movie.ass", "other.srt", "plain.vtt"]


class TestSubtitleIO:
    def test_line_endings_survive_read_and_write(self, tmp_path):
        text = "1\r\n00:00:01,000 --> 00:00:02,000\r\nHi\rthere\n"
        path = write_subtitle(tmp_path / "out" / "a.srt", text)
        assert path.read_bytes() == text.encode("utf-8")
        assert read_subtitle(path) == text
