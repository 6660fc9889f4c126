"""Tests for the import CLI."""

import requests

from clientimport import cli

from .conftest import FakeResponse

VALID_CSV = "firstName,lastName,email,price\nJane,Doe,jane@x.com,100\n"


class TestImportCLI:
    """Test cases for the clientimport command."""

    def setup_method(self):
        self.posts = []

    def _patch_post(self, monkeypatch, response):
        def fake_post(session, url, **kwargs):
            self.posts.append((url, kwargs))
            return response
        monkeypatch.setattr(requests.Session, "post", fake_post)

    def test_check_ok(self, tmp_path, capsys, monkeypatch):
        """--check validates without uploading."""
        self._patch_post(monkeypatch, FakeResponse(201))
        path = tmp_path / "roster.csv"
        path.write_text(VALID_CSV)

        assert cli.main([str(path), "--check"]) == 0
        assert "roster.csv: OK" in capsys.readouterr().out
        assert self.posts == []

    def test_check_prints_price_warning(self, tmp_path, capsys):
        """Lint warnings are shown even for passing files."""
        path = tmp_path / "roster.csv"
        path.write_text("firstName,lastName,email\nJane,Doe,jane@x.com\n")

        assert cli.main([str(path), "--check"]) == 0
        assert "Warning: Optional column 'price' is missing" in capsys.readouterr().out

    def test_invalid_file_exits_1(self, tmp_path, capsys, monkeypatch):
        """Validation failures print the summary and skip the upload."""
        self._patch_post(monkeypatch, FakeResponse(201))
        path = tmp_path / "roster.csv"
        path.write_text("firstName,lastName,email,price\nJane,Doe,nope,1\n")

        assert cli.main([str(path)]) == cli.EXIT_INVALID
        err = capsys.readouterr().err
        assert "CSV validation failed in roster.csv (1 issue)" in err
        assert "Row 2: invalid 'email' value -> nope" in err
        assert self.posts == []

    def test_missing_file(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "absent.csv")]) == cli.EXIT_INVALID
        assert "not found" in capsys.readouterr().err

    def test_upload(self, tmp_path, capsys, monkeypatch):
        """Clean files are uploaded to --base-url with --token."""
        self._patch_post(monkeypatch, FakeResponse(201, {"imported": 1}))
        path = tmp_path / "roster.csv"
        path.write_text(VALID_CSV)

        code = cli.main([str(path), "--base-url", "http://gym.test/api", "--token", "t0k"])

        assert code == 0
        assert "Import completed (201)" in capsys.readouterr().out
        assert len(self.posts) == 1
        url, kwargs = self.posts[0]
        assert url == "http://gym.test/api/admins/clients/import"
        assert kwargs["headers"]["Authorization"] == "Bearer t0k"

    def test_upload_failure_exits_2(self, tmp_path, capsys, monkeypatch):
        """Upstream rejections exit with code 2."""
        self._patch_post(monkeypatch, FakeResponse(400, {"error": "Invalid gymId"}))
        path = tmp_path / "roster.csv"
        path.write_text(VALID_CSV)

        assert cli.main([str(path), "--base-url", "http://gym.test/api"]) == cli.EXIT_UPLOAD_FAILED
        assert "Upload failed: Invalid gymId" in capsys.readouterr().err
