from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from bashfun.fetcher.fetcher import (
    DestinationExistsError,
    DownloadError,
    Fetcher,
    InvalidRefError,
)


def mock_session(chunks=None, status_error=None, stream_error=None) -> MagicMock:
    response = MagicMock()
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if stream_error is not None:

        def broken_stream(chunk_size):
            yield b"partial"
            raise stream_error

        response.iter_content.side_effect = broken_stream
    else:
        response.iter_content.return_value = chunks or []

    session = MagicMock()
    session.get.return_value.__enter__.return_value = response
    return session


@pytest.fixture
def fetcher(core):
    with Fetcher(core) as f:
        yield f


class TestRef:
    def test_default_ref(self, fetcher):
        assert fetcher.read_ref() == "master"

    @pytest.mark.parametrize("ref", ["v1.2.3", "feature_x", "release-2024.01", "abc123"])
    def test_valid(self, fetcher, core, ref):
        core.env["INPUT_REF"] = ref
        assert fetcher.read_ref() == ref

    @pytest.mark.parametrize("ref", ["feature/x", "a b", "../etc", "ref?x=1", "tag~1"])
    def test_invalid(self, fetcher, core, ref):
        core.env["INPUT_REF"] = ref
        with pytest.raises(InvalidRefError, match="Invalid ref input"):
            fetcher.read_ref()

    def test_url(self, fetcher):
        assert fetcher.build_url("v1") == "https://github.com/actions-rindeal/bash-fun/raw/v1/fun.sh"

    def test_url_custom_source(self, core):
        with Fetcher(core, source_repo="me/fork", source_path="lib/fun.sh", github_url="https://ghe.local/") as f:
            assert f.build_url("main") == "https://ghe.local/me/fork/raw/main/lib/fun.sh"


class TestDest:
    def test_home_expansion(self, fetcher, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert fetcher.resolve_dest("~/fun.sh") == tmp_path / "fun.sh"

    def test_default_dest(self, fetcher, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert fetcher.read_dest() == tmp_path / "fun.sh"

    def test_relative_is_made_absolute(self, fetcher, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert fetcher.resolve_dest("lib/fun.sh") == Path.cwd() / "lib" / "fun.sh"

    def test_existing_destination(self, fetcher, core, tmp_path):
        dest = tmp_path / "fun.sh"
        dest.write_text("already here")
        core.env["INPUT_DEST"] = str(dest)

        with pytest.raises(DestinationExistsError):
            fetcher.read_dest()
        assert dest.read_text() == "already here"


class TestDownload:
    def test_writes_chunks(self, fetcher, tmp_path):
        fetcher.session = mock_session([b"#!/bin/bash\n", b"", b"echo fun\n"])
        dest = tmp_path / "sub" / "fun.sh"

        written = fetcher.download("https://example.invalid/fun.sh", dest)

        assert written == len(b"#!/bin/bash\necho fun\n")
        assert dest.read_bytes() == b"#!/bin/bash\necho fun\n"
        fetcher.session.get.assert_called_once_with(
            "https://example.invalid/fun.sh", stream=True, timeout=fetcher.timeout
        )

    def test_http_error(self, fetcher, tmp_path):
        fetcher.session = mock_session(status_error=requests.HTTPError("404 Client Error: Not Found"))
        dest = tmp_path / "fun.sh"

        with pytest.raises(DownloadError, match="Failed to download file: 404 Client Error"):
            fetcher.download("https://example.invalid/fun.sh", dest)
        assert not dest.exists()

    def test_partial_file_removed(self, fetcher, tmp_path):
        fetcher.session = mock_session(stream_error=requests.ConnectionError("connection reset"))
        dest = tmp_path / "fun.sh"

        with pytest.raises(DownloadError, match="connection reset"):
            fetcher.download("https://example.invalid/fun.sh", dest)
        assert not dest.exists()

    def test_existing_file_is_kept(self, fetcher, tmp_path):
        fetcher.session = mock_session([b"new"])
        dest = tmp_path / "fun.sh"
        dest.write_bytes(b"old")

        with pytest.raises(DestinationExistsError):
            fetcher.download("https://example.invalid/fun.sh", dest)
        assert dest.read_bytes() == b"old"

    def test_parent_blocked_by_file(self, fetcher, tmp_path):
        fetcher.session = mock_session([b"new"])
        blocker = tmp_path / "lib"
        blocker.write_bytes(b"not a directory")
        dest = blocker / "fun.sh"

        with pytest.raises(DownloadError, match="Failed to create destination directory"):
            fetcher.download("https://example.invalid/fun.sh", dest)
        assert blocker.read_bytes() == b"not a directory"
        fetcher.session.get.assert_not_called()


class TestRun:
    @pytest.mark.asyncio
    async def test_success(self, fetcher, core, stdout, tmp_path):
        dest = tmp_path / "fun.sh"
        core.env["INPUT_REF"] = "v2"
        core.env["INPUT_DEST"] = str(dest)
        fetcher.session = mock_session([b"fun"])

        assert await fetcher.run() == dest
        assert dest.read_bytes() == b"fun"
        fetcher.session.get.assert_called_once_with(
            "https://github.com/actions-rindeal/bash-fun/raw/v2/fun.sh", stream=True, timeout=30.0
        )
        lines = stdout.getvalue().splitlines()
        assert lines[0] == "::group::Downloading https://github.com/actions-rindeal/bash-fun/raw/v2/fun.sh"
        assert lines[-1] == "::endgroup::"

    @pytest.mark.asyncio
    async def test_invalid_ref_does_not_download(self, fetcher, core, tmp_path):
        core.env["INPUT_REF"] = "bad/ref"
        core.env["INPUT_DEST"] = str(tmp_path / "fun.sh")
        fetcher.session = mock_session([b"fun"])

        with pytest.raises(InvalidRefError):
            await fetcher.run()
        fetcher.session.get.assert_not_called()
        assert not (tmp_path / "fun.sh").exists()

    @pytest.mark.asyncio
    async def test_download_error_closes_group(self, fetcher, core, stdout, tmp_path):
        core.env["INPUT_DEST"] = str(tmp_path / "fun.sh")
        fetcher.session = mock_session(stream_error=requests.ConnectionError("timed out"))

        with pytest.raises(DownloadError):
            await fetcher.run()
        assert stdout.getvalue().splitlines()[-1] == "::endgroup::"


def test_cleanup_closes_session(core):
    session = MagicMock()
    with Fetcher(core) as f:
        f.session = session
    session.close.assert_called_once()


def test_resolve_dest_returns_path(fetcher):
    assert isinstance(fetcher.resolve_dest("/tmp/fun.sh"), Path)
