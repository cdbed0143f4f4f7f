"""远程资源下载测试"""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from ngxbuild.core.exceptions import FetchError, ValidationError
from ngxbuild.core.fetcher import Fetcher, is_present

URL = "https://nginx.org/download/nginx-1.24.0.tar.gz"


class TestFetch:
    def test_downloads_to_last_url_segment(self, tmp_path: Path, fake_opener) -> None:
        opener = fake_opener({URL: b"payload"})
        path = Fetcher(tmp_path, opener=opener).fetch(URL)
        assert path == tmp_path / "nginx-1.24.0.tar.gz"
        assert path.read_bytes() == b"payload"
        assert opener.requests == [URL]

    def test_present_file_skips_network(self, tmp_path: Path, fake_opener) -> None:
        (tmp_path / "nginx-1.24.0.tar.gz").write_bytes(b"cached")
        opener = fake_opener({URL: b"fresh"})
        path = Fetcher(tmp_path, opener=opener).fetch(URL)
        assert path.read_bytes() == b"cached"
        assert opener.requests == []

    def test_empty_file_is_downloaded_again(self, tmp_path: Path, fake_opener) -> None:
        (tmp_path / "nginx-1.24.0.tar.gz").write_bytes(b"")
        opener = fake_opener({URL: b"fresh"})
        path = Fetcher(tmp_path, opener=opener).fetch(URL)
        assert path.read_bytes() == b"fresh"
        assert opener.requests == [URL]

    def test_network_error_leaves_no_file(self, tmp_path: Path, fake_opener) -> None:
        with pytest.raises(FetchError, match="下载失败"):
            Fetcher(tmp_path, opener=fake_opener()).fetch(URL)
        assert list(tmp_path.iterdir()) == []

    def test_interrupted_stream_leaves_no_partial_file(self, tmp_path: Path) -> None:
        class Broken(io.BytesIO):
            def read(self, *args):
                if self.tell() > 0:
                    raise ConnectionResetError("reset by peer")
                return super().read(4)

        with pytest.raises(FetchError):
            Fetcher(tmp_path, opener=lambda url: Broken(b"partial-data")).fetch(URL)
        assert not is_present(tmp_path / "nginx-1.24.0.tar.gz")
        assert list(tmp_path.iterdir()) == []

    def test_non_http_scheme_rejected(self, tmp_path: Path, fake_opener) -> None:
        opener = fake_opener()
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            Fetcher(tmp_path, opener=opener).fetch("file:///etc/nginx-1.0.tar.gz")
        assert opener.requests == []
