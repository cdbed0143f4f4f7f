"""源码包解压测试"""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path

import pytest

from ngxbuild.core.exceptions import ExtractionError
from ngxbuild.core.extractor import archive_stem, dependency_name, extract


class TestNaming:
    @pytest.mark.parametrize(("filename", "stem", "name"), [
        ("pcre2-10.42.tar.gz", "pcre2-10.42", "pcre2"),
        ("zlib-1.3.tar.gz", "zlib-1.3", "zlib"),
        ("nginx-1.24.0.tar.gz", "nginx-1.24.0", "nginx"),
        ("openssl-3.0.7.tar.gz", "openssl-3.0.7", "openssl"),
    ])
    def test_stem_and_name(self, filename: str, stem: str, name: str) -> None:
        assert archive_stem(Path(filename)) == stem
        assert dependency_name(stem) == name

    def test_name_without_hyphen_raises(self) -> None:
        with pytest.raises(ExtractionError, match="无法从文件名推导依赖名"):
            dependency_name("zlib")


class TestExtract:
    def _write(self, tmp_path: Path, make_tarball, filename: str, wrapper: str, files: dict) -> Path:
        archive = tmp_path / filename
        archive.write_bytes(make_tarball(wrapper, files))
        return archive

    def test_strips_wrapper_directory(self, tmp_path: Path, make_tarball) -> None:
        archive = self._write(tmp_path, make_tarball, "zlib-1.3.tar.gz", "zlib-1.3", {
            "zlib.h": "/* zlib */",
            "contrib/README": "readme",
        })
        out = tmp_path / "src"
        src = extract(archive, out)
        assert src.name == "zlib"
        assert src.path == out / "zlib-1.3"
        assert (src.path / "zlib.h").read_text() == "/* zlib */"
        assert (src.path / "contrib" / "README").exists()
        assert not (src.path / "zlib-1.3").exists()

    def test_existing_directory_is_not_touched(self, tmp_path: Path, make_tarball) -> None:
        archive = self._write(tmp_path, make_tarball, "pcre2-10.42.tar.gz", "pcre2-10.42", {
            "configure": "#!/bin/sh\n",
        })
        out = tmp_path / "src"
        first = extract(archive, out)
        marker = first.path / "configure"
        marker.write_text("locally modified")
        # 第二次不需要读取源码包
        archive.unlink()

        second = extract(archive, out)
        assert second == first
        assert marker.read_text() == "locally modified"

    def test_unsafe_entries_are_skipped_and_counted(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tf:
            data = b"ok"
            good = tarfile.TarInfo("nginx-1.24.0/README")
            good.size = len(data)
            tf.addfile(good, io.BytesIO(data))
            link = tarfile.TarInfo("nginx-1.24.0/passwd")
            link.type = tarfile.SYMTYPE
            link.linkname = "/etc/passwd"
            tf.addfile(link)
        archive = tmp_path / "nginx-1.24.0.tar.gz"
        archive.write_bytes(buf.getvalue())

        with caplog.at_level(logging.WARNING):
            src = extract(archive, tmp_path / "src")

        assert (src.path / "README").read_text() == "ok"
        assert not (src.path / "passwd").exists()
        assert "跳过了 1 个条目" in caplog.text

    def test_corrupt_archive_raises_and_leaves_nothing(self, tmp_path: Path) -> None:
        archive = tmp_path / "zlib-1.3.tar.gz"
        archive.write_bytes(b"definitely not gzip")
        out = tmp_path / "src"
        with pytest.raises(ExtractionError, match="解压失败"):
            extract(archive, out)
        assert not (out / "zlib-1.3").exists()

    def test_truncated_archive_raises_and_leaves_nothing(self, tmp_path: Path, make_tarball) -> None:
        data = make_tarball("nginx-1.24.0", {
            "configure": "#!/bin/sh\n" * 200,
            "src/core/nginx.c": "int main(void) { return 0; }\n" * 200,
        })
        archive = tmp_path / "nginx-1.24.0.tar.gz"
        archive.write_bytes(data[: len(data) // 2])
        out = tmp_path / "src"
        with pytest.raises(ExtractionError, match="解压失败"):
            extract(archive, out)
        assert not (out / "nginx-1.24.0").exists()

    def test_interpreter_supports_data_filter(self) -> None:
        assert hasattr(tarfile, "data_filter")
