"""签名校验测试"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ngxbuild.core.exceptions import SignatureFormatError, SignatureVerificationError
from ngxbuild.core.fetcher import Fetcher
from ngxbuild.core.gpg import GnuPG
from ngxbuild.core.verifier import Verifier

ARCHIVE_URL = "https://www.zlib.net/zlib-1.3.tar.gz"
SIGNATURE_URL = f"{ARCHIVE_URL}.asc"


@pytest.fixture()
def payloads() -> dict[str, bytes]:
    return {ARCHIVE_URL: b"archive-bytes", SIGNATURE_URL: b"-----BEGIN PGP SIGNATURE-----"}


def _verifier(tmp_path: Path, executor, opener) -> Verifier:
    home = tmp_path / ".gnupg"
    home.mkdir(exist_ok=True)
    return Verifier(GnuPG(executor, home), Fetcher(tmp_path, opener=opener))


class TestGetVerifiedArchive:
    def test_happy_path_order(self, tmp_path: Path, fake_executor, fake_opener, payloads) -> None:
        ex = fake_executor(tools=("gpg",))
        opener = fake_opener(payloads)
        archive = _verifier(tmp_path, ex, opener).get_verified_archive(ARCHIVE_URL, SIGNATURE_URL)

        assert archive == tmp_path / "zlib-1.3.tar.gz"
        assert opener.requests == [SIGNATURE_URL, ARCHIVE_URL]
        assert [cmd[3] for cmd, _ in ex.calls] == ["--list-packets", "--verify"]
        assert ex.calls[1][0][-2:] == [
            str(tmp_path / "zlib-1.3.tar.gz.asc"), str(tmp_path / "zlib-1.3.tar.gz"),
        ]

    def test_malformed_signature_is_deleted(
        self, tmp_path: Path, fake_executor, fake_opener, payloads,
    ) -> None:
        ex = fake_executor(tools=("gpg",))
        ex.fail_on("--list-packets", output="gpg: no valid OpenPGP data found")
        opener = fake_opener(payloads)
        with pytest.raises(SignatureFormatError, match="签名文件无效"):
            _verifier(tmp_path, ex, opener).get_verified_archive(ARCHIVE_URL, SIGNATURE_URL)
        assert not (tmp_path / "zlib-1.3.tar.gz.asc").exists()
        # 签名不合法时不再下载源码包
        assert opener.requests == [SIGNATURE_URL]

    def test_wrong_signature_deletes_both_files(
        self, tmp_path: Path, fake_executor, fake_opener, payloads,
    ) -> None:
        ex = fake_executor(tools=("gpg",))
        ex.fail_on("--verify", output="gpg: BAD signature")
        opener = fake_opener(payloads)
        verifier = _verifier(tmp_path, ex, opener)
        with pytest.raises(SignatureVerificationError) as info:
            verifier.get_verified_archive(ARCHIVE_URL, SIGNATURE_URL)
        assert "BAD signature" in info.value.output
        assert not (tmp_path / "zlib-1.3.tar.gz").exists()
        assert not (tmp_path / "zlib-1.3.tar.gz.asc").exists()

        # 下次运行成对重新下载
        ex.failures.clear()
        verifier.get_verified_archive(ARCHIVE_URL, SIGNATURE_URL)
        assert opener.requests == [SIGNATURE_URL, ARCHIVE_URL] * 2

    def test_without_gpg_skips_verification(
        self, tmp_path: Path, fake_executor, fake_opener, payloads,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        ex = fake_executor()
        with caplog.at_level(logging.WARNING):
            archive = _verifier(tmp_path, ex, fake_opener(payloads)).get_verified_archive(
                ARCHIVE_URL, SIGNATURE_URL,
            )
        assert archive.read_bytes() == b"archive-bytes"
        assert ex.calls == []
        assert "跳过签名校验" in caplog.text
        assert "跳过签名文件格式检查" in caplog.text
