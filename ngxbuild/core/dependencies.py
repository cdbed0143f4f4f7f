"""依赖清单

依赖集合固定且很小（zlib / pcre2 / openssl / nginx），不做传递依赖解析。
新增依赖时需同时登记其签名公钥。
"""

from __future__ import annotations

from ngxbuild.core.config import Config
from ngxbuild.core.models import Dependency, KeyIdentity

ZLIB_DOWNLOAD_URL_PREFIX = "https://www.zlib.net"
PCRE2_DOWNLOAD_URL_PREFIX = "https://github.com/PCRE2Project/pcre2/releases/download"
OPENSSL_DOWNLOAD_URL_PREFIX = "https://www.openssl.org/source"
NGX_DOWNLOAD_URL_PREFIX = "https://nginx.org/download"

ZLIB_KEYS = (KeyIdentity("keyserver.ubuntu.com", "783FCD8E58BCAFBA"),)
PCRE2_KEYS = (KeyIdentity("keyserver.ubuntu.com", "9766E084FB0F43D8"),)
OPENSSL_KEYS = tuple(
    KeyIdentity("keys.openpgp.org", key_id)
    for key_id in (
        "A21FAB74B0088AA361152586B8EF1A6BA9DA2D5C",
        "8657ABB260F056B1E5190839D9C4D26D0E604491",
        "B7C1C14360F353A36862E4D5231C84CDDCC69C45",
        "95A9908DDFA16830BE9FB9003D30A3A9FF1360DC",
        "7953AC1FBC3DC8B3B292393ED5E9E43F7DF9EE8C",
    )
)
NGX_KEYS = (KeyIdentity("keyserver.ubuntu.com", "A0EA981B66B0D967"),)


def zlib(version: str) -> Dependency:
    url = f"{ZLIB_DOWNLOAD_URL_PREFIX}/zlib-{version}.tar.gz"
    return Dependency("zlib", version, url, f"{url}.asc", ZLIB_KEYS)


def pcre2(version: str) -> Dependency:
    # pcre2 的签名后缀是 .sig
    url = f"{PCRE2_DOWNLOAD_URL_PREFIX}/pcre2-{version}/pcre2-{version}.tar.gz"
    return Dependency("pcre2", version, url, f"{url}.sig", PCRE2_KEYS)


def openssl(version: str) -> Dependency:
    url = f"{OPENSSL_DOWNLOAD_URL_PREFIX}/openssl-{version}.tar.gz"
    return Dependency("openssl", version, url, f"{url}.asc", OPENSSL_KEYS)


def nginx(version: str) -> Dependency:
    url = f"{NGX_DOWNLOAD_URL_PREFIX}/nginx-{version}.tar.gz"
    return Dependency("nginx", version, url, f"{url}.asc", NGX_KEYS)


def all_dependencies(config: Config) -> list[Dependency]:
    """按配置的版本返回全部依赖（nginx 最后）"""
    return [
        zlib(config.zlib_version),
        pcre2(config.pcre2_version),
        openssl(config.openssl_version),
        nginx(config.nginx_version),
    ]


def all_keys(dependencies: list[Dependency]) -> list[KeyIdentity]:
    """汇总所有依赖需要的公钥，保持顺序并去重"""
    seen: dict[KeyIdentity, None] = {}
    for dep in dependencies:
        for key in dep.keys:
            seen.setdefault(key, None)
    return list(seen)
