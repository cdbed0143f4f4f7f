"""ngxbuild - NGINX 原生依赖树准备工具

下载并校验 zlib / pcre2 / openssl / nginx 源码包，解压、configure、编译安装 nginx，
并从生成的 Makefile 中提取头文件搜索路径，供绑定生成器使用。
"""

__version__ = "0.1.0"
