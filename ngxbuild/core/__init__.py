"""核心组件

依赖准备流水线的各个环节，按调用顺序:
- cache_store.py: 缓存目录布局
- keyring.py: GPG 公钥导入
- fetcher.py: 远程资源下载
- verifier.py: 签名校验
- extractor.py: 源码包解压
- planner.py: configure 参数与重建判定
- orchestrator.py: configure / make 子进程调用
- includes.py: Makefile 头文件路径解析
"""
