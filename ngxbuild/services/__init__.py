"""服务层

- prepare_service.py: 完整的依赖准备流程
- bindings.py: 绑定生成器边界
"""

from ngxbuild.services.bindings import BindgenCli, BindingGenerator
from ngxbuild.services.prepare_service import PrepareService

__all__ = ["PrepareService", "BindingGenerator", "BindgenCli"]
