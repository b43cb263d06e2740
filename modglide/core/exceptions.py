"""统一异常体系

可恢复的业务异常继承 ModglideError：批量解析阶段按依赖捕获、记录并计数。
InvariantViolation 表示调用方违反契约，刻意不继承 ModglideError，不会被吞掉。
"""

from __future__ import annotations


class ModglideError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(ModglideError):
    """配置文件或 glide.lock 缺失、内容无效"""

    code = "CONFIG_ERROR"


class CommandError(ModglideError):
    """外部命令无法启动或以非零状态退出"""

    code = "COMMAND_ERROR"


class RepoRootNotFound(ModglideError):
    """无法根据导入路径推断代码仓位置"""

    code = "REPO_ROOT_NOT_FOUND"


class VCSInfoError(ModglideError):
    """获取依赖的 VCS 信息失败"""

    code = "VCS_INFO_ERROR"


class InvalidPseudoVersion(ModglideError):
    """伪版本的时间戳或修订段格式错误"""

    code = "INVALID_PSEUDO_VERSION"


class VCSError(ModglideError):
    """VCS 查询失败"""

    code = "VCS_ERROR"


class UnknownVCS(VCSError):
    """注册表中不存在该 VCS 命令"""

    code = "UNKNOWN_VCS"


class UnsupportedVCS(VCSError):
    """VCS 已登记但未实现"""

    code = "UNSUPPORTED_VCS"


class UnresolvedTag(VCSError):
    """远端没有匹配的 tag"""

    code = "UNRESOLVED_TAG"


class AmbiguousTag(VCSError):
    """多个 ref 匹配且没有精确命中"""

    code = "AMBIGUOUS_TAG"


class FetchFailed(ModglideError):
    """本地克隆或 fetch 失败"""

    code = "FETCH_FAILED"


class CommitNotFound(ModglideError):
    """fetch 之后仍找不到提交"""

    code = "COMMIT_NOT_FOUND"


class InvariantViolation(RuntimeError):
    """调用方契约被破坏（如空版本进入解析），不可恢复"""

    code = "INVARIANT_VIOLATION"
