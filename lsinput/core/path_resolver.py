"""路径解析器

把路径规范化为绝对、无符号链接的形式，并支持"以某目录为当前目录"解析相对路径。
支持两种策略：
- anchored: 先规范化基准目录，再把相对路径拼接上去解析，不修改任何进程状态
- chdir: 临时切换工作目录解析后切回，全进程串行执行
"""

import os
import stat
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Union

from lsinput.core.data_structures import CanonicalPath
from lsinput.core.exceptions import (
    ConfigValidationError,
    NotFoundError,
    OtherOsError,
    PathPermissionError,
    PathResolutionError,
    ScopeError,
)
from lsinput.core.logger import get_logger

logger = get_logger("path_resolver")

PathLike = Union[str, "os.PathLike[str]"]

# 工作目录是进程级状态，所有 chdir 解析共用这把锁
_CHDIR_LOCK = threading.RLock()

# O_PATH 句柄只需要搜索权限即可 fchdir，不要求目录可读
_SAVE_CWD_FLAGS = getattr(os, "O_PATH", os.O_RDONLY) | getattr(os, "O_DIRECTORY", 0)


class ResolveStrategy(Enum):
    """相对路径解析策略"""
    ANCHORED = "anchored"
    CHDIR = "chdir"


def _translate_os_error(path: str, exc: OSError) -> PathResolutionError:
    """把 OSError 转换为解析异常"""
    reason = exc.strerror or str(exc)
    details = {"path": path, "errno": exc.errno, "error": reason}
    message = f"{reason}: {path}"
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(message, details=details)
    if isinstance(exc, PermissionError):
        return PathPermissionError(message, details=details)
    return OtherOsError(message, details=details)


@contextmanager
def working_directory(path: PathLike) -> Iterator[None]:
    """临时切换工作目录

    退出时（包括异常退出）总是切回原目录。原目录通过打开的句柄恢复，
    即使其间被重命名也能回去。

    Raises:
        ScopeError: 无法进入目标目录或无法切回原目录
    """
    path = os.fspath(path)
    try:
        previous = os.open(os.curdir, _SAVE_CWD_FLAGS)
    except OSError as e:
        raise ScopeError(
            f"Unable to save working directory: {e.strerror or e}",
            details={"path": path, "errno": e.errno},
        ) from e

    try:
        try:
            os.chdir(path)
        except OSError as e:
            raise ScopeError(
                f"Unable to enter directory: {e.strerror or e}: {path}",
                details={"path": path, "errno": e.errno},
            ) from e

        try:
            yield
        finally:
            try:
                os.fchdir(previous)
            except OSError as e:
                raise ScopeError(
                    f"Unable to restore working directory: {e.strerror or e}",
                    details={"path": path, "errno": e.errno},
                ) from e
    finally:
        os.close(previous)


class PathResolver:
    """路径解析器

    所有结果都从当前文件系统状态重新计算，不做缓存。
    """

    def __init__(self, strategy: str = 'anchored'):
        """初始化路径解析器

        Args:
            strategy: 相对路径解析策略，可选值：'anchored', 'chdir'
        """
        try:
            self.strategy = ResolveStrategy(strategy)
        except ValueError:
            raise ConfigValidationError(
                f"Unsupported resolve strategy: {strategy}",
                details=f"Supported strategies: {', '.join(s.value for s in ResolveStrategy)}"
            )

    def canonicalize(self, path: PathLike) -> CanonicalPath:
        """规范化路径

        相对路径以进程的实际工作目录为基准。

        Args:
            path: 待解析路径

        Returns:
            规范路径

        Raises:
            NotFoundError: 某个组成部分不存在
            PathPermissionError: 某个组成部分无权访问
            OtherOsError: 其他解析失败
        """
        path = os.fspath(path)
        if not path:
            raise NotFoundError(
                "No such file or directory: ''",
                details={"path": path, "error": "empty path"},
            )

        try:
            # realpath 按文本处理 ".."，先让内核走一遍完整路径
            os.stat(path)
            resolved = os.path.realpath(path, strict=True)
        except OSError as e:
            raise _translate_os_error(path, e) from e
        except RuntimeError as e:
            # 旧版本解释器对链接循环抛出 RuntimeError
            raise OtherOsError(
                f"Too many levels of symbolic links: {path}",
                details={"path": path, "error": str(e)},
            ) from e

        return CanonicalPath(resolved)

    def resolve_relative_to(self, base_dir: PathLike, relative_path: PathLike) -> CanonicalPath:
        """以 base_dir 为当前目录解析 relative_path

        Args:
            base_dir: 基准目录
            relative_path: 相对路径；绝对路径时忽略基准目录

        Returns:
            规范路径

        Raises:
            ScopeError: 基准目录不可用
            PathResolutionError: 解析失败
        """
        base_dir = os.fspath(base_dir)
        relative_path = os.fspath(relative_path)

        if self.strategy == ResolveStrategy.CHDIR:
            return self._resolve_chdir(base_dir, relative_path)
        return self._resolve_anchored(base_dir, relative_path)

    # 私有方法

    def _resolve_anchored(self, base_dir: str, relative_path: str) -> CanonicalPath:
        """anchored 模式：拼接到规范化后的基准目录上解析"""
        try:
            base = self.canonicalize(base_dir)
        except PathResolutionError as e:
            raise ScopeError(
                f"Unable to enter directory: {e.message}",
                details={"path": base_dir},
            ) from e

        try:
            is_dir = stat.S_ISDIR(os.stat(base).st_mode)
        except OSError as e:
            raise ScopeError(
                f"Unable to enter directory: {e.strerror or e}: {base_dir}",
                details={"path": base_dir, "errno": e.errno},
            ) from e
        if not is_dir:
            raise ScopeError(
                f"Unable to enter directory: Not a directory: {base_dir}",
                details={"path": base_dir},
            )

        if not relative_path:
            return self.canonicalize(relative_path)
        return self.canonicalize(os.path.join(base, relative_path))

    def _resolve_chdir(self, base_dir: str, relative_path: str) -> CanonicalPath:
        """chdir 模式：加锁后临时切换工作目录解析"""
        with _CHDIR_LOCK:
            with working_directory(base_dir):
                return self.canonicalize(relative_path)
