"""符号链接扫描器

在一个目录中查找所有最终指向同一目标文件的符号链接。
链接内容以链接所在目录为基准解析，而不是进程的工作目录。
"""

import os
from typing import Iterator, List, Optional

from lsinput.core.data_structures import LinkEntry, MatchResult, SkippedLink
from lsinput.core.exceptions import (
    DirectoryUnavailableError,
    PathResolutionError,
    TargetResolutionError,
)
from lsinput.core.logger import get_logger
from lsinput.core.path_resolver import PathLike, PathResolver

logger = get_logger("link_scanner")


class LinkScanner:
    """符号链接扫描器"""

    def __init__(self, resolver: Optional[PathResolver] = None, report_skipped: bool = False):
        """初始化扫描器

        Args:
            resolver: 路径解析器，默认使用 anchored 策略
            report_skipped: 为 True 时以 WARNING 级别记录被跳过的链接
        """
        self.resolver = resolver or PathResolver()
        self.report_skipped = report_skipped

    def find_links_to(self, target_path: PathLike, dir_path: PathLike) -> List[str]:
        """查找 dir_path 中指向 target_path 的符号链接

        Returns:
            链接路径列表，保持目录遍历顺序

        Raises:
            TargetResolutionError: 目标无法规范化
            DirectoryUnavailableError: 目录无法打开
        """
        return self.scan(target_path, dir_path).links

    def scan(self, target_path: PathLike, dir_path: PathLike) -> MatchResult:
        """扫描目录，返回匹配的链接和被跳过的链接

        Args:
            target_path: 目标路径
            dir_path: 链接目录

        Returns:
            MatchResult
        """
        target_path = os.fspath(target_path)
        dir_path = os.fspath(dir_path)

        try:
            target = self.resolver.canonicalize(target_path)
        except PathResolutionError as e:
            raise TargetResolutionError(
                f"Unable to resolve target: {e.message}",
                details={"target": target_path, "cause": e.details},
            ) from e

        logger.debug("Scanning for links", target=target, directory=dir_path)

        result = MatchResult(target=target, directory=dir_path)
        for entry in self.iter_link_entries(dir_path):
            try:
                destination = self.resolver.resolve_relative_to(dir_path, entry.destination)
            except PathResolutionError as e:
                self._skip(result, entry.path, e.message)
                continue

            if destination == target:
                result.links.append(entry.path)

        logger.debug(
            "Link scan finished",
            directory=dir_path,
            matches=len(result.links),
            skipped=len(result.skipped),
        )
        return result

    def iter_link_entries(self, dir_path: PathLike) -> Iterator[LinkEntry]:
        """遍历目录中的符号链接

        目录句柄在遍历结束（或生成器关闭）时释放。读取期间消失的条目会被忽略。

        Raises:
            DirectoryUnavailableError: 目录无法打开
        """
        dir_path = os.fspath(dir_path)

        try:
            it = os.scandir(dir_path)
        except OSError as e:
            raise DirectoryUnavailableError(
                f"Unable to open directory: {e.strerror or e}",
                details={"directory": dir_path, "errno": e.errno},
            ) from e

        with it:
            for entry in it:
                path = os.path.join(dir_path, entry.name)
                # is_symlink() 不跟随链接本身
                try:
                    if not entry.is_symlink():
                        continue
                    destination = os.readlink(path)
                except OSError as e:
                    logger.debug("Link entry vanished", path=path, error=str(e))
                    continue

                yield LinkEntry(name=entry.name, path=path, destination=destination)

    def _skip(self, result: MatchResult, path: str, reason: str) -> None:
        result.skipped.append(SkippedLink(path=path, reason=reason))
        log = logger.warning if self.report_skipped else logger.debug
        log("Skipping unresolvable link", path=path, reason=reason)
