"""lsinput 核心数据结构定义

定义路径解析、链接扫描和设备列表使用的值对象。"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NewType, Optional


# 绝对路径，不含符号链接、"." 或 ".." 组成部分
CanonicalPath = NewType("CanonicalPath", str)


@dataclass(frozen=True)
class LinkEntry:
    """目录中的一个符号链接"""
    name: str
    path: str
    destination: str  # 链接中保存的原始内容，可能是相对路径


@dataclass(frozen=True)
class SkippedLink:
    """无法解析而被跳过的符号链接"""
    path: str
    reason: str


@dataclass
class MatchResult:
    """一次链接扫描的结果

    links 保持目录遍历顺序；判断正确性时应视为集合。
    """
    target: CanonicalPath
    directory: str
    links: List[str] = field(default_factory=list)
    skipped: List[SkippedLink] = field(default_factory=list)

    def __contains__(self, path: str) -> bool:
        return path in self.links

    def __len__(self) -> int:
        return len(self.links)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "target": self.target,
            "directory": self.directory,
            "links": list(self.links),
            "skipped": [{"path": s.path, "reason": s.reason} for s in self.skipped],
        }


@dataclass
class AliasReport:
    """某个设备在一个链接目录中的别名"""
    directory: str
    result: Optional[MatchResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """扫描是否成功"""
        return self.error is None

    @property
    def links(self) -> List[str]:
        return self.result.links if self.result is not None else []

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"directory": self.directory, "links": self.links}
        if self.result is not None and self.result.skipped:
            data["skipped"] = [
                {"path": s.path, "reason": s.reason} for s in self.result.skipped
            ]
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class InputDeviceInfo:
    """输入设备信息"""
    path: str
    node: str
    name: str
    aliases: List[AliasReport] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "path": self.path,
            "node": self.node,
            "name": self.name,
            "aliases": [a.to_dict() for a in self.aliases],
        }
