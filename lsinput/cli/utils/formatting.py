"""CLI 输出格式化工具

把设备列表格式化为文本或 JSON。"""

import json
import os
from typing import List, Optional

from lsinput.core.data_structures import AliasReport, InputDeviceInfo

INDENT = "    "


class Color:
    """ANSI 颜色代码"""
    RESET = '\033[0m'
    DIM = '\033[2m'

    RED = '\033[31m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'


class FormatterConfig:
    """格式化配置"""

    def __init__(self, no_color: bool = False, show_skipped: bool = False):
        """初始化配置
        Args:
            no_color: 是否禁用颜色输出
            show_skipped: 是否显示被跳过的链接
        """
        self.no_color = no_color
        self.show_skipped = show_skipped

    def colorize(self, text: str, color: str) -> str:
        """根据配置为文本添加 ANSI 颜色"""
        if self.no_color:
            return text
        return f"{color}{text}{Color.RESET}"


class OutputFormatter:
    """设备列表格式化器"""

    def __init__(self, config: Optional[FormatterConfig] = None):
        self.config = config or FormatterConfig()

    def error(self, message: str) -> str:
        """格式化错误消息"""
        prefix = self.config.colorize("-", Color.RED)
        return f"{prefix} {message}"

    def format_alias_report(self, report: AliasReport) -> List[str]:
        """格式化一个链接目录的结果

        每个链接一行：目录名: 链接名
        """
        dir_base = os.path.basename(report.directory.rstrip("/")) or report.directory
        label = self.config.colorize(dir_base, Color.DIM)

        if report.error is not None:
            message = self.config.colorize(report.error, Color.RED)
            return [f"{INDENT}{label}: {message}"]

        lines = [f"{INDENT}{label}: {os.path.basename(link)}" for link in report.links]
        if self.config.show_skipped and report.result is not None:
            for skipped in report.result.skipped:
                note = self.config.colorize(
                    f"{os.path.basename(skipped.path)} (skipped: {skipped.reason})",
                    Color.YELLOW,
                )
                lines.append(f"{INDENT}{label}: {note}")
        return lines

    def format_device(self, device: InputDeviceInfo) -> str:
        """格式化单个设备"""
        header = f"{self.config.colorize(device.node, Color.CYAN)}: {device.name}"
        lines = [header]
        for report in device.aliases:
            lines.extend(self.format_alias_report(report))
        return "\n".join(lines)

    def format_devices(self, devices: List[InputDeviceInfo]) -> str:
        """格式化设备列表"""
        return "\n".join(self.format_device(device) for device in devices)

    @staticmethod
    def format_json(devices: List[InputDeviceInfo]) -> str:
        """导出为 JSON"""
        return json.dumps([d.to_dict() for d in devices], indent=2, ensure_ascii=False)
