"""CLI 工具包导出"""

from .formatting import (
    OutputFormatter,
    FormatterConfig,
    Color,
)

__all__ = [
    'OutputFormatter',
    'FormatterConfig',
    'Color',
]
