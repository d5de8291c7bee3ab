"""lsinput - 列出输入设备及其 by-path / by-id 别名"""

__version__ = "0.1.0"
