"""lsinput 测试共享 fixture"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from lsinput.core.logger import LoggerConfig, configure_logger


@pytest.fixture(autouse=True)
def reset_logging():
    """每个测试后恢复默认日志配置"""
    yield
    configure_logger(LoggerConfig())


@pytest.fixture
def temp_dir():
    """创建临时目录（已规范化，避免 /tmp 本身是符号链接）"""
    temp_path = tempfile.mkdtemp()
    yield Path(os.path.realpath(temp_path))
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def link_dir(temp_dir):
    """目录 D：真实文件 A，link1 -> ./A，link2 -> 无关文件 other/B（绝对路径）"""
    d = temp_dir / "D"
    d.mkdir()
    (d / "A").write_text("device")

    other = temp_dir / "other"
    other.mkdir()
    (other / "B").write_text("unrelated")

    os.symlink("./A", d / "link1")
    os.symlink(str(other / "B"), d / "link2")
    return d
