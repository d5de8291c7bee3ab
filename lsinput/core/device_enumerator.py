"""输入设备枚举器

列出设备目录下的 event 设备节点，并通过 evdev 读取设备名称。"""

import os
import re
from typing import Callable, Iterator, List, Optional, Tuple

from lsinput.core.exceptions import (
    DeviceDirectoryUnavailableError,
    DeviceException,
    DeviceNameError,
)
from lsinput.core.logger import get_logger

logger = get_logger("device_enumerator")

DEFAULT_DEVICE_DIR = "/dev/input"
DEFAULT_PREFIX = "event"
UNKNOWN_NAME = "unknown"

NameReader = Callable[[str], Optional[str]]


def _check_openable(path: str) -> None:
    """以 evdev 相同的方式打开再关闭设备，先读写后只读

    Raises:
        OSError: 设备无法打开
    """
    flags = os.O_NONBLOCK | os.O_CLOEXEC
    try:
        fd = os.open(path, os.O_RDWR | flags)
    except PermissionError:
        fd = os.open(path, os.O_RDONLY | flags)
    os.close(fd)


def read_evdev_name(path: str) -> Optional[str]:
    """通过 EVIOCGNAME 读取设备名称，读取后关闭设备

    能打开但查询失败的设备返回 None。

    Raises:
        OSError: 设备无法打开
        DeviceException: 未安装 evdev
    """
    try:
        from evdev import InputDevice
    except ImportError as e:
        raise DeviceException(
            "Reading device names requires python-evdev: pip install 'lsinput[evdev]'",
            details={"error": str(e)},
        ) from e

    _check_openable(path)

    # InputDevice 在构造时执行 ioctl 查询
    try:
        device = InputDevice(path)
    except OSError as e:
        logger.debug("Device name query failed", path=path, error=str(e))
        return None
    try:
        return device.name
    finally:
        device.close()


def _natural_key(name: str) -> List:
    """event2 排在 event10 之前"""
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", name)]


class DeviceEnumerator:
    """输入设备枚举器"""

    def __init__(
        self,
        device_dir: str = DEFAULT_DEVICE_DIR,
        prefix: str = DEFAULT_PREFIX,
        name_reader: Optional[NameReader] = None,
    ):
        """初始化设备枚举器

        Args:
            device_dir: 设备目录
            prefix: 设备节点名前缀
            name_reader: 读取设备名称的函数，默认使用 evdev
        """
        self.device_dir = device_dir
        self.prefix = prefix
        self.name_reader = name_reader or read_evdev_name

    def list_device_paths(self) -> List[str]:
        """列出设备节点路径

        Raises:
            DeviceDirectoryUnavailableError: 设备目录无法打开
        """
        try:
            with os.scandir(self.device_dir) as it:
                names = [entry.name for entry in it if entry.name.startswith(self.prefix)]
        except OSError as e:
            raise DeviceDirectoryUnavailableError(
                f"Unable to open {self.device_dir} directory: {e.strerror or e}",
                details={"directory": self.device_dir, "errno": e.errno},
            ) from e

        names.sort(key=_natural_key)
        logger.debug("Device nodes found", directory=self.device_dir, count=len(names))
        return [os.path.join(self.device_dir, name) for name in names]

    def read_name(self, path: str) -> str:
        """读取设备名称

        Returns:
            设备名称，设备未报告名称时为 "unknown"

        Raises:
            DeviceNameError: 设备无法打开
        """
        try:
            name = self.name_reader(path)
        except OSError as e:
            raise DeviceNameError(
                f"Unable to open device: {e.strerror or e}",
                details={"path": path, "errno": e.errno},
            ) from e
        return name or UNKNOWN_NAME

    def enumerate(self) -> Iterator[Tuple[str, str]]:
        """遍历可以打开的设备，返回 (路径, 名称)

        无法打开的设备被跳过。
        """
        for path in self.list_device_paths():
            try:
                name = self.read_name(path)
            except DeviceNameError as e:
                logger.info("Skipping device", path=path, reason=e.message)
                continue
            yield path, name
