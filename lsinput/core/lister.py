"""设备列表

为每个输入设备收集名称以及各链接目录中的别名。单个链接目录失败不会影响其他目录和设备。"""

import os
from typing import List, Optional, Sequence

from lsinput.core.data_structures import AliasReport, InputDeviceInfo
from lsinput.core.device_enumerator import DeviceEnumerator
from lsinput.core.exceptions import LinkScanException, ScopeError
from lsinput.core.link_scanner import LinkScanner
from lsinput.core.logger import OperationScope, get_logger

logger = get_logger("lister")

DEFAULT_LINK_DIRS = ("/dev/input/by-path", "/dev/input/by-id")


class DeviceLister:
    """输入设备列表生成器"""

    def __init__(
        self,
        enumerator: Optional[DeviceEnumerator] = None,
        scanner: Optional[LinkScanner] = None,
        link_dirs: Sequence[str] = DEFAULT_LINK_DIRS,
    ):
        self.enumerator = enumerator or DeviceEnumerator()
        self.scanner = scanner or LinkScanner()
        self.link_dirs = list(link_dirs)

    def describe(self, path: str, name: str) -> InputDeviceInfo:
        """收集单个设备在各链接目录中的别名

        Args:
            path: 设备节点路径
            name: 设备名称
        """
        info = InputDeviceInfo(path=path, node=os.path.basename(path), name=name)
        for directory in self.link_dirs:
            try:
                result = self.scanner.scan(path, directory)
            except (LinkScanException, ScopeError) as e:
                logger.info(
                    "Unable to acquire links",
                    device=path,
                    directory=directory,
                    error=e.message,
                )
                info.aliases.append(
                    AliasReport(directory=directory, error=f"Unable to acquire links: {e.message}")
                )
                continue
            info.aliases.append(AliasReport(directory=directory, result=result))
        return info

    def list_devices(self) -> List[InputDeviceInfo]:
        """列出所有可以打开的设备

        Raises:
            DeviceDirectoryUnavailableError: 设备目录无法打开
        """
        with OperationScope(
            "device listing",
            logger=logger,
            context={"device_dir": self.enumerator.device_dir},
        ):
            devices = [self.describe(path, name) for path, name in self.enumerator.enumerate()]
        logger.debug("Devices listed", count=len(devices))
        return devices
