"""lsinput 异常体系"""


class LsInputException(Exception):
    """基础异常类"""
    def __init__(self, message: str, details=None):
        self.message = message
        self.details = details
        super().__init__(self.message)


# 路径解析相关异常
class PathResolutionError(LsInputException):
    """路径规范化失败"""
    pass


class NotFoundError(PathResolutionError):
    """路径中某个组成部分不存在"""
    pass


class PathPermissionError(PathResolutionError):
    """路径中某个组成部分无权访问"""
    pass


class OtherOsError(PathResolutionError):
    """其他解析失败（路径过长、链接循环等）"""
    pass


class ScopeError(LsInputException):
    """无法进入或恢复工作目录"""
    pass


# 链接扫描相关异常
class LinkScanException(LsInputException):
    """链接扫描异常"""
    pass


class DirectoryUnavailableError(LinkScanException):
    """链接目录无法打开"""
    pass


class TargetResolutionError(LinkScanException):
    """扫描目标无法规范化"""
    pass


# 设备相关异常
class DeviceException(LsInputException):
    """设备枚举异常"""
    pass


class DeviceDirectoryUnavailableError(DeviceException):
    """设备目录无法打开"""
    pass


class DeviceNameError(DeviceException):
    """设备无法打开或读取名称"""
    pass


# 配置相关异常
class ConfigException(LsInputException):
    """配置异常"""
    pass


class ConfigParseError(ConfigException):
    """配置解析失败"""
    pass


class ConfigIOError(ConfigException):
    """配置文件读取失败"""
    pass


class ConfigValidationError(ConfigException):
    """配置验证失败"""
    pass
