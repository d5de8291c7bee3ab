"""结构化日志系统

基于 structlog 的日志记录器，输出到标准库 logging 的 "lsinput" 记录器下。
支持控制台渲染和 JSON 输出，并提供操作范围追踪。"""

import logging
import time
import uuid
import contextvars
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


ROOT_LOGGER_NAME = "lsinput"

# 当前操作 ID，由 OperationScope 设置
_operation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    'operation_id', default=""
)


class LoggerConfig:
    """日志配置类"""

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        level: str = "WARNING",
        json_output: bool = False,
        console_output: bool = False,
    ):
        """初始化日志配置
        Args:
            log_dir: 日志目录，如果为 None 则不写入文件
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
            json_output: 是否输出 JSON 格式
            console_output: 是否输出到控制台（stderr）
        """
        self.log_dir = log_dir
        self.level = level
        self.json_output = json_output
        self.console_output = console_output


def _setup_structlog(config: LoggerConfig) -> None:
    """按配置设置 lsinput 根记录器并配置 structlog"""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, config.level.upper(), logging.WARNING))

    # 重新配置时替换旧的处理器
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if config.console_output:
        root.addHandler(logging.StreamHandler())

    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        root.addHandler(logging.FileHandler(log_dir / "lsinput.log"))

    if not root.handlers:
        # 避免 logging.lastResort 把警告直接打印到 stderr
        root.addHandler(logging.NullHandler())

    for handler in root.handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
            if config.json_output
            else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # 允许 CLI 在模块加载后重新配置
        cache_logger_on_first_use=False,
    )


class Logger:
    """结构化日志记录器"""

    def __init__(self, name: str = ROOT_LOGGER_NAME, config: Optional[LoggerConfig] = None):
        """初始化日志记录器

        Args:
            name: 日志记录器名称
            config: 日志配置对象
        """
        self.name = name
        self.config = config or LoggerConfig()
        self.logger = structlog.get_logger(name)

    def debug(self, event: str, **kwargs) -> None:
        """记录 DEBUG 级别日志"""
        self._log("debug", event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        """记录 INFO 级别日志"""
        self._log("info", event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        """记录 WARNING 级别日志"""
        self._log("warning", event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        """记录 ERROR 级别日志"""
        self._log("error", event, **kwargs)

    def bind(self, **kwargs) -> 'Logger':
        """绑定上下文信息，返回新的日志记录器

        Args:
            **kwargs: 要绑定的上下文信息
        """
        new_logger = Logger(self.name, self.config)
        new_logger.logger = self.logger.bind(**kwargs)
        return new_logger

    def _log(self, level: str, event: str, **kwargs) -> None:
        operation_id = _operation_id.get()
        if operation_id:
            kwargs.setdefault('operation_id', operation_id)
        getattr(self.logger, level)(event, **kwargs)


class OperationScope:
    """操作范围上下文管理器

    记录操作的开始、成功或失败以及耗时。异常不会被吞掉。
    """

    def __init__(
        self,
        operation_name: str,
        logger: Optional[Logger] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.operation_name = operation_name
        self.logger = logger or get_logger("operation")
        self.context = context or {}
        self.operation_id = str(uuid.uuid4())
        self.status = "pending"
        self.duration_ms: Optional[int] = None
        self._start = 0.0
        self._token = None

    def __enter__(self) -> 'OperationScope':
        self._token = _operation_id.set(self.operation_id)
        self._start = time.monotonic()
        self.status = "running"
        self.logger.info(f"{self.operation_name} started", **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.duration_ms = int((time.monotonic() - self._start) * 1000)
        if exc_type is not None:
            self.status = "failure"
            self.logger.error(
                f"{self.operation_name} failed",
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **self.context,
            )
        else:
            self.status = "success"
            self.logger.info(
                f"{self.operation_name} succeeded",
                duration_ms=self.duration_ms,
                **self.context,
            )
        _operation_id.reset(self._token)
        return False


_config = LoggerConfig()
_loggers: Dict[str, Logger] = {}
_setup_structlog(_config)


def get_logger(name: str = "") -> Logger:
    """获取日志记录器实例

    Args:
        name: 子记录器名称，挂在 "lsinput" 之下

    Returns:
        同名记录器共享同一实例
    """
    full_name = f"{ROOT_LOGGER_NAME}.{name}" if name else ROOT_LOGGER_NAME
    if full_name not in _loggers:
        _loggers[full_name] = Logger(full_name, _config)
    return _loggers[full_name]


def configure_logger(config: LoggerConfig) -> None:
    """重新配置全局日志

    Args:
        config: 日志配置对象
    """
    global _config
    _config = config
    _setup_structlog(config)
    for logger in _loggers.values():
        logger.config = config
