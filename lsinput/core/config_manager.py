"""配置管理器

加载、合并和验证 lsinput 的 YAML 配置文件。
配置文件查找顺序：显式路径、$LSINPUT_CONFIG、~/.config/lsinput/config.yaml。
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from lsinput.core.exceptions import ConfigIOError, ConfigParseError, ConfigValidationError
from lsinput.core.logger import get_logger

logger = get_logger("config_manager")

CONFIG_ENV_VAR = "LSINPUT_CONFIG"
VALID_STRATEGIES = ["anchored", "chdir"]
VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class ConfigManager:
    """配置管理器"""

    DEFAULT_CONFIG = {
        "devices": {
            "directory": "/dev/input",
            "prefix": "event",
        },
        "links": {
            "directories": ["/dev/input/by-path", "/dev/input/by-id"],
        },
        "resolver": {
            "strategy": "anchored",
        },
        "scan": {
            "report_skipped": False,
        },
        "logging": {
            "level": "WARNING",
            "json": False,
            "log_dir": None,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，为 None 时按环境变量和默认位置查找
        """
        self.config_path = self._locate(config_path)
        self._config: Optional[Dict[str, Any]] = None
        logger.debug("ConfigManager initialized", config_path=str(self.config_path))

    @staticmethod
    def _locate(config_path: Optional[Path]) -> Path:
        if config_path:
            return Path(config_path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        return Path.home() / ".config" / "lsinput" / "config.yaml"

    @property
    def config(self) -> Dict[str, Any]:
        """当前配置，首次访问时加载"""
        if self._config is None:
            self.load_config()
        return self._config

    def get_default_config(self) -> Dict[str, Any]:
        """获取默认配置的深拷贝"""
        return copy.deepcopy(self.DEFAULT_CONFIG)

    def load_config(self) -> Dict[str, Any]:
        """加载并验证配置文件

        Returns:
            与默认配置合并后的配置字典

        Raises:
            ConfigIOError: 文件读取失败
            ConfigParseError: YAML 解析失败
            ConfigValidationError: 配置不合法
        """
        path = self.config_path

        if not path.exists():
            logger.debug("Configuration file not found, using defaults", path=str(path))
            self._config = self.get_default_config()
            return self._config

        logger.info("Loading configuration", path=str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML configuration", path=str(path), error=str(e))
            raise ConfigParseError(f"Failed to parse YAML configuration: {e}", details=str(e))
        except OSError as e:
            logger.error("Failed to read configuration file", path=str(path), error=str(e))
            raise ConfigIOError(f"Failed to read configuration file: {e}", details=str(e))

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigValidationError(
                "Configuration validation failed: top level must be a mapping",
                details={"path": str(path)},
            )

        merged = self.merge_configs(self.get_default_config(), config_data)
        self.validate_config(merged)
        self._config = merged
        return self._config

    def validate_config(self, config: Optional[Dict[str, Any]] = None) -> bool:
        """验证配置结构和值

        Raises:
            ConfigValidationError: 配置验证失败时抛出，包含所有错误
        """
        cfg = config if config is not None else self._config
        if cfg is None:
            raise ConfigValidationError("No configuration loaded or provided")

        errors: List[str] = []

        devices = cfg.get("devices")
        if not isinstance(devices, dict):
            errors.append("devices must be a dictionary")
        else:
            for key in ("directory", "prefix"):
                if not isinstance(devices.get(key), str) or not devices.get(key):
                    errors.append(f"devices.{key} must be a non-empty string")

        links = cfg.get("links")
        if not isinstance(links, dict):
            errors.append("links must be a dictionary")
        else:
            directories = links.get("directories")
            if not isinstance(directories, list):
                errors.append("links.directories must be a list")
            elif not all(isinstance(d, str) and d for d in directories):
                errors.append("All items in links.directories must be non-empty strings")

        resolver = cfg.get("resolver")
        if not isinstance(resolver, dict):
            errors.append("resolver must be a dictionary")
        elif resolver.get("strategy") not in VALID_STRATEGIES:
            errors.append(f"resolver.strategy must be one of {VALID_STRATEGIES}")

        scan = cfg.get("scan")
        if not isinstance(scan, dict):
            errors.append("scan must be a dictionary")
        elif not isinstance(scan.get("report_skipped"), bool):
            errors.append("scan.report_skipped must be a boolean")

        logging_cfg = cfg.get("logging")
        if not isinstance(logging_cfg, dict):
            errors.append("logging must be a dictionary")
        else:
            level = logging_cfg.get("level")
            if not isinstance(level, str) or level.upper() not in VALID_LEVELS:
                errors.append(f"logging.level must be one of {VALID_LEVELS}")
            if not isinstance(logging_cfg.get("json"), bool):
                errors.append("logging.json must be a boolean")
            log_dir = logging_cfg.get("log_dir")
            if log_dir is not None and not isinstance(log_dir, str):
                errors.append("logging.log_dir must be a string or null")

        if errors:
            logger.error("Configuration validation failed", errors=errors)
            raise ConfigValidationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                details={"errors": errors},
            )

        return True

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """深度合并配置：字典递归合并，其他值（包括列表）整体替换

        Args:
            base: 基础配置
            override: 覆盖配置

        Returns:
            合并后的新配置
        """
        result = copy.deepcopy(base)
        for key, value in override.items():
            base_value = result.get(key)
            if isinstance(base_value, dict) and isinstance(value, dict):
                result[key] = self.merge_configs(base_value, value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get(self, key: str, default: Any = None) -> Any:
        """按点分路径读取配置值，例如 "resolver.strategy"

        Args:
            key: 点分路径
            default: 不存在时返回的默认值
        """
        value: Any = self.config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value
