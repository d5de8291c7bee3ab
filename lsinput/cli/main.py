"""lsinput CLI 主入口"""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from lsinput import __version__
from lsinput.core.config_manager import ConfigManager, VALID_STRATEGIES
from lsinput.core.device_enumerator import DeviceEnumerator
from lsinput.core.exceptions import ConfigException, DeviceException
from lsinput.core.link_scanner import LinkScanner
from lsinput.core.lister import DeviceLister
from lsinput.core.logger import LoggerConfig, configure_logger, get_logger
from lsinput.core.path_resolver import PathResolver
from lsinput.cli.utils import FormatterConfig, OutputFormatter

logger = get_logger("cli")


def _setup_logging(config: ConfigManager, verbose: bool) -> None:
    """按配置和 --verbose 设置日志"""
    log_dir = config.get("logging.log_dir")
    configure_logger(LoggerConfig(
        log_dir=Path(log_dir) if log_dir else None,
        level="DEBUG" if verbose else config.get("logging.level", "WARNING"),
        json_output=config.get("logging.json", False),
        console_output=verbose,
    ))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-v", "--version", prog_name="lsinput", message="%(prog)s v%(version)s")
@click.option('--device-dir', default=None, help='设备目录（默认 /dev/input）')
@click.option(
    '--link-dir', 'link_dirs',
    multiple=True,
    help='链接目录，可重复指定（默认 by-path 与 by-id）'
)
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='配置文件路径'
)
@click.option(
    '--strategy',
    type=click.Choice(VALID_STRATEGIES),
    default=None,
    help='相对链接解析策略'
)
@click.option('--json', 'json_output', is_flag=True, help='以 JSON 输出')
@click.option('--show-skipped', is_flag=True, help='显示无法解析而被跳过的链接')
@click.option('--verbose', is_flag=True, help='详细日志输出（调试用）')
@click.option('--no-color', is_flag=True, help='关闭彩色输出')
def cli(
    device_dir: Optional[str],
    link_dirs: Tuple[str, ...],
    config_path: Optional[Path],
    strategy: Optional[str],
    json_output: bool,
    show_skipped: bool,
    verbose: bool,
    no_color: bool,
):
    """lsinput - 列出 /dev/input/event* 输入设备

    显示每个设备的名称，以及 by-path、by-id 等目录中指向该设备的符号链接。

    示例:
      lsinput
      lsinput --json
      lsinput --link-dir /dev/input/by-id --show-skipped
    """
    formatter = OutputFormatter(FormatterConfig(no_color=no_color, show_skipped=show_skipped))

    config = ConfigManager(config_path)
    try:
        config.load_config()
    except ConfigException as e:
        click.echo(formatter.error(e.message), err=True)
        sys.exit(1)

    _setup_logging(config, verbose)

    resolver = PathResolver(strategy or config.get("resolver.strategy"))
    scanner = LinkScanner(
        resolver,
        report_skipped=show_skipped or config.get("scan.report_skipped", False),
    )
    enumerator = DeviceEnumerator(
        device_dir=device_dir or config.get("devices.directory"),
        prefix=config.get("devices.prefix"),
    )
    lister = DeviceLister(
        enumerator,
        scanner,
        link_dirs=list(link_dirs) or config.get("links.directories"),
    )

    try:
        devices = lister.list_devices()
    except DeviceException as e:
        click.echo(formatter.error(e.message), err=True)
        sys.exit(1)

    if json_output:
        click.echo(formatter.format_json(devices))
    elif devices:
        click.echo(formatter.format_devices(devices))


def main():
    """CLI 入口点，处理全局异常"""
    try:
        cli()
    except Exception as e:
        logger.error("Unhandled error", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
