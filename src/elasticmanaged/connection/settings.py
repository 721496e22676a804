"""客户端设置加载与合并模块.

设置的合并顺序：
    1. 空的设置累加器
    2. 设置文件中的键值（文件系统路径优先，其次为包内资源）
    3. 配置中显式给出的 settings（同名键覆盖文件中的值）
    4. cluster.name，始终取自 ClusterConfig.cluster_name，不可被覆盖
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError
from .models import ClusterConfig, parse_bool

logger = logging.getLogger(__name__)

CLUSTER_NAME_SETTING = "cluster.name"
DEFAULT_RESOURCE_PACKAGE = "elasticmanaged.resources"

# 可直接映射为 Elasticsearch 构造参数的设置项
_FLOAT_OPTIONS = ("request_timeout",)
_INT_OPTIONS = ("max_retries",)
_BOOL_OPTIONS = ("retry_on_timeout", "http_compress")


def resolve_settings_file(
    settings_file: str, package: str = DEFAULT_RESOURCE_PACKAGE
) -> Path:
    """解析设置文件位置.

    先按文件系统路径查找，找不到时再作为 package 中的资源查找。

    Args:
        settings_file: 设置文件路径或资源名
        package: 资源所在的包

    Returns:
        可读取的文件路径

    Raises:
        ConfigurationError: 两种方式都找不到时抛出
    """
    path = Path(settings_file)
    if path.is_file():
        return path

    try:
        resource = resources.files(package).joinpath(settings_file)
        if resource.is_file():
            return Path(str(resource))
    except (ModuleNotFoundError, TypeError, ValueError) as e:
        raise ConfigurationError(
            f"settings file cannot be found: {settings_file}"
        ) from e

    raise ConfigurationError(f"settings file cannot be found: {settings_file}")


def _flatten(data: Any, prefix: str = "") -> dict[str, str]:
    """将嵌套结构展开为点号分隔的扁平键值."""
    result: dict[str, str] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            full_key = f"{prefix}.{key}" if prefix else str(key)
            result.update(_flatten(value, full_key))
    elif isinstance(data, (list, tuple)):
        result[prefix] = ",".join(str(item) for item in data)
    elif isinstance(data, bool):
        result[prefix] = "true" if data else "false"
    elif data is not None:
        result[prefix] = str(data)
    return result


def _parse_properties(text: str) -> dict[str, str]:
    """解析 key=value / key: value 形式的属性文件."""
    result: dict[str, str] = {}
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        separators = [i for i in (line.find("="), line.find(":")) if i > 0]
        if not separators:
            raise ConfigurationError(f"无法解析设置行 {line_no}: {raw_line!r}")
        idx = min(separators)
        result[line[:idx].strip()] = line[idx + 1 :].strip()
    return result


def load_settings_file(path: Path) -> dict[str, str]:
    """从设置文件读取扁平化的键值.

    .yml/.yaml 按 YAML 解析，.json 按 JSON 解析，其他后缀按属性文件解析。

    Args:
        path: 设置文件路径

    Returns:
        设置字典

    Raises:
        ConfigurationError: 文件无法读取或解析时抛出
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"无法读取设置文件 {path}: {e}") from e

    suffix = path.suffix.lower()
    try:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            return _parse_properties(text)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigurationError(f"无法解析设置文件 {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"设置文件 {path} 的顶层必须是键值结构")
    return _flatten(data)


def build_settings(
    config: ClusterConfig, package: str = DEFAULT_RESOURCE_PACKAGE
) -> dict[str, str]:
    """按固定顺序合并设置文件、显式设置和集群名称.

    Args:
        config: 集群配置
        package: 查找设置文件资源的包

    Returns:
        合并后的设置字典
    """
    settings: dict[str, str] = {}

    if config.settings_file:
        path = resolve_settings_file(config.settings_file, package)
        file_settings = load_settings_file(path)
        logger.info(f"从设置文件 {path} 加载 {len(file_settings)} 项设置")
        settings.update(file_settings)

    settings.update(config.settings)
    settings[CLUSTER_NAME_SETTING] = config.cluster_name
    return settings


def client_options(settings: dict[str, str]) -> dict[str, Any]:
    """提取可直接传给 Elasticsearch 构造函数的设置项.

    仅识别 request_timeout、max_retries、retry_on_timeout、http_compress，
    其余设置只保留在设置字典中。

    Args:
        settings: 合并后的设置字典

    Returns:
        类型已转换的关键字参数字典

    Raises:
        ConfigurationError: 设置值无法转换时抛出
    """
    options: dict[str, Any] = {}
    for key in _FLOAT_OPTIONS:
        if key in settings:
            try:
                options[key] = float(settings[key])
            except ValueError:
                raise ConfigurationError(
                    f"设置项 {key} 不是合法的数字: {settings[key]!r}"
                ) from None
    for key in _INT_OPTIONS:
        if key in settings:
            try:
                options[key] = int(settings[key])
            except ValueError:
                raise ConfigurationError(
                    f"设置项 {key} 不是合法的整数: {settings[key]!r}"
                ) from None
    for key in _BOOL_OPTIONS:
        if key in settings:
            options[key] = parse_bool(key, settings[key])
    return options
