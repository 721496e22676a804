"""客户端配置数据模型定义模块.

提供托管客户端相关的数据模型，包括：
- ClientMode: 客户端模式枚举
- SnifferConfig: 节点嗅探配置
- ClusterConfig: 集群配置
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import ConfigurationError

DEFAULT_CLUSTER_NAME = "elasticsearch"


class ClientMode(Enum):
    """客户端模式枚举.

    Attributes:
        TRANSPORT: 直连模式，客户端固定连接到配置的节点，默认端口 9300
        HTTP: REST 模式，默认端口 9200，可选默认请求头和节点嗅探
        NODE: 已废弃的内嵌节点模式，仅为兼容旧配置而保留，构建时会被拒绝
    """

    TRANSPORT = "transport"
    HTTP = "http"
    NODE = "node"

    @classmethod
    def parse(cls, value: ClientMode | str) -> ClientMode:
        """将字符串或枚举值解析为 ClientMode.

        Args:
            value: 枚举成员或模式名称（大小写不敏感）

        Returns:
            对应的 ClientMode

        Raises:
            ConfigurationError: 当模式名称无法识别时抛出
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        name = _MODE_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ConfigurationError(f"未知的客户端模式: {value!r}") from None


_MODE_ALIASES = {
    "direct": "transport",
    "rest": "http",
    "embedded": "node",
}


_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def parse_bool(key: str, value: Any) -> bool:
    """把配置值解析为布尔值.

    接受 bool 以及 true/false、yes/no、on/off、1/0（大小写不敏感）。

    Args:
        key: 配置项名称，用于错误信息
        value: 配置值

    Returns:
        解析后的布尔值

    Raises:
        ConfigurationError: 当值无法识别时抛出
    """
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"配置项 {key} 不是合法的布尔值: {value!r}")


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """按顺序返回 data 中第一个存在的键对应的值."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _millis(
    data: dict[str, Any],
    millis_keys: tuple[str, ...],
    seconds_keys: tuple[str, ...],
    default: float,
) -> float:
    """读取时长配置，毫秒键会被换算为秒."""
    value = _pick(data, *millis_keys)
    scale = 1000.0
    if value is None:
        value = _pick(data, *seconds_keys, default=default)
        scale = 1.0
    try:
        return float(value) / scale
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"配置项 {millis_keys[0]} 不是合法的时长: {value!r}"
        ) from None


@dataclass(frozen=True)
class SnifferConfig:
    """节点嗅探配置模型.

    启用后，HTTP 客户端会周期性刷新集群节点地址，并可在节点失败后提前刷新。

    Attributes:
        enabled: 是否启用嗅探，默认 False
        sniff_interval: 周期性嗅探间隔（秒），默认 600
        sniff_on_failure: 节点失败时是否触发嗅探，默认 False
        sniff_failure_delay: 失败后触发嗅探的延迟（秒），默认 30
        use_https: 嗅探到的节点是否使用 https，默认 False

    Raises:
        ConfigurationError: 当时长参数不为正数时抛出
    """

    enabled: bool = False
    sniff_interval: float = 600.0
    sniff_on_failure: bool = False
    sniff_failure_delay: float = 30.0
    use_https: bool = False

    def __post_init__(self) -> None:
        """校验嗅探配置参数合法性."""
        for name in ("enabled", "sniff_on_failure", "use_https"):
            object.__setattr__(self, name, parse_bool(name, getattr(self, name)))
        if self.sniff_interval <= 0:
            raise ConfigurationError(
                f"sniff_interval 必须 > 0，当前值: {self.sniff_interval}"
            )
        if self.sniff_failure_delay <= 0:
            raise ConfigurationError(
                f"sniff_failure_delay 必须 > 0，当前值: {self.sniff_failure_delay}"
            )

    @property
    def scheme(self) -> str:
        """嗅探到的节点使用的协议."""
        return "https" if self.use_https else "http"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SnifferConfig:
        """从外部配置字典构建嗅探配置.

        同时接受驼峰命名（refreshIntervalMs、sniffIntervalMillis 等）
        和下划线命名，毫秒值会换算为秒。

        Args:
            data: 配置字典，None 表示使用默认值

        Returns:
            SnifferConfig 实例
        """
        if not data:
            return cls()
        return cls(
            enabled=_pick(data, "enabled", default=False),
            sniff_interval=_millis(
                data,
                ("refreshIntervalMs", "sniffIntervalMillis", "sniff_interval_ms"),
                ("sniff_interval", "refresh_interval"),
                600.0,
            ),
            sniff_on_failure=_pick(
                data,
                "refreshOnFailure",
                "sniffOnFailure",
                "sniff_on_failure",
                default=False,
            ),
            sniff_failure_delay=_millis(
                data,
                (
                    "failureRefreshDelayMs",
                    "sniffFailureMillis",
                    "sniff_failure_delay_ms",
                ),
                ("sniff_failure_delay", "failure_refresh_delay"),
                30.0,
            ),
            use_https=_pick(
                data, "useSecureScheme", "useHttps", "use_https", default=False
            ),
        )


@dataclass(frozen=True)
class ClusterConfig:
    """集群配置模型.

    构建后视为不可变，仅在客户端构建期间由工厂读取。

    Attributes:
        servers: 节点地址列表（必需，不可为空），如 "10.0.0.1:9200"
        cluster_name: 集群名称，默认 "elasticsearch"
        settings: 自定义设置，优先级高于设置文件
        headers: 每个请求默认附带的请求头（仅 HTTP 模式）
        settings_file: 设置文件路径，可以是文件系统路径或包内资源名
        mode: 客户端模式，默认 HTTP
        sniffer: 节点嗅探配置

    Raises:
        ConfigurationError: 当 servers 或 cluster_name 为空时抛出

    Examples:
        >>> config = ClusterConfig(
        ...     servers=["10.0.0.1:9200"],
        ...     headers={"X-Tenant": "search"},
        ...     sniffer=SnifferConfig(enabled=True),
        ... )
    """

    servers: list[str] = field(default_factory=list)
    cluster_name: str = DEFAULT_CLUSTER_NAME
    settings: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    settings_file: str | None = None
    mode: ClientMode = ClientMode.HTTP
    sniffer: SnifferConfig = field(default_factory=SnifferConfig)

    def __post_init__(self) -> None:
        """校验集群配置参数合法性."""
        if not self.servers:
            raise ConfigurationError("servers 不能为空，请提供至少一个节点地址")
        if not self.cluster_name:
            raise ConfigurationError("cluster_name 不能为空")
        settings = {str(k): str(v) for k, v in (self.settings or {}).items()}
        headers = {str(k): str(v) for k, v in (self.headers or {}).items()}
        # frozen，只能通过 object.__setattr__ 赋值
        object.__setattr__(self, "servers", list(self.servers))
        object.__setattr__(self, "mode", ClientMode.parse(self.mode))
        object.__setattr__(self, "settings", settings)
        object.__setattr__(self, "headers", headers)
        if isinstance(self.sniffer, dict):
            object.__setattr__(self, "sniffer", SnifferConfig.from_dict(self.sniffer))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClusterConfig:
        """从外部配置字典构建集群配置.

        支持驼峰命名（clusterName、settingsFile）与下划线命名；
        旧版的布尔键 transportClient 等价于 mode="transport"；
        嗅探配置可以放在 discovery 或 sniffer 键下。

        Args:
            data: 配置字典

        Returns:
            ClusterConfig 实例

        Raises:
            ConfigurationError: 当配置不合法时抛出
        """
        if data is None:
            raise ConfigurationError("配置不能为空")

        mode = _pick(data, "mode")
        if mode is None:
            transport = parse_bool(
                "transportClient",
                _pick(data, "transportClient", "transport_client", default=False),
            )
            mode = ClientMode.TRANSPORT if transport else ClientMode.HTTP

        return cls(
            servers=list(_pick(data, "servers", "hosts", default=[]) or []),
            cluster_name=_pick(
                data, "clusterName", "cluster_name", default=DEFAULT_CLUSTER_NAME
            ),
            settings=dict(_pick(data, "settings", default={}) or {}),
            headers=dict(_pick(data, "headers", default={}) or {}),
            settings_file=_pick(data, "settingsFile", "settings_file"),
            mode=mode,
            sniffer=SnifferConfig.from_dict(_pick(data, "discovery", "sniffer")),
        )
