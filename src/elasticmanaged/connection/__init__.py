"""客户端连接配置模块 - 集群配置、节点地址解析和设置合并.

主要组件:
    - ClusterConfig: 集群配置模型
    - SnifferConfig: 节点嗅探配置模型
    - ClientMode: 客户端模式枚举
    - NodeAddress: 节点地址

使用示例:
    from elasticmanaged.connection import ClusterConfig

    config = ClusterConfig.from_dict({"servers": ["10.0.0.1:9200"]})
"""

from .addresses import (
    DEFAULT_HTTP_PORT,
    DEFAULT_TRANSPORT_PORT,
    NodeAddress,
    http_hosts,
    parse_server,
    transport_addresses,
)
from .exceptions import ConfigurationError, UnsupportedModeError
from .models import ClientMode, ClusterConfig, SnifferConfig
from .settings import build_settings, client_options, load_settings_file

__all__ = [
    # 模型
    "ClusterConfig",
    "SnifferConfig",
    "ClientMode",
    "NodeAddress",
    # 地址解析
    "parse_server",
    "transport_addresses",
    "http_hosts",
    "DEFAULT_TRANSPORT_PORT",
    "DEFAULT_HTTP_PORT",
    # 设置
    "build_settings",
    "client_options",
    "load_settings_file",
    # 异常
    "ConfigurationError",
    "UnsupportedModeError",
]
