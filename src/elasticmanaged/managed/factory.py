"""托管客户端工厂模块.

根据 ClusterConfig 构建客户端句柄：
    - 合并设置文件、显式设置与集群名称
    - 按模式构建直连客户端或 HTTP 客户端
    - HTTP 模式下按需附加默认请求头并启动节点嗅探器

使用示例:
    from elasticmanaged.connection import ClusterConfig
    from elasticmanaged.managed import ClientFactory

    handle = ClientFactory().build(ClusterConfig(servers=["10.0.0.1:9200"]))
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from elastic_transport import NodeConfig
from elasticsearch import Elasticsearch

from ..connection.addresses import http_hosts, transport_addresses
from ..connection.exceptions import UnsupportedModeError
from ..connection.models import ClientMode, ClusterConfig, SnifferConfig
from ..connection.settings import (
    DEFAULT_RESOURCE_PACKAGE,
    build_settings,
    client_options,
)
from ..sniffer.tool import NodesSniffer, Sniffer
from .models import ClientHandle, HttpClientHandle, TransportClientHandle

logger = logging.getLogger(__name__)


def _use_https(node_info: dict[str, Any], node_config: NodeConfig) -> NodeConfig:
    """让传输层在节点失败后嗅探到的节点使用 https."""
    return dataclasses.replace(node_config, scheme="https")


class ClientFactory:
    """托管客户端工厂.

    Args:
        resource_package: 设置文件不在文件系统上时，查找包内资源的包名
    """

    def __init__(self, resource_package: str = DEFAULT_RESOURCE_PACKAGE) -> None:
        self._resource_package = resource_package

    def build(self, config: ClusterConfig) -> ClientHandle:
        """根据集群配置构建客户端句柄.

        Args:
            config: 已校验的集群配置

        Returns:
            TransportClientHandle 或 HttpClientHandle

        Raises:
            ValueError: config 为 None 时抛出
            UnsupportedModeError: 请求内嵌节点模式时抛出
            ConfigurationError: 设置文件或节点地址不合法时抛出
        """
        if config is None:
            raise ValueError("ClusterConfig 不能为 None")

        if config.mode is ClientMode.NODE:
            raise UnsupportedModeError(
                "内嵌节点模式已不再受支持，"
                "请运行本地协调节点并使用 transport 或 http 模式连接"
            )

        settings = build_settings(config, self._resource_package)
        options = client_options(settings)

        if config.mode is ClientMode.TRANSPORT:
            return self._build_transport_client(config, settings, options)
        return self._build_http_client(config, settings, options)

    def _build_transport_client(
        self,
        config: ClusterConfig,
        settings: dict[str, str],
        options: dict[str, Any],
    ) -> TransportClientHandle:
        """构建固定连接到配置节点的直连客户端."""
        addresses = transport_addresses(config.servers)
        client = Elasticsearch(hosts=[a.to_host() for a in addresses], **options)
        logger.info(
            f"创建直连客户端: cluster={config.cluster_name}, "
            f"nodes={[str(a) for a in addresses]}"
        )
        return TransportClientHandle(client=client, settings=settings)

    def _build_http_client(
        self,
        config: ClusterConfig,
        settings: dict[str, str],
        options: dict[str, Any],
    ) -> HttpClientHandle:
        """构建 HTTP 客户端，按需附加默认请求头和节点嗅探器."""
        hosts = http_hosts(config.servers)
        kwargs: dict[str, Any] = {"hosts": [h.to_host() for h in hosts], **options}

        if config.headers:
            kwargs["headers"] = dict(config.headers)

        sniffer_config = config.sniffer
        if sniffer_config.enabled and sniffer_config.sniff_on_failure:
            # 节点失败触发的嗅探由传输层完成
            kwargs["sniff_on_node_failure"] = True
            kwargs["min_delay_between_sniffing"] = sniffer_config.sniff_failure_delay
            if sniffer_config.use_https:
                kwargs["sniffed_node_callback"] = _use_https

        client = Elasticsearch(**kwargs)
        logger.info(
            f"创建 HTTP 客户端: cluster={config.cluster_name}, "
            f"hosts={[str(h) for h in hosts]}, sniffer={sniffer_config.enabled}"
        )

        sniffer = None
        if sniffer_config.enabled:
            sniffer = self._build_sniffer(client, sniffer_config)
        return HttpClientHandle(client=client, settings=settings, sniffer=sniffer)

    def _build_sniffer(
        self, client: Elasticsearch, sniffer_config: SnifferConfig
    ) -> Sniffer:
        """构建并启动绑定到客户端节点池的周期嗅探器."""
        sniffer = Sniffer(
            client,
            NodesSniffer(client, scheme=sniffer_config.scheme),
            sniff_interval=sniffer_config.sniff_interval,
            sniff_after_failure_delay=sniffer_config.sniff_failure_delay,
            sniff_on_failure=sniffer_config.sniff_on_failure,
        )
        return sniffer.start()
