"""托管客户端生命周期模块.

提供 ManagedElasticsearch 类，持有 ClientFactory 构建的客户端句柄，
在宿主服务启动时 start()，在服务停止时 stop() 并按固定顺序释放资源：
节点嗅探器 → 直连客户端 → HTTP 客户端。

使用示例:
    from elasticmanaged.connection import ClusterConfig
    from elasticmanaged.managed import ManagedElasticsearch

    config = ClusterConfig(servers=["10.0.0.1:9200"])
    with ManagedElasticsearch.from_config(config) as managed:
        managed.http_client.search(index="logs", query={"match_all": {}})
"""

from __future__ import annotations

import logging

from elasticsearch import Elasticsearch

from ..connection.models import ClientMode, ClusterConfig
from ..exceptions import LifecycleError, ResourceReleaseError
from ..sniffer.tool import Sniffer
from .factory import ClientFactory
from .models import (
    ClientHandle,
    HttpClientHandle,
    LifecycleState,
    TransportClientHandle,
)

logger = logging.getLogger(__name__)


class ManagedElasticsearch:
    """受宿主生命周期管理的 Elasticsearch 客户端.

    客户端在构造时已经创建，start() 只是满足宿主约定的生命周期钩子；
    stop() 会尝试关闭所有持有的资源，单个资源关闭失败不会阻止其余资源的释放，
    失败项在全部关闭后以 ResourceReleaseError 汇总抛出。重复 stop() 无副作用。

    Attributes:
        _handle: 客户端句柄
        _state: 生命周期状态

    Examples:
        >>> managed = ManagedElasticsearch.from_config(
        ...     ClusterConfig(servers=["10.0.0.1:9200"])
        ... )
        >>> managed.start()
        >>> client = managed.client
        >>> managed.stop()
    """

    def __init__(self, handle: ClientHandle) -> None:
        """初始化托管客户端.

        Args:
            handle: ClientFactory 构建的客户端句柄

        Raises:
            ValueError: handle 为 None 时抛出
        """
        if handle is None:
            raise ValueError("客户端句柄不能为 None")
        self._handle = handle
        self._state = LifecycleState.CREATED

    @classmethod
    def from_config(
        cls, config: ClusterConfig, factory: ClientFactory | None = None
    ) -> ManagedElasticsearch:
        """根据集群配置构建托管客户端.

        Args:
            config: 已校验的集群配置
            factory: 客户端工厂，默认使用 ClientFactory()

        Returns:
            ManagedElasticsearch 实例
        """
        return cls((factory or ClientFactory()).build(config))

    @classmethod
    def from_client(cls, client: Elasticsearch) -> ManagedElasticsearch:
        """托管一个外部已创建的客户端（按直连模式处理）.

        Args:
            client: 已初始化的 Elasticsearch 客户端

        Raises:
            ValueError: client 为 None 时抛出
        """
        if client is None:
            raise ValueError("Elasticsearch 客户端不能为 None")
        return cls(TransportClientHandle(client=client))

    # ============================================================
    # 访问器
    # ============================================================

    @property
    def handle(self) -> ClientHandle:
        return self._handle

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def mode(self) -> ClientMode:
        return self._handle.mode

    @property
    def settings(self) -> dict[str, str]:
        """合并后的客户端设置."""
        return dict(self._handle.settings)

    @property
    def client(self) -> Elasticsearch:
        """当前模式下的客户端."""
        return self._handle.client

    @property
    def transport_client(self) -> Elasticsearch | None:
        """直连模式客户端，HTTP 模式下为 None."""
        if isinstance(self._handle, TransportClientHandle):
            return self._handle.client
        return None

    @property
    def http_client(self) -> Elasticsearch | None:
        """HTTP 模式客户端，直连模式下为 None."""
        if isinstance(self._handle, HttpClientHandle):
            return self._handle.client
        return None

    @property
    def sniffer(self) -> Sniffer | None:
        """节点嗅探器，未启用嗅探或直连模式下为 None."""
        if isinstance(self._handle, HttpClientHandle):
            return self._handle.sniffer
        return None

    # ============================================================
    # 生命周期管理
    # ============================================================

    def start(self) -> None:
        """服务开始接受请求前调用.

        客户端已在构造时创建，这里只切换状态。

        Raises:
            LifecycleError: 在 stop() 之后调用时抛出
        """
        if self._state is LifecycleState.STOPPED:
            raise LifecycleError("客户端已停止，不能再次启动")
        if self._state is LifecycleState.RUNNING:
            return
        self._state = LifecycleState.RUNNING
        logger.info(f"托管客户端已启动: mode={self.mode.value}")

    def stop(self) -> None:
        """服务停止接受请求后调用，释放全部资源.

        关闭顺序：节点嗅探器 → 直连客户端 → HTTP 客户端。
        重复调用或在部分初始化后调用均是安全的。

        Raises:
            ResourceReleaseError: 有资源关闭失败时，在全部资源尝试关闭后抛出
        """
        if self._state is LifecycleState.STOPPED:
            return
        self._state = LifecycleState.STOPPED

        failures: list[tuple[str, BaseException]] = []
        resources = (
            ("sniffer", self.sniffer),
            ("transport_client", self.transport_client),
            ("http_client", self.http_client),
        )
        for name, resource in resources:
            if resource is None:
                continue
            try:
                resource.close()
            except Exception as e:
                logger.warning(f"关闭 {name} 失败: {e}")
                failures.append((name, e))

        if failures:
            raise ResourceReleaseError(failures)
        logger.info("托管客户端已停止")

    def __enter__(self) -> ManagedElasticsearch:
        """上下文管理器入口，调用 start()."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """上下文管理器退出，调用 stop()."""
        self.stop()
