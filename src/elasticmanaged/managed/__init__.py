"""托管客户端模块 - 客户端构建与生命周期管理.

主要组件:
    - ClientFactory: 根据 ClusterConfig 构建客户端句柄
    - ManagedElasticsearch: 受宿主 start/stop 管理的客户端
    - TransportClientHandle / HttpClientHandle: 客户端句柄
    - LifecycleState: 生命周期状态枚举

使用示例:
    from elasticmanaged.managed import ManagedElasticsearch

    managed = ManagedElasticsearch.from_config(config)
    managed.start()
    ...
    managed.stop()
"""

from .factory import ClientFactory
from .models import (
    ClientHandle,
    HttpClientHandle,
    LifecycleState,
    TransportClientHandle,
)
from .tool import ManagedElasticsearch

__all__ = [
    # 工厂
    "ClientFactory",
    # 生命周期
    "ManagedElasticsearch",
    "LifecycleState",
    # 句柄
    "ClientHandle",
    "TransportClientHandle",
    "HttpClientHandle",
]
