"""elasticmanaged - Managed Elasticsearch Client Lifecycle and Health Checks.

这是一个把 Elasticsearch 客户端接入服务生命周期的 Python 库。

主要功能:
    - ClientFactory: 根据配置构建直连或 HTTP 客户端，可选节点嗅探
    - ManagedElasticsearch: 随服务 start/stop 管理客户端及其资源
    - ClusterHealthCheck: 基于 _cluster/health 的集群健康检查

使用示例:
    from elasticmanaged import ClusterConfig, ClusterHealthCheck, ManagedElasticsearch

    managed = ManagedElasticsearch.from_config(
        ClusterConfig(servers=["10.0.0.1:9200"])
    )
    managed.start()
    result = ClusterHealthCheck(managed).check()
    managed.stop()
"""

__version__ = "0.1.0"

# 导出配置
from elasticmanaged.connection import (
    ClientMode,
    ClusterConfig,
    ConfigurationError,
    SnifferConfig,
    UnsupportedModeError,
)

# 导出异常
from elasticmanaged.exceptions import (
    ElasticManagedError,
    LifecycleError,
    ResourceReleaseError,
)

# 导出健康检查
from elasticmanaged.health import ClusterHealthCheck, HealthCheckResult, HealthStatus

# 导出托管客户端
from elasticmanaged.managed import (
    ClientFactory,
    HttpClientHandle,
    LifecycleState,
    ManagedElasticsearch,
    TransportClientHandle,
)

# 导出嗅探器
from elasticmanaged.sniffer import NodesSniffer, Sniffer

__all__ = [
    # 版本
    "__version__",
    # 配置
    "ClusterConfig",
    "SnifferConfig",
    "ClientMode",
    # 托管客户端
    "ClientFactory",
    "ManagedElasticsearch",
    "LifecycleState",
    "TransportClientHandle",
    "HttpClientHandle",
    # 嗅探器
    "Sniffer",
    "NodesSniffer",
    # 健康检查
    "ClusterHealthCheck",
    "HealthStatus",
    "HealthCheckResult",
    # 异常
    "ElasticManagedError",
    "ConfigurationError",
    "UnsupportedModeError",
    "ResourceReleaseError",
    "LifecycleError",
]
