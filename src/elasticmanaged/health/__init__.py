"""集群健康检查模块.

主要组件:
    - ClusterHealthCheck: 集群健康检查
    - HealthStatus: 集群健康状态枚举
    - HealthCheckResult: 健康检查结果
"""

from .models import HealthCheckResult, HealthStatus
from .tool import CLUSTER_HEALTH_ENDPOINT, ClusterHealthCheck

__all__ = [
    "ClusterHealthCheck",
    "HealthStatus",
    "HealthCheckResult",
    "CLUSTER_HEALTH_ENDPOINT",
]
