"""集群健康检查数据模型定义模块."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """集群健康状态.

    Attributes:
        HEALTHY: green，所有分片均已分配
        DEGRADED: yellow，主分片可用但副本不足
        CRITICAL: red，存在不可用的主分片
    """

    HEALTHY = "green"
    DEGRADED = "yellow"
    CRITICAL = "red"

    @classmethod
    def from_string(cls, value: str) -> HealthStatus:
        """将 _cluster/health 返回的状态字符串转换为 HealthStatus.

        无法识别的状态按 CRITICAL 处理。

        Args:
            value: 状态字符串，如 "green"

        Returns:
            对应的 HealthStatus
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"未知的集群健康状态 {value!r}，按 red 处理")
            return cls.CRITICAL


@dataclass(frozen=True)
class HealthCheckResult:
    """健康检查结果.

    Attributes:
        healthy: 是否健康
        message: 诊断信息
        status: 集群健康状态，请求失败时为 None
        error: 导致检查失败的异常
    """

    healthy: bool
    message: str
    status: HealthStatus | None = None
    error: BaseException | None = None

    @classmethod
    def healthy_result(
        cls, message: str, status: HealthStatus | None = None
    ) -> HealthCheckResult:
        return cls(healthy=True, message=message, status=status)

    @classmethod
    def unhealthy_result(
        cls,
        message: str,
        status: HealthStatus | None = None,
        error: BaseException | None = None,
    ) -> HealthCheckResult:
        return cls(healthy=False, message=message, status=status, error=error)
