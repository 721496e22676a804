"""集群健康检查工具模块.

提供 ClusterHealthCheck 类，通过当前模式的客户端查询集群健康状态，
并转换为 健康/不健康 的检查结果。

使用示例:
    from elasticmanaged.health import ClusterHealthCheck

    check = ClusterHealthCheck(managed, fail_on_yellow=True)
    result = check.check()
    if not result.healthy:
        print(result.message)

宿主需保证 stop() 开始后不再调用健康检查。
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from elastic_transport import ConnectionError as TransportConnectionError
from elastic_transport import JsonSerializer, SerializationError, TransportError
from elasticsearch import ApiError

from ..managed.models import ClientHandle, HttpClientHandle, TransportClientHandle
from ..managed.tool import ManagedElasticsearch
from .models import HealthCheckResult, HealthStatus

logger = logging.getLogger(__name__)

CLUSTER_HEALTH_ENDPOINT = "/_cluster/health"


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


class ClusterHealthCheck:
    """Elasticsearch 集群健康检查.

    red 状态始终不健康；yellow 状态在 fail_on_yellow=True 时不健康；
    其余为健康。请求失败（网络错误、非 2xx 响应、响应无法解析）
    转换为不健康结果，不会抛出。

    Args:
        handle: 客户端句柄或 ManagedElasticsearch
        fail_on_yellow: yellow 状态是否视为不健康，默认 False
        serializer: 解析响应体的 JSON 序列化器，默认 JsonSerializer()
        name: 注册到宿主时使用的名称

    Raises:
        ValueError: handle 为 None 时抛出
    """

    def __init__(
        self,
        handle: ClientHandle | ManagedElasticsearch,
        fail_on_yellow: bool = False,
        serializer: JsonSerializer | None = None,
        name: str = "elasticsearch",
    ) -> None:
        if handle is None:
            raise ValueError("客户端句柄不能为 None")
        if isinstance(handle, ManagedElasticsearch):
            handle = handle.handle
        self._handle = handle
        self.fail_on_yellow = fail_on_yellow
        self._serializer = serializer or JsonSerializer()
        self.name = name

    def check(self) -> HealthCheckResult:
        """执行一次集群健康检查.

        Returns:
            HealthCheckResult，message 中包含原始状态名或失败原因
        """
        try:
            if isinstance(self._handle, TransportClientHandle):
                return self._check_transport_client()
            return self._check_http_client()
        except ApiError as e:
            return self._status_error(e)
        except (TransportError, SerializationError) as e:
            if isinstance(e, TransportConnectionError):
                self._notify_failure()
            logger.warning(f"集群健康检查请求失败: {e}")
            return HealthCheckResult.unhealthy_result(
                f"cluster health request failed: {e}", error=e
            )

    def execute(self) -> HealthCheckResult:
        """供宿主调用的入口，任何异常都转换为不健康结果."""
        try:
            return self.check()
        except Exception as e:
            logger.exception(f"健康检查 {self.name} 执行异常")
            return HealthCheckResult.unhealthy_result(str(e), error=e)

    def _check_transport_client(self) -> HealthCheckResult:
        response = self._handle.client.cluster.health()
        body = response.body if hasattr(response, "body") else response
        if "status" not in body:
            return HealthCheckResult.unhealthy_result(
                f"no status in response - {self._render(body)}"
            )
        return self._check_status(str(body["status"]))

    def _check_http_client(self) -> HealthCheckResult:
        """通过 perform_request 查询 /_cluster/health.

        响应体为 str/bytes 时原样作为缺少 status 时的诊断信息；
        客户端已反序列化响应体时拿不到原始文本，改为用 serializer 重新序列化。
        """
        response = self._handle.client.perform_request(
            "GET", CLUSTER_HEALTH_ENDPOINT, headers={"accept": "application/json"}
        )
        status_code = response.meta.status
        if status_code >= 300:
            return self._status_error_result(status_code)

        body: Any = response.body
        if isinstance(body, (str, bytes)):
            raw = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
            body = self._serializer.loads(body)
        else:
            raw = self._render(body)

        if not isinstance(body, dict) or "status" not in body:
            return HealthCheckResult.unhealthy_result(
                f"no status in response - {raw}"
            )
        return self._check_status(str(body["status"]))

    def _check_status(self, status_name: str) -> HealthCheckResult:
        status = HealthStatus.from_string(status_name)
        message = f"Last status: {status_name}"
        if status is HealthStatus.CRITICAL or (
            self.fail_on_yellow and status is HealthStatus.DEGRADED
        ):
            return HealthCheckResult.unhealthy_result(message, status=status)
        return HealthCheckResult.healthy_result(message, status=status)

    def _status_error(self, error: ApiError) -> HealthCheckResult:
        return self._status_error_result(error.meta.status, error)

    def _status_error_result(
        self, status_code: int, error: ApiError | None = None
    ) -> HealthCheckResult:
        reason = _reason_phrase(status_code)
        return HealthCheckResult.unhealthy_result(
            f"status error from server: {status_code} - {reason}", error=error
        )

    def _render(self, body: Any) -> str:
        return self._serializer.dumps(body).decode("utf-8", "replace")

    def _notify_failure(self) -> None:
        if isinstance(self._handle, HttpClientHandle) and self._handle.sniffer is not None:
            self._handle.sniffer.on_failure()
