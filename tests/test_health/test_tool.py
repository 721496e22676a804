"""ClusterHealthCheck 单元测试.

覆盖直连与 HTTP 两种模式的状态判定、fail_on_yellow 阈值、
服务端错误状态码、缺少 status 的响应以及传输层异常。
"""

from unittest.mock import MagicMock

import pytest
from elastic_transport import ConnectionError as TransportConnectionError
from elastic_transport import JsonSerializer
from elasticsearch import ApiError

from elasticmanaged.health.models import HealthStatus
from elasticmanaged.health.tool import CLUSTER_HEALTH_ENDPOINT, ClusterHealthCheck
from elasticmanaged.managed.models import HttpClientHandle, TransportClientHandle
from elasticmanaged.managed.tool import ManagedElasticsearch


# ============================================================
# 辅助函数与 fixtures
# ============================================================


def _http_response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.meta.status = status_code
    response.body = body
    return response


def _api_error(status_code: int) -> ApiError:
    meta = MagicMock()
    meta.status = status_code
    return ApiError(message="error", meta=meta, body={})


@pytest.fixture
def http_handle() -> HttpClientHandle:
    return HttpClientHandle(client=MagicMock(), sniffer=MagicMock())


@pytest.fixture
def transport_handle() -> TransportClientHandle:
    return TransportClientHandle(client=MagicMock())


# ============================================================
# 构造
# ============================================================


class TestConstruction:
    """构造参数测试."""

    def test_none_handle_raises_error(self) -> None:
        """测试句柄为 None 抛出 ValueError."""
        with pytest.raises(ValueError, match="客户端句柄不能为 None"):
            ClusterHealthCheck(None)

    def test_accepts_managed_client(self, http_handle) -> None:
        """测试接受 ManagedElasticsearch."""
        http_handle.client.perform_request.return_value = _http_response(
            200, {"status": "green"}
        )
        check = ClusterHealthCheck(ManagedElasticsearch(http_handle))
        assert check.check().healthy is True

    def test_defaults(self, http_handle) -> None:
        """测试默认参数."""
        check = ClusterHealthCheck(http_handle)
        assert check.fail_on_yellow is False
        assert check.name == "elasticsearch"


# ============================================================
# 状态判定
# ============================================================


class TestClassification:
    """状态与 fail_on_yellow 组合测试（直连模式）."""

    @pytest.mark.parametrize(
        "status,fail_on_yellow,healthy",
        [
            ("green", False, True),
            ("green", True, True),
            ("yellow", False, True),
            ("yellow", True, False),
            ("red", False, False),
            ("red", True, False),
        ],
    )
    def test_status(self, transport_handle, status, fail_on_yellow, healthy) -> None:
        """测试各状态的健康判定."""
        transport_handle.client.cluster.health.return_value = {"status": status}
        result = ClusterHealthCheck(transport_handle, fail_on_yellow).check()
        assert result.healthy is healthy
        assert result.status is HealthStatus(status)
        assert result.message == f"Last status: {status}"

    def test_unknown_status_is_unhealthy(self, transport_handle) -> None:
        """测试未知状态按 red 处理，并保留原始状态名."""
        transport_handle.client.cluster.health.return_value = {"status": "purple"}
        result = ClusterHealthCheck(transport_handle).check()
        assert result.healthy is False
        assert result.status is HealthStatus.CRITICAL
        assert "purple" in result.message


class TestTransportClient:
    """直连模式健康检查测试."""

    def test_uses_cluster_health_api(self, transport_handle) -> None:
        """测试调用 cluster.health()."""
        transport_handle.client.cluster.health.return_value = {"status": "green"}
        ClusterHealthCheck(transport_handle).check()
        transport_handle.client.cluster.health.assert_called_once_with()
        transport_handle.client.perform_request.assert_not_called()

    def test_response_body_attribute(self, transport_handle) -> None:
        """测试使用响应对象的 body 属性."""
        response = MagicMock()
        response.body = {"status": "yellow"}
        transport_handle.client.cluster.health.return_value = response
        result = ClusterHealthCheck(transport_handle, fail_on_yellow=True).check()
        assert result.healthy is False

    def test_missing_status(self, transport_handle) -> None:
        """测试响应缺少 status."""
        transport_handle.client.cluster.health.return_value = {"cluster_name": "x"}
        result = ClusterHealthCheck(transport_handle).check()
        assert result.healthy is False
        assert result.message.startswith("no status in response - ")
        assert "cluster_name" in result.message

    def test_api_error(self, transport_handle) -> None:
        """测试服务端错误转换为不健康结果."""
        transport_handle.client.cluster.health.side_effect = _api_error(408)
        result = ClusterHealthCheck(transport_handle).check()
        assert result.healthy is False
        assert result.message == "status error from server: 408 - Request Timeout"


class TestHttpClient:
    """HTTP 模式健康检查测试."""

    def test_green(self, http_handle) -> None:
        """测试 200 + green 为健康."""
        http_handle.client.perform_request.return_value = _http_response(
            200, {"status": "green"}
        )
        result = ClusterHealthCheck(http_handle).check()

        http_handle.client.perform_request.assert_called_once_with(
            "GET", CLUSTER_HEALTH_ENDPOINT, headers={"accept": "application/json"}
        )
        assert result.healthy is True
        assert result.status is HealthStatus.HEALTHY
        assert "green" in result.message

    def test_status_code_error(self, http_handle) -> None:
        """测试 503 为不健康，且不解析响应体."""
        serializer = MagicMock()
        http_handle.client.perform_request.return_value = _http_response(
            503, b"not json"
        )
        result = ClusterHealthCheck(http_handle, serializer=serializer).check()

        assert result.healthy is False
        assert "503" in result.message
        assert result.message == "status error from server: 503 - Service Unavailable"
        serializer.loads.assert_not_called()

    def test_api_error(self, http_handle) -> None:
        """测试客户端抛出的 ApiError."""
        http_handle.client.perform_request.side_effect = _api_error(503)
        result = ClusterHealthCheck(http_handle).check()
        assert result.healthy is False
        assert "503" in result.message
        assert isinstance(result.error, ApiError)

    def test_redirect_status_is_error(self, http_handle) -> None:
        """测试 3xx 状态码同样视为错误."""
        http_handle.client.perform_request.return_value = _http_response(301, {})
        result = ClusterHealthCheck(http_handle).check()
        assert result.message == "status error from server: 301 - Moved Permanently"

    def test_raw_body_parsed_with_serializer(self, http_handle) -> None:
        """测试原始文本响应体使用注入的序列化器解析."""
        serializer = MagicMock(wraps=JsonSerializer())
        http_handle.client.perform_request.return_value = _http_response(
            200, b'{"status": "yellow"}'
        )
        result = ClusterHealthCheck(
            http_handle, fail_on_yellow=True, serializer=serializer
        ).check()

        serializer.loads.assert_called_once_with(b'{"status": "yellow"}')
        assert result.healthy is False
        assert result.status is HealthStatus.DEGRADED

    def test_missing_status_contains_raw_body(self, http_handle) -> None:
        """测试缺少 status 时原因中包含原始响应体."""
        raw = '{"cluster_name": "logs", "number_of_nodes": 3}'
        http_handle.client.perform_request.return_value = _http_response(200, raw)
        result = ClusterHealthCheck(http_handle).check()
        assert result.healthy is False
        assert result.message == f"no status in response - {raw}"

    def test_missing_status_in_mapping_body(self, http_handle) -> None:
        """测试已解析的响应体缺少 status 时原因中包含重新序列化的响应体."""
        http_handle.client.perform_request.return_value = _http_response(
            200, {"cluster_name": "logs"}
        )
        result = ClusterHealthCheck(http_handle).check()
        assert result.healthy is False
        assert '"cluster_name":"logs"' in result.message.replace(" ", "")

    def test_invalid_json_is_unhealthy(self, http_handle) -> None:
        """测试无法解析的响应体转换为不健康结果."""
        http_handle.client.perform_request.return_value = _http_response(
            200, "<html>"
        )
        result = ClusterHealthCheck(http_handle).check()
        assert result.healthy is False
        assert result.error is not None


class TestTransportFailures:
    """传输层异常测试."""

    def test_connection_error_is_unhealthy(self, http_handle) -> None:
        """测试网络错误转换为不健康结果并通知嗅探器."""
        error = TransportConnectionError("connection refused")
        http_handle.client.perform_request.side_effect = error
        result = ClusterHealthCheck(http_handle).check()

        assert result.healthy is False
        assert result.error is error
        assert "connection refused" in result.message
        http_handle.sniffer.on_failure.assert_called_once()

    def test_connection_error_without_sniffer(self) -> None:
        """测试无嗅探器时网络错误也不会抛出."""
        handle = HttpClientHandle(client=MagicMock())
        handle.client.perform_request.side_effect = TransportConnectionError("down")
        assert ClusterHealthCheck(handle).check().healthy is False

    def test_transport_client_connection_error(self, transport_handle) -> None:
        """测试直连模式网络错误."""
        transport_handle.client.cluster.health.side_effect = TransportConnectionError(
            "down"
        )
        assert ClusterHealthCheck(transport_handle).check().healthy is False


class TestExecute:
    """execute 入口测试."""

    def test_unexpected_error_is_unhealthy(self, http_handle) -> None:
        """测试意外异常转换为不健康结果."""
        http_handle.client.perform_request.side_effect = KeyError("boom")
        result = ClusterHealthCheck(http_handle).execute()
        assert result.healthy is False
        assert isinstance(result.error, KeyError)

    def test_delegates_to_check(self, http_handle) -> None:
        """测试正常情况下返回 check 的结果."""
        http_handle.client.perform_request.return_value = _http_response(
            200, {"status": "green"}
        )
        assert ClusterHealthCheck(http_handle).execute().healthy is True
