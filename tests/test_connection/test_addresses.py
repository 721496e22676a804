"""节点地址解析单元测试."""

import pytest

from elasticmanaged.connection.addresses import (
    DEFAULT_HTTP_PORT,
    DEFAULT_TRANSPORT_PORT,
    NodeAddress,
    http_hosts,
    parse_server,
    transport_addresses,
)
from elasticmanaged.connection.exceptions import ConfigurationError


class TestParseServer:
    """parse_server 函数测试."""

    def test_host_only_uses_default_port(self) -> None:
        """测试只有主机名时使用缺省端口."""
        address = parse_server("node1", default_port=9300)
        assert address == NodeAddress(scheme="http", host="node1", port=9300)

    def test_host_and_port(self) -> None:
        """测试主机名加端口."""
        address = parse_server("10.0.0.1:9201", default_port=9200)
        assert address.host == "10.0.0.1"
        assert address.port == 9201

    def test_scheme_is_kept(self) -> None:
        """测试保留显式协议."""
        address = parse_server("https://search.example.com", default_port=9200)
        assert address.scheme == "https"
        assert address.host == "search.example.com"
        assert address.port == 9200

    def test_ipv6(self) -> None:
        """测试带方括号的 IPv6 地址."""
        address = parse_server("[::1]:9201", default_port=9200)
        assert address.host == "::1"
        assert address.port == 9201
        assert str(address) == "http://[::1]:9201"

    def test_whitespace_stripped(self) -> None:
        """测试首尾空白被去除."""
        assert parse_server("  node1:9200 ", default_port=9300).host == "node1"

    @pytest.mark.parametrize("server", ["", "   ", None])
    def test_empty_raises_error(self, server) -> None:
        """测试空地址抛出 ConfigurationError."""
        with pytest.raises(ConfigurationError, match="服务器地址不能为空"):
            parse_server(server, default_port=9200)

    def test_invalid_port_raises_error(self) -> None:
        """测试非法端口抛出 ConfigurationError."""
        with pytest.raises(ConfigurationError, match="无效的服务器地址"):
            parse_server("node1:abc", default_port=9200)

    def test_unsupported_scheme_raises_error(self) -> None:
        """测试不支持的协议抛出 ConfigurationError."""
        with pytest.raises(ConfigurationError, match="不支持的协议"):
            parse_server("ftp://node1:21", default_port=9200)

    def test_to_host(self) -> None:
        """测试转换为 Elasticsearch 节点字典."""
        address = NodeAddress(scheme="http", host="node1", port=9200)
        assert address.to_host() == {"scheme": "http", "host": "node1", "port": 9200}


class TestServerLists:
    """transport_addresses 和 http_hosts 测试."""

    def test_transport_default_port(self) -> None:
        """测试直连模式缺省端口为 9300."""
        addresses = transport_addresses(["node1", "node2:9301"])
        assert [a.port for a in addresses] == [DEFAULT_TRANSPORT_PORT, 9301]
        assert DEFAULT_TRANSPORT_PORT == 9300

    def test_http_default_port(self) -> None:
        """测试 HTTP 模式缺省端口为 9200."""
        hosts = http_hosts(["node1", "node2:9201"])
        assert [h.port for h in hosts] == [DEFAULT_HTTP_PORT, 9201]
        assert DEFAULT_HTTP_PORT == 9200

    def test_order_preserved(self) -> None:
        """测试保持配置顺序."""
        hosts = http_hosts(["c", "a", "b"])
        assert [h.host for h in hosts] == ["c", "a", "b"]

    @pytest.mark.parametrize("parse", [transport_addresses, http_hosts])
    def test_empty_list_raises_error(self, parse) -> None:
        """测试空列表抛出 ConfigurationError."""
        with pytest.raises(ConfigurationError, match="servers 不能为空"):
            parse([])
