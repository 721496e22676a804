"""节点地址解析模块.

将配置中的服务器字符串（"host"、"host:port"、"scheme://host:port"、
"[::1]:9200"）解析为 NodeAddress，缺省端口取决于客户端模式。
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from .exceptions import ConfigurationError

DEFAULT_TRANSPORT_PORT = 9300
DEFAULT_HTTP_PORT = 9200

_SUPPORTED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class NodeAddress:
    """单个节点地址.

    Attributes:
        scheme: 协议，http 或 https
        host: 主机名或 IP（IPv6 不带方括号）
        port: 端口
    """

    scheme: str
    host: str
    port: int

    def to_host(self) -> dict[str, str | int]:
        """转换为 Elasticsearch(hosts=...) 接受的节点字典."""
        return {"scheme": self.scheme, "host": self.host, "port": self.port}

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"


def parse_server(
    server: str, default_port: int, default_scheme: str = "http"
) -> NodeAddress:
    """解析单个服务器字符串.

    Args:
        server: 服务器字符串
        default_port: 未指定端口时使用的端口
        default_scheme: 未指定协议时使用的协议

    Returns:
        NodeAddress 实例

    Raises:
        ConfigurationError: 当主机为空、端口非法或协议不受支持时抛出
    """
    text = (server or "").strip()
    if not text:
        raise ConfigurationError("服务器地址不能为空")

    if "://" not in text:
        text = f"{default_scheme}://{text}"

    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(f"无效的服务器地址: {server!r}, 错误: {e}") from e

    scheme = parts.scheme.lower()
    if scheme not in _SUPPORTED_SCHEMES:
        raise ConfigurationError(f"不支持的协议 {scheme!r}: {server!r}")
    if not parts.hostname:
        raise ConfigurationError(f"服务器地址缺少主机名: {server!r}")

    return NodeAddress(
        scheme=scheme,
        host=parts.hostname,
        port=port if port is not None else default_port,
    )


def _parse_servers(servers: list[str], default_port: int) -> list[NodeAddress]:
    if not servers:
        raise ConfigurationError("servers 不能为空，无法创建没有节点地址的客户端")
    return [parse_server(server, default_port) for server in servers]


def transport_addresses(servers: list[str]) -> list[NodeAddress]:
    """解析直连模式的节点地址，缺省端口 9300."""
    return _parse_servers(servers, DEFAULT_TRANSPORT_PORT)


def http_hosts(servers: list[str]) -> list[NodeAddress]:
    """解析 HTTP 模式的节点地址，缺省端口 9200."""
    return _parse_servers(servers, DEFAULT_HTTP_PORT)
