"""节点嗅探工具模块.

提供周期性刷新 HTTP 客户端节点池的后台嗅探器：
    - NodesSniffer: 调用 _nodes/http 接口获取集群中可用的 HTTP 节点
    - Sniffer: 后台线程，按间隔执行嗅探并用结果更新客户端的节点池

使用示例:
    from elasticmanaged.sniffer import NodesSniffer, Sniffer

    sniffer = Sniffer(client, NodesSniffer(client), sniff_interval=300)
    sniffer.start()
    ...
    sniffer.close()
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time

from elastic_transport import NodeConfig, TransportError
from elasticsearch import ApiError, Elasticsearch

from ..connection.addresses import NodeAddress
from .exceptions import SnifferError

logger = logging.getLogger(__name__)

DEFAULT_SNIFF_REQUEST_TIMEOUT = 1.0


def parse_publish_address(address: str, scheme: str) -> NodeAddress:
    """解析节点信息中的 http.publish_address.

    支持 "ip:port"、"hostname/ip:port" 和 "[::1]:port" 三种形式，
    存在主机名时优先使用主机名。

    Args:
        address: publish_address 字符串
        scheme: 节点使用的协议

    Returns:
        NodeAddress 实例

    Raises:
        SnifferError: 当地址格式无法识别时抛出
    """
    hostname = ""
    if "/" in address:
        hostname, address = address.split("/", 1)
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise SnifferError(f"无法解析节点地址: {address!r}")
    return NodeAddress(
        scheme=scheme, host=hostname or host.strip("[]"), port=int(port)
    )


class NodesSniffer:
    """通过 _nodes/http 接口发现集群中的 HTTP 节点.

    Args:
        client: Elasticsearch 客户端
        scheme: 发现的节点使用的协议，默认 http
        timeout: 单次嗅探请求的超时时间（秒），默认 1.0
    """

    def __init__(
        self,
        client: Elasticsearch,
        scheme: str = "http",
        timeout: float = DEFAULT_SNIFF_REQUEST_TIMEOUT,
    ) -> None:
        self._client = client
        self.scheme = scheme
        self.timeout = timeout

    def sniff(self) -> list[NodeAddress]:
        """获取当前集群中所有暴露 HTTP 的节点地址.

        Returns:
            NodeAddress 列表，未开启 HTTP 的节点会被跳过

        Raises:
            SnifferError: 当响应格式不正确时抛出
        """
        response = self._client.options(request_timeout=self.timeout).nodes.info(
            node_id="_all", metric="http"
        )
        body = response.body if hasattr(response, "body") else response

        nodes = body.get("nodes")
        if not isinstance(nodes, dict):
            raise SnifferError(f"节点信息响应中缺少 nodes: {body!r}")

        addresses: list[NodeAddress] = []
        for node_id, info in nodes.items():
            publish_address = (info.get("http") or {}).get("publish_address")
            if not publish_address:
                logger.debug(f"节点 {node_id} 未开启 HTTP，跳过")
                continue
            addresses.append(parse_publish_address(publish_address, self.scheme))
        return addresses


class Sniffer:
    """后台节点嗅探器.

    启动后在后台线程中立即执行一次嗅探，之后每隔 sniff_interval 秒执行一次；
    开启 sniff_on_failure 时，调用 on_failure() 会尽快触发一次嗅探，
    但两次嗅探之间至少间隔 sniff_after_failure_delay 秒。
    每轮嗅探的结果会替换客户端节点池中的节点。
    嗅探失败只记录日志，不会终止后台线程。

    嗅探器依赖客户端的节点池，必须在关闭客户端之前关闭。

    Args:
        client: 需要维护节点池的 Elasticsearch 客户端
        nodes_sniffer: 节点发现实现
        sniff_interval: 周期嗅探间隔（秒），默认 600
        sniff_after_failure_delay: 失败后提前嗅探的延迟（秒），默认 30
        sniff_on_failure: 是否响应 on_failure() 提前嗅探，默认 False
    """

    def __init__(
        self,
        client: Elasticsearch,
        nodes_sniffer: NodesSniffer,
        sniff_interval: float = 600.0,
        sniff_after_failure_delay: float = 30.0,
        sniff_on_failure: bool = False,
    ) -> None:
        self._client = client
        self._nodes_sniffer = nodes_sniffer
        self.sniff_interval = sniff_interval
        self.sniff_after_failure_delay = sniff_after_failure_delay
        self.sniff_on_failure = sniff_on_failure
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._wakeup = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def closed(self) -> bool:
        """嗅探器是否已关闭."""
        return self._closed.is_set()

    @property
    def running(self) -> bool:
        """后台线程是否在运行."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> Sniffer:
        """启动后台嗅探线程，重复调用无副作用.

        Returns:
            嗅探器自身（支持链式调用）
        """
        with self._lock:
            if self._closed.is_set() or self._thread is not None:
                return self
            self._thread = threading.Thread(
                target=self._run, name="elasticsearch-sniffer", daemon=True
            )
            self._thread.start()
        logger.info(
            f"启动节点嗅探器: sniff_interval={self.sniff_interval}, "
            f"sniff_after_failure_delay={self.sniff_after_failure_delay}"
        )
        return self

    def _run(self) -> None:
        # 首轮立即执行；失败唤醒只会把截止时间提前，不会推后
        last_sniff = float("-inf")
        deadline = time.monotonic()
        while True:
            woken = self._wakeup.wait(max(0.0, deadline - time.monotonic()))
            if self._closed.is_set():
                return
            if woken:
                self._wakeup.clear()
                deadline = min(deadline, last_sniff + self.sniff_after_failure_delay)
            if time.monotonic() < deadline:
                continue
            self.sniff()
            last_sniff = time.monotonic()
            deadline = last_sniff + self.sniff_interval

    def sniff(self) -> list[NodeAddress]:
        """立即执行一轮嗅探，用发现的节点替换客户端节点池.

        新节点加入节点池，不在本轮结果中的节点从节点池移除；
        本轮没有发现任何节点时保持节点池不变。

        Returns:
            新加入节点池的节点地址列表
        """
        try:
            addresses = self._nodes_sniffer.sniff()
        except (ApiError, TransportError, SnifferError) as e:
            logger.warning(f"节点嗅探失败: {e}")
            return []

        if not addresses:
            logger.warning("节点嗅探未发现任何节点，保留现有节点池")
            return []

        added, removed = self._update_nodes(addresses)
        logger.info(
            f"节点嗅探完成: 发现 {len(addresses)} 个节点, "
            f"新增 {len(added)} 个, 移除 {removed} 个"
        )
        return added

    def _update_nodes(
        self, addresses: list[NodeAddress]
    ) -> tuple[list[NodeAddress], int]:
        node_pool = self._client.transport.node_pool
        current = [node.config for node in node_pool.all()]
        # 新节点沿用已有节点的连接参数（超时、证书等）
        seed = current[0] if current else None

        sniffed: list[NodeConfig] = []
        added: list[NodeAddress] = []
        for address in addresses:
            if seed is not None:
                node_config = dataclasses.replace(
                    seed, scheme=address.scheme, host=address.host, port=address.port
                )
            else:
                node_config = NodeConfig(address.scheme, address.host, address.port)
            sniffed.append(node_config)

            if node_config in node_pool:
                continue
            try:
                node_pool.add(node_config)
            except ValueError as e:
                logger.warning(f"节点 {address} 加入节点池失败: {e}")
                continue
            added.append(address)

        removed = 0
        for node_config in current:
            if node_config in sniffed:
                continue
            node_pool.remove(node_config)
            logger.info(
                f"节点 {node_config.host}:{node_config.port} 不在嗅探结果中，移出节点池"
            )
            removed += 1
        return added, removed

    def on_failure(self) -> None:
        """节点失败后调用，尽快触发一次嗅探.

        距上一次嗅探不足 sniff_after_failure_delay 秒时，推迟到满足该间隔后执行；
        连续调用不会推后已经确定的嗅探时间。
        未开启 sniff_on_failure 或已关闭时不做任何事。
        """
        if self.sniff_on_failure and not self._closed.is_set():
            self._wakeup.set()

    def close(self, timeout: float | None = 5.0) -> None:
        """停止后台线程，重复调用无副作用.

        Args:
            timeout: 等待后台线程退出的最长时间（秒）
        """
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()
            self._wakeup.set()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("节点嗅探器已关闭")

    def __enter__(self) -> Sniffer:
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
