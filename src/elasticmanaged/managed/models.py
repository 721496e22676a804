"""托管客户端数据模型定义模块.

ClientHandle 是两种客户端句柄的联合类型，一个句柄只会持有一种客户端：
- TransportClientHandle: 直连模式客户端
- HttpClientHandle: HTTP 模式客户端，以及可选的节点嗅探器
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from elasticsearch import Elasticsearch

from ..connection.models import ClientMode
from ..sniffer.tool import Sniffer


class LifecycleState(Enum):
    """托管客户端生命周期状态.

    Attributes:
        CREATED: 客户端已构建，尚未 start
        RUNNING: 已 start
        STOPPED: 已 stop，资源已释放
    """

    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TransportClientHandle:
    """直连模式客户端句柄.

    Attributes:
        client: Elasticsearch 客户端
        settings: 合并后的客户端设置
    """

    client: Elasticsearch
    settings: dict[str, str] = field(default_factory=dict)

    @property
    def mode(self) -> ClientMode:
        return ClientMode.TRANSPORT


@dataclass(frozen=True)
class HttpClientHandle:
    """HTTP 模式客户端句柄.

    Attributes:
        client: Elasticsearch 客户端
        settings: 合并后的客户端设置
        sniffer: 节点嗅探器，未启用嗅探时为 None
    """

    client: Elasticsearch
    settings: dict[str, str] = field(default_factory=dict)
    sniffer: Sniffer | None = None

    @property
    def mode(self) -> ClientMode:
        return ClientMode.HTTP


ClientHandle = Union[TransportClientHandle, HttpClientHandle]
