"""节点嗅探模块 - 周期性刷新 HTTP 客户端的节点池.

主要组件:
    - Sniffer: 后台嗅探器，支持失败后提前嗅探
    - NodesSniffer: 基于 _nodes/http 接口的节点发现
"""

from .exceptions import SnifferError
from .tool import NodesSniffer, Sniffer, parse_publish_address

__all__ = [
    "Sniffer",
    "NodesSniffer",
    "parse_publish_address",
    "SnifferError",
]
