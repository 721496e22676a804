"""节点嗅探异常定义模块."""

from ..exceptions import ElasticManagedError


class SnifferError(ElasticManagedError):
    """节点嗅探异常.

    当节点信息响应无法解析时抛出。周期性嗅探中的该异常只会被记录，
    不会中断后台线程。
    """

    pass
