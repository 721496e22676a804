"""客户端构建异常定义模块."""

from ..exceptions import ElasticManagedError


class ConfigurationError(ElasticManagedError):
    """配置异常.

    当配置不合法时抛出，例如 servers 为空、服务器地址无法解析、
    设置文件不存在或无法解析。服务不应在此异常下启动。
    """

    pass


class UnsupportedModeError(ConfigurationError):
    """不支持的客户端模式异常.

    当请求已废弃的模式（如内嵌节点模式）时抛出，不会静默降级。
    """

    pass
