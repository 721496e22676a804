"""elasticmanaged 异常定义模块."""


class ElasticManagedError(Exception):
    """elasticmanaged 基础异常类."""

    pass


class LifecycleError(ElasticManagedError):
    """生命周期状态异常.

    例如在 stop() 之后再次调用 start()。
    """

    pass


class ResourceReleaseError(ElasticManagedError):
    """资源释放异常.

    stop() 期间关闭嗅探器或客户端失败时抛出。所有资源都会尝试关闭，
    失败项汇总在 failures 中，属于非致命错误。

    Attributes:
        failures: (资源名称, 异常) 元组列表
    """

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(f"关闭资源失败: {names}")
