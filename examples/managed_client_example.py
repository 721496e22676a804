"""托管客户端使用示例.

本文件展示了如何根据配置构建托管客户端、注册健康检查，并在服务停止时释放资源。
"""

import logging

from elasticmanaged import (
    ClusterConfig,
    ClusterHealthCheck,
    ManagedElasticsearch,
    ResourceReleaseError,
)

logging.basicConfig(level=logging.INFO)


# ==================== 示例1：HTTP 客户端 + 节点嗅探 ====================
def example_http_client():
    """HTTP 模式，启用周期嗅探和失败嗅探."""
    config = ClusterConfig.from_dict(
        {
            "servers": ["http://localhost:9200"],
            "clusterName": "elasticsearch",
            "headers": {"X-Opaque-Id": "managed-example"},
            "settings": {"request_timeout": "10"},
            "discovery": {
                "enabled": True,
                "refreshIntervalMs": 60000,
                "refreshOnFailure": True,
                "failureRefreshDelayMs": 5000,
            },
        }
    )

    managed = ManagedElasticsearch.from_config(config)
    managed.start()

    check = ClusterHealthCheck(managed, fail_on_yellow=False)
    result = check.execute()
    print(f"  {check.name}: healthy={result.healthy}, {result.message}")

    try:
        managed.stop()
    except ResourceReleaseError as e:
        print(f"  部分资源释放失败: {e.failures}")


# ==================== 示例2：直连客户端 ====================
def example_transport_client():
    """直连模式，未指定端口时使用 9300."""
    config = ClusterConfig(servers=["localhost"], mode="transport")

    with ManagedElasticsearch.from_config(config) as managed:
        print(f"  transport_client={managed.transport_client}")
        print(f"  http_client={managed.http_client}")
        result = ClusterHealthCheck(managed, fail_on_yellow=True).execute()
        print(f"  healthy={result.healthy}, {result.message}")


# ==================== 主函数 ====================
def main():
    """运行所有示例."""
    print("=" * 50)
    print("托管客户端示例")
    print("=" * 50)

    print("\n1. HTTP 客户端示例")
    print("-" * 50)
    example_http_client()

    print("\n2. 直连客户端示例")
    print("-" * 50)
    # 需要一个在 9300 端口提供服务的节点，取消注释以运行
    # example_transport_client()

    print("\n" + "=" * 50)
    print("所有示例运行完成！")
    print("=" * 50)


if __name__ == "__main__":
    main()
