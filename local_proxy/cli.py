"""
docker-local-proxy 命令行接口
"""

import sys

import click
from docker.errors import DockerException

from local_proxy.app import DockerLocalProxy
from local_proxy.config import Config, parse_port_list
from local_proxy.errors import LocalProxyError


def _port_list(ctx, param, value):
    ports = parse_port_list(value)
    if not ports:
        raise click.BadParameter("至少需要一个有效端口")
    for port in ports:
        if not 1 <= port <= 65535:
            raise click.BadParameter(f"端口 {port} 必须在 1-65535 之间")
    return ports


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option('--httpPort', '-p', 'http_ports', default="80", callback=_port_list,
              help='The HTTP ports to use in Nginx configurations, comma-separated')
@click.option('--tcpPort', '-q', 'tcp_ports', default="5432", callback=_port_list,
              help='The TCP ports to use in Nginx configurations, comma-separated')
@click.option('--filterName', '-f', 'filter_name', default='internal-proxy',
              help='Container name filter to apply')
@click.option('--networkOnly', '-n', 'network_only', is_flag=True,
              help='Only create the Docker network')
@click.option('--hostsOnly', '-o', 'hosts_only', is_flag=True,
              help='Only update the hosts file')
@click.option('--cleanHosts', '-c', 'clean_hosts', is_flag=True,
              help='Remove the generated region from the hosts file')
@click.option('--logLevel', 'log_level', default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
              help='Log level (default: LOG_LEVEL or INFO)')
def cli(http_ports, tcp_ports, filter_name, network_only, hosts_only, clean_hosts, log_level):
    """
    Route running containers through a local nginx proxy.

    Generates nginx HTTP/TCP proxy configs, updates /etc/hosts and the
    nginx-proxy ports in docker-compose.yml, then runs docker compose up.
    """
    config = Config.from_env().with_options(
        http_ports=http_ports,
        tcp_ports=tcp_ports,
        filter_name=filter_name,
        network_only=network_only,
        hosts_only=hosts_only,
        clean_hosts=clean_hosts,
        log_level=log_level,
    )

    try:
        proxy = DockerLocalProxy(config)
    except (LocalProxyError, DockerException) as e:
        click.echo(f"初始化 docker-local-proxy 失败: {e}", err=True)
        sys.exit(1)

    try:
        proxy.run()
    except (LocalProxyError, DockerException) as e:
        proxy.logger.error(f"致命错误: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        proxy.logger.info("被用户中断")
        sys.exit(130)
    except Exception as e:
        proxy.logger.error(f"致命错误: {e}", exc_info=True)
        sys.exit(1)
    finally:
        proxy.cleanup()


def main() -> None:
    """主入口点"""
    cli()
