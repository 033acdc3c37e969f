"""
nginx 反向代理配置生成
"""

import logging
from pathlib import Path
from typing import Union

from jinja2 import Environment, StrictUndefined

from local_proxy.fileio import atomic_write_text
from local_proxy.models import Allocation, GeneratedConfigs

HTTP_CONFIG_NAME = "http_proxies.conf"
TCP_CONFIG_NAME = "tcp_proxies.conf"

NOT_FOUND_BODY = '{"status": 404, "message": "No cluster found for subdomain provided"}'
PROXY_NAME = "host-wide-local-proxy"

HTTP_TEMPLATE = """\
# Generated by docker-local-proxy. Changes are overwritten on every run.
{% for port in http_ports %}

# Catch-all for unknown subdomains on port {{ port }}
server {
    listen {{ port }};
    server_name _;

    location / {
        default_type application/json;
        return 404 '{{ not_found_body }}';
    }
}
{% endfor %}
{% for binding in http_bindings %}

server {
    listen {{ binding.port }};
    server_name {{ binding.container.hostname }};

    error_page 502 503 504 @custom_error;
    proxy_intercept_errors on;

    set $original_uri $request_uri;

    location @custom_error {
        internal;
        default_type application/json;
        return 200 '{"status": "$status", "message": "Error occurred", "inbound_url": "$original_uri", "attempted_url": "$attempted_url", "proxy": "{{ proxy_name }}"}';
    }

    location / {
        set $attempted_url {{ binding.upstream }};
        proxy_pass $attempted_url;
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-Host $host;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
    }
}
{% endfor %}
"""

TCP_TEMPLATE = """\
# Generated by docker-local-proxy. Changes are overwritten on every run.
{% for binding in tcp_bindings %}

server {
    listen {{ binding.listen_port }};
    proxy_pass {{ binding.upstream }};
}
{% endfor %}
"""

_environment = Environment(
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)
_http_template = _environment.from_string(HTTP_TEMPLATE)
_tcp_template = _environment.from_string(TCP_TEMPLATE)


def render_http_config(allocation: Allocation) -> str:
    """渲染 HTTP 虚拟主机配置：每个端口一个兜底 server，每个绑定一个按主机名匹配的 server"""
    return _http_template.render(
        http_ports=allocation.http_ports,
        http_bindings=allocation.http_bindings,
        not_found_body=NOT_FOUND_BODY,
        proxy_name=PROXY_NAME,
    )


def render_tcp_config(allocation: Allocation) -> str:
    """渲染 stream 块中的 TCP 转发配置"""
    return _tcp_template.render(tcp_bindings=allocation.tcp_bindings)


def render_configs(allocation: Allocation) -> GeneratedConfigs:
    """
    生成两份 nginx 配置

    纯文本替换，不校验生成的语法，也不转义主机名。
    """
    return GeneratedConfigs(
        http_config=render_http_config(allocation),
        tcp_config=render_tcp_config(allocation),
    )


def write_configs(
    configs: GeneratedConfigs,
    generated_dir: Union[str, Path],
    logger: logging.Logger,
) -> None:
    """
    将配置完整覆盖写入 generated 目录

    参数:
        configs: 渲染后的配置
        generated_dir: 输出目录，必须已存在
        logger: 日志记录器实例
    """
    generated_dir = Path(generated_dir)
    for name, content in (
        (HTTP_CONFIG_NAME, configs.http_config),
        (TCP_CONFIG_NAME, configs.tcp_config),
    ):
        path = generated_dir / name
        atomic_write_text(path, content)
        logger.info(f"已写入 {path}")
