import functools
import json
from functools import lru_cache

from pydantic import ValidationError

from buffstream.bootstrap.config.settings import BuffStreamConfig
from buffstream.bootstrap.dispatcher import CommandDispatcher
from buffstream.bootstrap.handlers.echo import echo
from buffstream.core.models.config import ServerConfig
from buffstream.core.ports.render import Renderer
from buffstream.core.transport.server import MessageServer
from buffstream.infra.format_renderer import JsonRenderer, YamlRenderer
from buffstream.infra.io_stream import open_channel
from buffstream.infra.msgpack_serializer import MsgPackSerializer


@lru_cache
def get_dispatcher() -> CommandDispatcher:
    return CommandDispatcher()


@lru_cache
def get_serializer() -> MsgPackSerializer:
    return MsgPackSerializer()


def get_renderer(output: str = "yaml", decode_msgpack: bool = False) -> Renderer:
    serializer = get_serializer() if decode_msgpack else None
    if output == "json":
        return JsonRenderer(serializer)
    return YamlRenderer(serializer)


def get_echo_server(config: BuffStreamConfig) -> MessageServer:
    server_config = ServerConfig(
        app=echo,
        host=config.server.host,
        port=config.server.port,
        backlog=config.server.backlog,
        stream=config.stream.to_stream_config(),
        timeout_graceful_shutdown=config.server.timeout_graceful_shutdown,
    )
    channel_factory = functools.partial(
        open_channel,
        serializer=get_serializer(),
        config=server_config.stream,
    )
    return MessageServer(server_config, channel_factory)


@lru_cache
def get_config() -> BuffStreamConfig:
    try:
        return BuffStreamConfig()
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
