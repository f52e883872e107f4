from pydantic import BaseModel, Field
from typing import Annotated
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from buffstream.bootstrap.config.loader import get_configfile
from buffstream.core.models.config import StreamConfig


class StreamSettings(BaseModel):
    read_buffer_size: Annotated[
        int,
        Field(
            description=(
                "Initial size, in bytes, of the buffer each Reader uses to receive\n"
                "messages. It grows on demand up to max_message_size."
            ),
            default=4096,
            gt=0
        )
    ]

    max_message_size: Annotated[
        int,
        Field(
            description=(
                "Largest payload, in bytes, accepted from a peer.\n"
                "Bigger messages are rejected before any payload byte is read."
            ),
            default=16 * 1024 * 1024,
            gt=0
        )
    ]

    def to_stream_config(self) -> StreamConfig:
        return StreamConfig(
            read_buffer_size=self.read_buffer_size,
            max_message_size=self.max_message_size,
        )


class ServerSettings(BaseModel):
    host: Annotated[
        str,
        Field(
            description="Bind address of the echo server.",
            default="127.0.0.1"
        )
    ]

    port: Annotated[
        int,
        Field(
            description="TCP port of the echo server. 0 lets the OS choose.",
            default=7400,
            ge=0,
            le=65535
        )
    ]

    backlog: Annotated[
        int,
        Field(
            description="Maximum number of pending TCP connections.",
            default=128,
            gt=0
        )
    ]

    timeout_graceful_shutdown: Annotated[
        float,
        Field(
            description="Maximum time allowed for graceful shutdown.",
            default=5.0,
            ge=0
        )
    ]


class BuffStreamConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BUFFSTREAM_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    stream: Annotated[
        StreamSettings,
        Field(
            description=(
                "Framing limits.\n"
                "Controls how much memory a Reader may allocate for one message."
            ),
            default_factory=StreamSettings
        )
    ]

    server: Annotated[
        ServerSettings,
        Field(
            description=(
                "Echo server configuration.\n"
                "Controls where `buffstream serve` listens and how long it waits\n"
                "for connections to finish on shutdown."
            ),
            default_factory=ServerSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]

        file = get_configfile()
        if file is not None:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=file))

        return tuple(sources)
