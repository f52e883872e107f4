import io
import os
from pathlib import Path

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, YamlConfigSettingsSource

from buffstream.bootstrap.config.settings import BuffStreamConfig
from buffstream.core.stream.writer import Writer


class FakeBuffStreamConfig(BuffStreamConfig):
    # single base: model_config (env prefix, nested delimiter) stays BuffStreamConfig's
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=Path(os.environ["TEST_BUFFSTREAMCONFIG"])),
        )


def frames(*messages: tuple[int, bytes]) -> bytes:
    """Encode (type, payload) pairs with a real Writer."""
    out = io.BytesIO()
    writer = Writer(out)
    for msg_type, payload in messages:
        writer.write(msg_type, payload)
    return out.getvalue()
