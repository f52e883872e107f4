import argparse
import functools
from typing import Protocol

from buffstream.bootstrap.config.settings import BuffStreamConfig


class CommandHandler(Protocol):
    def __call__(
        self,
        namespace: argparse.Namespace,
        config: BuffStreamConfig,
    ) -> int:
        ...


class CommandDispatcher:
    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)

    def dispatch(
        self,
        name: str,
        namespace: argparse.Namespace,
        config: BuffStreamConfig,
    ) -> int:
        command = self._commands.get(name)
        if command is None:
            raise RuntimeError(f"Unknown '{name}' Command")
        return command(namespace, config)

    def command(self, name: str):
        def decorator(func: CommandHandler):

            @functools.wraps(func)
            def wrapper(
                namespace: argparse.Namespace,
                config: BuffStreamConfig,
            ) -> int:
                return func(namespace, config)

            self._commands[name] = wrapper

            return wrapper

        return decorator
