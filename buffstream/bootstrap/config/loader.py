import argparse
import os
from functools import lru_cache
from pathlib import Path

DEFAULT_CONFIGFILE = "buffstream.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buffstream",
        description=(
            "Read and write typed, length-prefixed messages.\n\n"
            "Every frame is [length: varint][type: varint][payload], so a plain\n"
            "byte stream (file, pipe, TCP connection) can carry discrete messages."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a buffstream configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n\n"
            "DEBUG    → connection and partial-write tracing.\n"
            "INFO     → server lifecycle.\n"
            "WARNING  → only warnings and errors (default).\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True)

    dump = sub.add_parser("dump", help="Print every message of a framed stream")
    dump.add_argument("file", nargs="?", default="-", help="Input file, '-' for stdin")
    dump.add_argument("--msgpack", action="store_true", help="Decode payloads as msgpack")
    dump.add_argument("--output", choices=["yaml", "json"], default="yaml")

    write = sub.add_parser("write", help="Write one message to a framed stream")
    write.add_argument("-f", "--file", default="-", help="Output file, '-' for stdout (default)")
    write.add_argument("-t", "--type", type=int, required=True, dest="msg_type")
    write.add_argument("--msgpack", action="store_true", help="Parse payload as YAML and msgpack-encode it")
    write.add_argument("--append", action="store_true", help="Append instead of truncating the file")
    write.add_argument("payload", help="Payload text (UTF-8)")

    sub.add_parser("serve", help="Run an echo server")

    send = sub.add_parser("send", help="Send one message to a server and print the reply")
    send.add_argument("address", help="host:port")
    send.add_argument("-t", "--type", type=int, required=True, dest="msg_type")
    send.add_argument("--msgpack", action="store_true", help="Parse payload as YAML and msgpack-encode it")
    send.add_argument("--timeout", type=float, default=10.0, help="Socket timeout in seconds")
    send.add_argument("payload", help="Payload text (UTF-8)")

    return parser


@lru_cache
def get_cli_args() -> argparse.Namespace:
    return build_parser().parse_args()


def resolve_configfile(cli_path: str | None) -> Path | None:
    # Priority: CLI > ENV > default file in current working directory
    raw = cli_path or os.getenv("BUFFSTREAM_CONFIG")

    if raw is None:
        file = Path.cwd() / DEFAULT_CONFIGFILE
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the BUFFSTREAM_CONFIG environment variable\n"
            f"  - Or place a '{DEFAULT_CONFIGFILE}' file in the current working directory."
        )

    return file


@lru_cache
def get_configfile() -> Path | None:
    return resolve_configfile(get_cli_args().config)
