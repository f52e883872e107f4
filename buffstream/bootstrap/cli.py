import sys

from buffstream.bootstrap.config.loader import get_cli_args
from buffstream.bootstrap.deps import get_config, get_dispatcher
from buffstream.core.errors import BuffStreamError
from buffstream.core.helpers.utils import setup_logging, scan


@scan("buffstream.bootstrap.commands")
def main() -> int:
    args = get_cli_args()
    setup_logging(args.log_level)
    config = get_config()

    try:
        return get_dispatcher().dispatch(args.command, args, config)
    except (BuffStreamError, OSError, ValueError) as ex:
        print(f"buffstream: {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
