import argparse
import logging

from qrwatermark import config
from qrwatermark.app import app

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve QR codes with optional watermarks over HTTP."
    )
    parser.add_argument(
        "--addr",
        default=config.ADDR,
        help="HTTP network address (default: %(default)s).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host, port = config.parse_addr(args.addr)

    logger.info("Starting server on %s", args.addr)
    app.run(host=host, port=port)


if __name__ == "__main__":
    main()
