import argparse
import asyncio
import logging
import os

from teenpatti.models import TableConfig
from .server import GameServer


def main() -> None:
    parser = argparse.ArgumentParser(description="Teen Patti room server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 3001)))
    parser.add_argument(
        "--reset-delay",
        type=float,
        default=10.0,
        help="Seconds a finished hand stays on screen before the room returns to the lobby",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    config = TableConfig(reset_delay_s=args.reset_delay)
    server = GameServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
