"""Delve CLI entry point.

Provides subcommands for running the web API server and for generating a
single area to the terminal. Accepts configuration via flags and environment
variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import random
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

__version__ = "0.1.0"


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Delve world server

    Run the Flask world API or generate a single area and print it as ASCII.
    Configuration can be provided via CLI flags or environment variables. If
    both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST               Bind address for the web server (default: 0.0.0.0)
          PORT               Port for the web server (default: 5000)
          DATABASE_URL       SQLAlchemy database URI (default: sqlite:///instance/delve.db)
          DELVE_LOG_LEVEL    debug|info|warn|error for structured logs
          DELVE_<FIELD>      Any WorldConfig field, e.g. DELVE_MIN_AREA_SIZE=50

        Examples:
          # Run the server on a custom port
          python run.py server --port 8080

          # Print a seeded 40x40 mine
          python run.py generate --biome mine --width 40 --height 40 --seed 7
        """
    )

    parser = argparse.ArgumentParser(
        prog="delve",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--env-file", dest="env_file", help="Path to a .env file to load before processing flags")
    parser.add_argument("--version", action="version", version=f"Delve {__version__}")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser("server", help="Run the world API web server")
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--db", dest="db_uri", default=None, help="Database URI (default: env DATABASE_URL)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser("generate", help="Generate one area and print it")
    gen_parser.add_argument("--biome", default="mine", help="Biome name (default: mine)")
    gen_parser.add_argument("--width", type=int, default=40)
    gen_parser.add_argument("--height", type=int, default=40)
    gen_parser.add_argument("--difficulty", type=int, default=1)
    gen_parser.add_argument("--seed", type=int, default=None)
    gen_parser.add_argument("--level", type=int, default=1, help="Player level for chest rarity")
    gen_parser.add_argument("--json", action="store_true", help="Print the serialized area instead of ASCII")
    gen_parser.set_defaults(command="generate")

    if len(argv) == 0:
        argv = ["server"]
    return parser.parse_args(argv)


def _generate(args, color: bool) -> int:
    from delve.world.config import WorldConfig
    from delve.world.pipeline import generate_area

    if args.width < 5 or args.height < 5:
        print("width and height must be at least 5", file=sys.stderr)
        return 2
    seed = args.seed if args.seed is not None else random.randint(1, 1_000_000)
    config = WorldConfig.from_env(seed=seed)
    area = generate_area(args.width, args.height, args.biome, args.difficulty, random.Random(seed), config, args.level)
    if args.json:
        print(json.dumps(area.to_dict()))
        return 0
    header = f"{area.name} [{area.biome}] {area.width}x{area.height} difficulty={area.difficulty} seed={seed}"
    print(f"{Fore.CYAN}{Style.BRIGHT}{header}{Style.RESET_ALL}" if color else header)
    for row in area.to_ascii():
        print(row)
    m = area.metrics
    print(
        f"rooms={len(area.rooms)} exits={len(area.exits)} enemies={len(area.enemies)} "
        f"merchants={len(area.merchants)} chests={len(area.chests)} runtime_ms={m.get('runtime_ms')}"
    )
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()
    color = not args.no_color and sys.stdout.isatty()
    if color:
        _color_init()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return _generate(args, color)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    if getattr(args, "db_uri", None):
        # Must be set before the app module is imported
        os.environ["DATABASE_URL"] = args.db_uri

    from delve.logging_utils import get_logger
    from delve.server import start_server

    get_logger("delve.cli").info(event="server_start", host=host, port=port)
    start_server(host=host, port=port, debug=getattr(args, "debug", False))
    return 0


def main_entry():  # pragma: no cover
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover
    main_entry()
