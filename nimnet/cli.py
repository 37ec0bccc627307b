"""
Nimnet CLI - Command-line interface.

Usage:
    nimnet server [[host] port]    Run the datagram game server
    nimnet client <seed>           Play one game against a server
    nimnet board <seed>            Show the board a seed generates
"""

import argparse
import logging
import sys

from .errors import ConfigError, ServerUnreachableError

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Nimnet - Nim over UDP",
        prog="nimnet",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Server command
    server_parser = subparsers.add_parser("server", help="Run the game server")
    server_parser.add_argument(
        "address", nargs="*", metavar="[host] port",
        help="Listen on 0.0.0.0:port, or host:port",
    )
    server_parser.add_argument("--config", "-c", help="Path to server config JSON")
    server_parser.add_argument("--api", dest="api_address", help="host:port for the HTTP inspection API")
    server_parser.add_argument("--loss-rate", type=float, help="Drop this fraction of replies")
    server_parser.add_argument("--duplicate-rate", type=float, help="Duplicate this fraction of replies")
    server_parser.add_argument("--delay", type=float, help="Delay every reply by this many seconds")

    # Client command
    client_parser = subparsers.add_parser("client", help="Play one game")
    client_parser.add_argument("seed", type=int, help="Game seed (-128..127)")
    client_parser.add_argument("--config", "-c", help="Path to client config JSON")
    client_parser.add_argument("--server", dest="nim_server_address", help="Server host:port")
    client_parser.add_argument("--strategy", choices=["optimal", "naive"], help="Client move strategy")
    client_parser.add_argument("--timeout", type=float, help="Seconds to wait for each reply")
    client_parser.add_argument("--max-attempts", type=int, help="Give up after this many unanswered sends")

    # Board command
    board_parser = subparsers.add_parser("board", help="Show the board for a seed")
    board_parser.add_argument("seed", type=int, help="Game seed")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    if args.command == "server":
        cmd_server(args)
    elif args.command == "client":
        cmd_client(args)
    elif args.command == "board":
        cmd_board(args)
    else:
        parser.print_help()
        sys.exit(1)


def _listen_address(parts):
    if not parts:
        return None
    if len(parts) == 1:
        return f"0.0.0.0:{parts[0]}"
    if len(parts) == 2:
        return f"{parts[0]}:{parts[1]}"
    raise ConfigError("expected at most host and port")


def cmd_server(args):
    """Run the datagram server until interrupted."""
    from .config import ServerConfig
    from .protocol.tracing import LoggingTracer
    from .session import RequestHandler, SessionStore
    from .transport import NetworkConditions, UDPServer

    try:
        config = ServerConfig.load(args.config, overrides={
            "nim_server_address": _listen_address(args.address),
            "api_address": args.api_address,
            "loss_rate": args.loss_rate,
            "duplicate_rate": args.duplicate_rate,
            "delay": args.delay,
        })
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    store = SessionStore(session_ttl=config.session_ttl, finished_ttl=config.finished_ttl)
    handler = RequestHandler(
        store=store,
        tracer=LoggingTracer(config.tracing_identity),
        sweep_interval=config.sweep_interval,
    )
    conditions = NetworkConditions(
        loss_rate=config.loss_rate,
        duplicate_rate=config.duplicate_rate,
        delay=config.delay,
    )
    server = UDPServer(
        config.server_address,
        handler,
        buffer_size=config.buffer_size,
        conditions=conditions if conditions.enabled else None,
    )

    try:
        server.bind()
    except OSError as e:
        print(f"Error: cannot listen on {config.nim_server_address}: {e}", file=sys.stderr)
        sys.exit(1)

    if config.api_address:
        from .api import serve_in_thread
        serve_in_thread(handler, config.api_address)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        server.close()


def cmd_client(args):
    """Play one game and report the winner."""
    from .bots import POLICIES
    from .config import ClientConfig
    from .protocol.tracing import LoggingTracer
    from .session import ClientGame
    from .transport import UDPClientTransport

    try:
        config = ClientConfig.load(args.config, overrides={
            "nim_server_address": args.nim_server_address,
            "strategy": args.strategy,
            "timeout": args.timeout,
            "max_attempts": args.max_attempts,
        })
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        transport = UDPClientTransport(
            config.server_address,
            local_address=config.local_address,
            buffer_size=config.buffer_size,
        )
    except OSError as e:
        print(f"Error: cannot open socket to {config.nim_server_address}: {e}", file=sys.stderr)
        sys.exit(1)

    tracer = LoggingTracer(config.tracing_identity)
    try:
        with transport:
            game = ClientGame(
                transport,
                seed=args.seed,
                policy=POLICIES[config.strategy](),
                tracer=tracer,
                timeout=config.timeout,
                max_attempts=config.max_attempts,
            )
            result = game.run()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ServerUnreachableError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    finally:
        tracer.close()

    print(f"Winner: {result.winner.value}")
    print(f"Moves sent: {result.moves_sent} (retries: {result.retries})")


def cmd_board(args):
    """Print the starting board for a seed."""
    from .bots import Difficulty
    from .engine_core import generate_board, nim_sum

    board = generate_board(args.seed)
    print(f"Seed:       {args.seed}")
    print(f"Board:      {list(board)}")
    print(f"Nim-sum:    {nim_sum(board)}")
    print(f"Difficulty: {Difficulty.from_seed(args.seed).name.lower()}")


if __name__ == "__main__":
    main()
