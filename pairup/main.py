import argparse
import asyncio
import logging

from pairup.ui.cli import PairupCLI
from pairup.utils.config import ClientConfig

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Chat with a random stranger through a pairup relay.")
    parser.add_argument("--server", help="relay URI, overrides PAIRUP_SERVER_URI (default ws://localhost:8765)")
    parser.add_argument("--debug", action="store_true", help="log protocol details to stderr")
    return parser.parse_args(argv)

def build_config(args) -> ClientConfig:
    config = ClientConfig.from_env()
    if args.server:
        config = ClientConfig(server_uri=args.server)
    return config

def main(argv=None):
    args = parse_args(argv)
    # Keep library chatter out of the chat window unless asked for
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING, format='%(asctime)s - %(message)s')

    cli = PairupCLI(build_config(args))
    try:
        asyncio.run(cli.run())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"Fatal Error: {e}")

if __name__ == "__main__":
    main()
