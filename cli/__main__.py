"""Entry point for deutschweg CLI client."""

import argparse
import sys

from cli.api_client import DeutschWegAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='DeutschWeg - German vocabulary practice')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--level',
        choices=['A1', 'A2'],
        default=None,
        help='Only practice items of this level'
    )
    args = parser.parse_args()

    client = DeutschWegAPIClient(base_url=args.server)
    ui = ConsoleUI(client, level=args.level)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nTschüss!')
        sys.exit(0)


if __name__ == '__main__':
    main()
