import argparse
import asyncio
import logging
import sys
import time

from .compiler import SpellsCompiler
from .config import load_config
from .errors import SpellsError
from .watcher import build, run_watcher


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
                        prog='spells',
                        description='Compiles Spells (.spl) files to HTML',
                        epilog='The config file lists src/dst pairs to write and extra files to watch.')
    parser.add_argument('config')
    parser.add_argument('--once', action='store_true', help='build once and exit instead of watching')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')

    if args.once:
        try:
            asyncio.run(build(load_config(args.config), SpellsCompiler()))
        except (SpellsError, OSError) as e:
            logging.error("%s", e)
            return 1
        return 0

    while True:
        try:
            run_watcher(load_config(args.config))
            return 0
        except Exception as e:
            print(f"Error: {e}")
            print("Please check your configuration and try again, attempting to reload in 3 seconds...")
            time.sleep(3)


if __name__ == '__main__':
    sys.exit(main())
