"""Command-line interface."""
import argparse
import logging

from .definitions import AngleMode
from .logging_config import setup_logging
from .utils import console, create_default_context


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog='graphcalc', description='Interactive scientific and graphing calculator')
    parser.add_argument('--degrees', action='store_true', help='evaluate trigonometric functions in degrees')
    parser.add_argument('--time', action='store_true', help='show how long each evaluation takes')
    parser.add_argument('--tree', action='store_true', help='print the syntax tree of each expression')
    parser.add_argument('--debug', action='store_true', help='enable debug logging')
    parser.add_argument('--log-file', help='also write the log to this file')
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.WARNING, args.log_file)

    mode = AngleMode.DEGREES if args.degrees else AngleMode.RADIANS
    console(create_default_context(), mode=mode, show_time=args.time, show_tree=args.tree)


if __name__ == "__main__":
    main()
