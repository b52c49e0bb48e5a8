"""Command-line entry point for the expression calculator."""

import argparse
import sys
from typing import List, Optional

from exprcalc.config import configure_logging, load_settings
from exprcalc.repl import REPL


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="exprcalc", description="Interactive arithmetic expression calculator.")
    parser.add_argument("-e", "--eval", dest="lines", action="append", metavar="EXPR",
                        help="evaluate EXPR and exit (may be repeated; lines share one session)")
    parser.add_argument("--precision", type=int, help="significant digits for non-integral results")
    parser.add_argument("--log-level", help="logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--history-file", help="file used for interactive command history")
    parser.add_argument("--show-tokens", action="store_true", default=None, help="echo the token stream of each line")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings = load_settings({
        'precision': args.precision,
        'log_level': args.log_level,
        'history_file': args.history_file,
        'show_tokens': args.show_tokens,
    })
    configure_logging(settings)
    repl = REPL(settings)

    if args.lines:
        status = 0
        for line in args.lines:
            try:
                ok, out = repl.process_line(line)
            except EOFError:
                break
            print(out)
            if not ok:
                status = 1
        return status

    repl.repl_loop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
