import argparse
import csv
import logging
import sys
from typing import List, Optional

from dispute_window import DEFAULT_WINDOW_SIZE
from payments_engine import PaymentsEngine

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_HALTED = 3


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Replay a CSV of client transactions and print the final account states.",
    )
    parser.add_argument("input", help="path to the transactions CSV")
    parser.add_argument(
        "--window-size",
        type=positive_int,
        default=DEFAULT_WINDOW_SIZE,
        help="client transactions after which an open dispute is force-settled (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress at INFO level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(window_size=args.window_size)
    try:
        engine.process_file(args.input)
    except OSError as e:
        print(f"Cannot read {args.input}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    writer = csv.writer(sys.stdout, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for snapshot in engine.snapshots():
        writer.writerow(snapshot.as_row())

    print(engine.stats.summary(), file=sys.stderr)

    if engine.halted:
        return EXIT_HALTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
