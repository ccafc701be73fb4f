"""
Command line entry point: cluster columnar data read from stdin.

    lloyd-kmeans -k 3 0-4 < input_data.csv > labels.csv

Prints one cluster index per parsed input row.
"""

import argparse
import io
import sys
import traceback
from typing import List, Optional

from .errors import ConfigurationError, InputParseError, NumericDegeneracyError
from .kmeans import DEFAULT_MAX_ITERS, DEFAULT_TOL, k_means
from .reader import ReaderConfig, parse_columns, read_matrix, write_labels
from .version import __version__

DESCRIPTION = """\
Cluster data into k classes.

Reads columnar data from stdin and uses k-means clustering to sort the rows
into a set number of groups. The number of groups is the number of kernels
(-k, default 2). Kernels are picked randomly from the data rows, or generated
from per-dimension quantiles with -g.

Rows that cannot be parsed are discarded unless -e is given. The columns used
for clustering are given as separate indices or as ranges, e.g. 0-9.
"""


def _stdin_text():
    # Undecodable bytes become U+FFFD so the row fails to parse like any
    # other malformed row.
    if isinstance(sys.stdin, io.TextIOWrapper):
        sys.stdin.reconfigure(encoding='utf-8', errors='replace')
    return sys.stdin


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lloyd-kmeans",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('columns', nargs='+', metavar='range|column',
                        help='Column indices or inclusive ranges (e.g. 0-9) to cluster on')
    parser.add_argument('-k', '--kernels', type=int, default=2,
                        help='Number of kernels (clusters), default 2')
    parser.add_argument('-g', '--generate-kernels', action='store_true',
                        help='Generate kernels from per-dimension quantiles instead of sampling rows')
    parser.add_argument('-i', '--ignore-header', action='store_true',
                        help='Skip the first input line and print a header before the labels')
    parser.add_argument('-e', '--fail-on-errors', action='store_true',
                        help='Fail on unparseable rows instead of skipping them')
    parser.add_argument('-f', '--field-separator', default=',',
                        help='Field separator, may be several characters (default ",")')
    parser.add_argument('-n', '--decimal-separator', default='.',
                        help='Decimal separator, a single character (default ".")')
    parser.add_argument('--max-iters', type=int, default=DEFAULT_MAX_ITERS,
                        help=f'Iteration cap (default {DEFAULT_MAX_ITERS})')
    parser.add_argument('--tol', type=float, default=DEFAULT_TOL,
                        help='Movement below which clustering stops (default: float64 epsilon)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for random kernel selection (default: clock-derived)')
    parser.add_argument('--input', default=None,
                        help='Read from this file instead of stdin')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print progress information to stderr')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ReaderConfig(
            columns=parse_columns(args.columns),
            field_separator=args.field_separator,
            decimal_separator=args.decimal_separator,
            ignore_header=args.ignore_header,
            fail_on_errors=args.fail_on_errors,
        )
        if args.input is None:
            _, X = read_matrix(_stdin_text(), config)
        else:
            with open(args.input, encoding='utf-8', errors='replace') as f:
                _, X = read_matrix(f, config)

        if args.verbose:
            print(f"Read {X.shape[0]} rows with {X.shape[1]} columns", file=sys.stderr)

        labels = k_means(
            X,
            args.kernels,
            generate_kernels=args.generate_kernels,
            max_iters=args.max_iters,
            tol=args.tol,
            random_state=args.seed,
            verbose=args.verbose,
        )
    except ConfigurationError as e:
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 2
    except InputParseError as e:
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 1
    except NumericDegeneracyError:
        traceback.print_exc()
        return 1

    # A skipped header is replaced by one for the label column so the
    # output stays aligned with the input lines.
    header = f"{args.field_separator}kernel" if args.ignore_header else None
    write_labels(sys.stdout, labels, header=header)
    return 0


if __name__ == "__main__":
    sys.exit(main())
