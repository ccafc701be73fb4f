"""
Generate random numeric CSV data for trying out the clustering tool.

    lloyd-kmeans-gen 1000 4 > input_data.csv
"""

import argparse
import sys
from typing import List, Optional

import numpy as np

from .initializers import make_rng


def generate_rows(n_rows: int, n_cols: int, rng: np.random.Generator) -> np.ndarray:
    """Values in [0, 10), each the product of a uniform [0, 1) and a uniform [0, 10) draw."""
    p = rng.random((n_rows, n_cols))
    q = rng.random((n_rows, n_cols)) * 10.0
    return p * q


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="lloyd-kmeans-gen", description="Print random CSV data")
    parser.add_argument('rows', type=int, help='Number of rows')
    parser.add_argument('cols', type=int, help='Number of columns')
    parser.add_argument('--seed', type=int, default=None, help='Random seed (default: clock-derived)')
    args = parser.parse_args(argv)

    if args.rows < 0 or args.cols < 1:
        parser.error("rows must be non-negative and cols at least 1")

    data = generate_rows(args.rows, args.cols, make_rng(args.seed))
    for row in data:
        sys.stdout.write(",".join(f"{v:f}" for v in row) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
