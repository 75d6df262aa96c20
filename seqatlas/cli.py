"""seqatlas: weighted edit-distance matrices for peptide sequences.

Command line entry point that builds a DistanceConfig and runs the pipeline.
"""

import argparse
import sys

from rich.console import Console

from seqatlas.config_utils import DistanceConfig, print_config_summary
from seqatlas.cluster.linkage import LINKAGE_METHODS
from seqatlas.main import run_pipeline

console = Console()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="seqatlas",
        description="seqatlas: weighted edit-distance dissimilarity matrices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  seqatlas peptides.txt costs.tsv output_dir/
  seqatlas peptides.tsv costs.csv output/ --column cdr3 --linkage average
  seqatlas peptides.txt costs.tsv output/ --nproc 8 --force
        """,
    )

    parser.add_argument(
        "sequences",
        type=str,
        help="Sequence file (one per line, or a CSV/TSV table with --column)",
    )
    parser.add_argument(
        "cost_table",
        type=str,
        help="Substitution cost table (square, or melted source/target/cost)",
    )
    parser.add_argument(
        "output",
        type=str,
        help="Output directory for results",
    )

    parser.add_argument(
        "--column",
        type=str,
        default=None,
        help="Column holding the sequences in a tabular sequence file",
    )
    parser.add_argument(
        "--linkage",
        type=str,
        default=None,
        choices=LINKAGE_METHODS,
        help="Also compute hierarchical clustering linkage with this method",
    )
    parser.add_argument(
        "--nproc",
        type=int,
        default=1,
        help="Number of processes for parallel computation (default: 1)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force recomputation of the distance matrix (ignore cache)",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Neither read nor write the distance matrix cache",
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config = DistanceConfig(
        sequences=args.sequences,
        cost_table=args.cost_table,
        outdir=args.output,
        sequence_column=args.column,
        linkage_method=args.linkage,
        force_recompute=args.force,
        use_cache=not args.no_cache,
        nproc=args.nproc,
    )
    print_config_summary(config)

    try:
        run_pipeline(config)
        console.print("\n✓ Pipeline finished successfully!")
        return 0
    except (ValueError, LookupError, OSError) as e:
        console.print(f"\n✗ Pipeline failed: {e}", style="bold red")
        return 1


if __name__ == "__main__":
    sys.exit(main())
