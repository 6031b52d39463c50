"""
Command-line entry point for the a0 transmission compensation.

Usage:
    # Built-in documentation
    torch-sqat-a0

    # Free-field a0 for fs = 44.1 kHz, N = 4096
    torch-sqat-a0 44100 4096

    # Save gains and filter, and the diagnostic plot
    torch-sqat-a0 44100 4096 --a0-type fastl2007df --output a0.npz --plot a0.png
"""

import argparse
import inspect
import logging
import sys
from typing import List, Optional

import numpy as np

from torch_sqat.common.ears import A0_TABLES, DEFAULT_A0_TYPE, calculate_a0
from torch_sqat.common.scales import to_db

logger = logging.getLogger("torch_sqat")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torch-sqat-a0",
        description="Compute the a0 outer ear transmission curve and its FIR filter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  torch-sqat-a0 44100 4096                                  # Free-field a0 summary
  torch-sqat-a0 48000 8192 --a0-type fastl2007df            # Diffuse-field a0
  torch-sqat-a0 44100 4096 --output a0.npz --plot a0.png    # Save results and figure
        """
    )

    parser.add_argument("fs", type=float, help="Sampling rate in Hz")
    parser.add_argument("N", type=int, help="Transform length (frequency resolution fs/N, FIR order)")

    parser.add_argument(
        "--a0-type",
        default=DEFAULT_A0_TYPE,
        help=f"a0 curve, case-insensitive, one of: {', '.join(A0_TABLES)} (default: {DEFAULT_A0_TYPE})"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Save B, freqs and a0 to this .npz file"
    )

    parser.add_argument(
        "--plot",
        type=str,
        help="Save the target vs FIR response figure to this file"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable DEBUG-level logging"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the a0 command-line tool."""
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    # No inputs: show the documentation instead of computing
    if not argv:
        print(inspect.cleandoc(calculate_a0.__doc__))
        print()
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s")

    try:
        B, freqs, a0 = calculate_a0(args.fs, args.N, args.a0_type)
    except ValueError as e:
        parser.error(str(e))

    a0_db = to_db(a0)
    peak_idx = int(a0_db.argmax()) if a0.numel() else None

    print("=" * 60)
    print(f"a0 transmission: {args.a0_type.lower()}")
    print("=" * 60)
    print(f"{'Sampling rate:':<22} {args.fs:g} Hz")
    print(f"{'Transform length:':<22} {args.N} (df = {args.fs / args.N:.4f} Hz)")
    print(f"{'Analysis bins:':<22} {freqs.numel()}")
    if peak_idx is not None:
        print(f"{'Frequency range:':<22} {freqs[0].item():.2f} - {freqs[-1].item():.2f} Hz")
        print(f"{'Peak gain:':<22} {a0_db[peak_idx].item():.2f} dB at {freqs[peak_idx].item():.1f} Hz")
    print(f"{'FIR taps:':<22} {B.numel()}")
    print("=" * 60)

    if args.output:
        np.savez(args.output, B=B.numpy(), freqs=freqs.numpy(), a0=a0.numpy())
        logger.info("Saved %s", args.output)

    if args.plot:
        import matplotlib.pyplot as plt

        from torch_sqat.common.plotting import plot_a0_fir

        fig = plot_a0_fir(freqs, a0, B, fs=args.fs)
        fig.savefig(args.plot, dpi=150, bbox_inches='tight')
        plt.close(fig)
        logger.info("Saved %s", args.plot)

    return 0


if __name__ == "__main__":
    sys.exit(main())
