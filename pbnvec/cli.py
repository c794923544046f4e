"""Command line interface for pbnvec."""
import argparse
import json
import logging
import sys
from pathlib import Path

from pbnvec.pipeline import PaintByNumbersPipeline, PipelineResult
from pbnvec.types import FitConfig, PipelineConfig, VectorizationError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='pbnvec',
        description='Trace paint-by-numbers region boundaries and fit bezier curves'
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path'
    )

    parser.add_argument(
        '--tolerance',
        type=float,
        default=1.0,
        help='Polyline simplification tolerance in pixels (default: 1.0)'
    )

    parser.add_argument(
        '--low-quality',
        action='store_true',
        help='Run a radial distance pass before Douglas-Peucker'
    )

    parser.add_argument(
        '--subdivision-length',
        type=int,
        default=8,
        help='Split boundary segments longer than this (default: 8)'
    )

    parser.add_argument(
        '--max-iterations',
        type=int,
        default=40,
        help='Maximum curve fitting iterations per piece (default: 40)'
    )

    parser.add_argument(
        '--error-threshold',
        type=float,
        default=25.0,
        help='Stop fitting once squared error falls below this (default: 25.0)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Threads for tree building and curve fitting (default: 1)'
    )

    parser.add_argument(
        '--no-fit',
        action='store_true',
        help='Stop after tracing and simplification'
    )

    parser.add_argument(
        '--no-validate',
        action='store_true',
        help='Skip adjacency map validation'
    )

    parser.add_argument(
        '--json',
        type=str,
        default=None,
        help='Write traced pieces and fitted curves to this JSON file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def result_to_dict(result: PipelineResult) -> dict:
    """JSON-serializable summary of a pipeline run."""
    pieces = []
    for piece in result.pieces:
        pieces.append({
            'is_loop': piece.is_loop,
            'chain': [list(point) for point in piece.chain],
            'simplified_chain': [list(point) for point in piece.simplified_chain],
            'curves': [
                [list(curve.p0), list(curve.p1), list(curve.p2), list(curve.p3)]
                for curve in piece.curves
            ],
            'fit_error': piece.fit_error,
            'fit_iterations': piece.fit_iterations,
        })
    return {
        'width': result.width,
        'height': result.height,
        'leaves': result.leaf_count,
        'boundary_segments': len(result.boundary_segments),
        'junction_points': [list(point) for point in result.junction_points],
        'pieces': pieces,
    }


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    try:
        config = PipelineConfig(
            simplify_tolerance=parsed_args.tolerance,
            high_quality=not parsed_args.low_quality,
            subdivision_length=parsed_args.subdivision_length,
            validate=not parsed_args.no_validate,
            fit_curves=not parsed_args.no_fit,
            workers=parsed_args.workers,
            fit=FitConfig(
                error_threshold=parsed_args.error_threshold,
                max_iterations=parsed_args.max_iterations,
            ),
        )
        result = PaintByNumbersPipeline(config).process(input_path)
    except (VectorizationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    loops = sum(1 for piece in result.pieces if piece.is_loop)
    print(f"Image: {result.width}x{result.height}")
    print(f"  Leaves: {result.leaf_count}")
    print(f"  Boundary segments: {len(result.boundary_segments)}")
    print(f"  Junctions: {len(result.junction_points)}")
    print(f"  Pieces: {len(result.pieces)} ({loops} loops)")
    if config.fit_curves:
        print(f"  Curves: {result.curve_count}")

    if parsed_args.json:
        output_path = Path(parsed_args.json)
        try:
            output_path.write_text(json.dumps(result_to_dict(result), indent=2))
        except OSError as e:
            print(f"Error: Could not write {output_path}: {e}", file=sys.stderr)
            return 1
        print(f"Wrote {output_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
