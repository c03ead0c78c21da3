"""
Command-line interface over the build123d host.

Loads STEP files into a :class:`~cadassist.host.Build123dDocument` and runs
measurement, volume-based trimming and free-endpoint detection on them.
"""

import argparse
import logging
import sys
from pathlib import Path

from ..enums import EntityKind, ErrorKind, TrimPolicy
from ..errors import CadAssistError
from ..io.settings import DEFAULT_SETTINGS, load_settings
from ..core.measure import measure_body_volume
from ..core.trim import trim_body_by_volume
from ..core.endpoints import unique_curve_endpoints

logger = logging.getLogger(__name__)


class _LoadError(Exception):
    pass


def _load_document(*files):
    """Load STEP files into one document; files are (path, prefix) pairs."""
    # build123d is only needed once a file is actually opened
    from ..host.build123d_document import Build123dDocument

    document = Build123dDocument()
    for filepath, prefix in files:
        try:
            print(f"Loading {filepath}...")
            document.load_step(filepath, prefix=prefix)
        except Exception as e:
            raise _LoadError(f"Error loading {filepath}: {e}") from e
    return document


def cmd_measure(args, settings) -> int:
    document = _load_document((args.step_file, "BODY"))
    bodies = document.entities(EntityKind.BODY)
    if not bodies:
        print(f"No solids in {args.step_file}", file=sys.stderr)
        return 1

    total = 0.0
    for body in bodies:
        volume = measure_body_volume(document, body, settings)
        total += volume
        print(f"  {body.name}: {volume:.3f} mm³")
    print(f"Total volume: {total:.3f} mm³ ({len(bodies)} bodies)")
    return 0


def cmd_trim(args, settings) -> int:
    document = _load_document((args.target, "TARGET"), (args.tool, "TOOL"))
    targets = [e for e in document.entities(EntityKind.BODY) if e.name.startswith("TARGET")]
    tools = [e for e in document.entities(EntityKind.BODY) if e.name.startswith("TOOL")]
    if not targets or not tools:
        print("Target and tool files must each contain a solid", file=sys.stderr)
        return 1

    policy = TrimPolicy(args.policy)
    result = trim_body_by_volume(document, targets[0].name, tools[0].name,
                                 reverse=args.reverse, policy=policy, settings=settings)
    if not result.ok:
        print(f"Trim failed: {result.message}", file=sys.stderr)
        return 1

    outcome = result.value
    print(f"Removed {outcome.removed_percent:.2f}% of {targets[0].name} "
          f"({outcome.baseline_volume:.3f} -> {outcome.final_volume:.3f} mm³)")
    print(f"  Direction: reverse={outcome.reverse}, attempts={result.attempts}")
    if result.error_kind == ErrorKind.DIRECTION_UNRESOLVED:
        print(f"  ⚠ {result.message}")

    if args.output:
        output_path = Path(args.output)
        document.export_step(output_path, [targets[0].name])
        print(f"Saved: {output_path}")
    return 0 if result.satisfied else 2


def cmd_endpoints(args, settings) -> int:
    document = _load_document((args.step_file, "BODY"))
    curves = document.entities(EntityKind.CURVE)
    for body in document.entities(EntityKind.BODY):
        curves.extend(document.body_edges(body))
    if not curves:
        print(f"No curves or edges in {args.step_file}", file=sys.stderr)
        return 1

    points = unique_curve_endpoints(document, [curves], args.tolerance)
    print(f"{len(points)} free endpoints among {len(curves)} curves:")
    for point in points:
        print(f"  ({point.x:.4f}, {point.y:.4f}, {point.z:.4f})")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="CAD helper operations on STEP files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Volume of every solid in a file
  cadassist measure part.step

  # Trim a block by a panel, keeping the larger side
  cadassist trim block.step panel.step --policy small -o trimmed.step

  # Free endpoints of a wire-frame
  cadassist endpoints outline.step --tolerance 0.001
        """
    )
    parser.add_argument(
        '--settings',
        type=str,
        default=None,
        help='JSON file with operation tolerances (default: built-in values)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log debug output'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    measure = subparsers.add_parser('measure', help='Measure solid volumes')
    measure.add_argument('step_file', type=str, help='STEP file to measure')
    measure.set_defaults(func=cmd_measure)

    trim = subparsers.add_parser('trim', help='Trim a body by the faces of another')
    trim.add_argument('target', type=str, help='STEP file with the body to trim')
    trim.add_argument('tool', type=str, help='STEP file with the cutting body')
    trim.add_argument(
        '--policy',
        choices=[p.value for p in TrimPolicy],
        default=TrimPolicy.SMALL_CUT.value,
        help='small: remove less than half of the body, large: at least half (default: small)'
    )
    trim.add_argument(
        '--reverse',
        action='store_true',
        help='Start with the reversed trim direction'
    )
    trim.add_argument('-o', '--output', type=str, default=None, help='Write the trimmed body here')
    trim.set_defaults(func=cmd_trim)

    endpoints = subparsers.add_parser('endpoints', help='List free curve endpoints')
    endpoints.add_argument('step_file', type=str, help='STEP file with curves or solids')
    endpoints.add_argument(
        '--tolerance',
        type=float,
        default=0.001,
        help='Distance below which endpoints are merged (default: 0.001)'
    )
    endpoints.set_defaults(func=cmd_endpoints)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.settings) if args.settings else DEFAULT_SETTINGS
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    try:
        return args.func(args, settings)
    except _LoadError as e:
        print(e, file=sys.stderr)
        return 1
    except CadAssistError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
