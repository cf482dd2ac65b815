#!/usr/bin/env python3
"""
Renderer tool with debug outputs, fingerprinting, and param tracing.

Usage:
    python tools/render.py <subcommand> [options]

Subcommands:
    one <transformation> <source> <target> [params_json]   Render a single transformation
    all <source> <target>                                  Render every transformation on one pair
    catalog                                                List transformations and their params

Options:
    --seed <int>          Seed for randomized operators (default: unseeded)
    --debug               Save resolved.json with param trace
    --normalize           Peak-normalize written WAVs
    --output-dir <path>   Output directory (default: unique timestamped dir)
"""
import sys
import os
import json
import argparse
from pathlib import Path

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tools.render_core import render_transformation, get_unique_output_dir
from transmute.core.errors import TransmuteError
from transmute.core.types import TransformationType
from transmute.params.schema import params_for


def _load_params(path):
    if not path:
        return {}
    with open(path, "r") as f:
        return json.load(f)


def _print_fingerprint(debug_info):
    fp = debug_info["fingerprint"]
    print(f"Output: {debug_info['wav_path']}")
    print(f"Fingerprint SHA256: {fp['sha256'][:16]}...")
    print(f"Peak: {fp['peak']:.4f}, RMS: {fp['rms']:.4f}")


def cmd_one(args):
    """Render a single transformation."""
    params = _load_params(args.params_json)
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("one")
    filename = args.filename or args.transformation.lower().replace(" ", "_")

    try:
        _, debug_info = render_transformation(
            args.transformation, args.source, args.target, params,
            output_dir, filename,
            transform_a=args.transform_a, transform_b=args.transform_b,
            seed=args.seed, debug=args.debug, normalize=args.normalize,
            script_name="render.py one",
        )
    except TransmuteError as exc:
        print(f"Error: {exc}")
        return 1

    print(f"\n=== Render Complete ===")
    print(f"Transformation: {args.transformation}")
    _print_fingerprint(debug_info)

    if args.debug:
        print(f"Debug JSON: {output_dir / (filename + '.resolved.json')}")
    return 0


def cmd_all(args):
    """Render every single-operator transformation and flag no-op renders."""
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("all")
    print(f"Rendering every transformation to {output_dir}\n")

    failures = []
    for kind in TransformationType:
        if kind is TransformationType.TRANSFORMATION_MORPH:
            continue
        try:
            _, debug_info = render_transformation(
                kind.value, args.source, args.target, {},
                output_dir, kind.value,
                seed=args.seed, debug=args.debug, normalize=args.normalize,
                script_name="render.py all",
            )
        except TransmuteError as exc:
            failures.append(f"{kind.label}: {exc}")
            print(f"  FAIL {kind.label}: {exc}")
            continue

        fp = debug_info["fingerprint"]
        if fp["peak"] == 0.0:
            failures.append(f"{kind.label}: silent output")
            print(f"  WARN {kind.label}: silent output")
        else:
            print(f"  OK   {kind.label}: peak={fp['peak']:.4f} rms={fp['rms']:.4f} ({fp['sha256'][:8]})")

    print(f"\n{'='*60}")
    print(f"Output directory: {output_dir}")
    if failures:
        print(f"\nFAILURES ({len(failures)}):")
        for f in failures:
            print(f"  - {f}")
        return 1
    print("\nAll transformations rendered.")
    return 0


def cmd_catalog(args):
    """List transformations and the params each one reads."""
    for kind in TransformationType:
        print(f"{kind.value}  ({kind.label})")
        for name, entry in params_for(kind).items():
            unit = f" {entry['unit']}" if entry["unit"] else ""
            print(f"    {name}: {entry['min']}..{entry['max']}{unit} (default {entry['default']})")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Transformation renderer with debug outputs and fingerprinting"
    )

    subparsers = parser.add_subparsers(dest="command", help="Subcommand")

    # Common arguments
    def add_common_args(p):
        p.add_argument("--seed", type=int, default=None, help="Seed for randomized operators")
        p.add_argument("--debug", action="store_true", help="Save resolved.json with param trace")
        p.add_argument("--normalize", action="store_true", help="Peak-normalize written WAVs")
        p.add_argument("--output-dir", type=str, help="Output directory (default: unique timestamped)")

    # one subcommand
    p_one = subparsers.add_parser("one", help="Render a single transformation")
    p_one.add_argument("transformation", help="Transformation slug or label")
    p_one.add_argument("source", help="Source audio file")
    p_one.add_argument("target", help="Target audio file")
    p_one.add_argument("params_json", nargs="?", help="JSON file with params (optional)")
    p_one.add_argument("--transform-a", type=str, help="Morph: first transformation")
    p_one.add_argument("--transform-b", type=str, help="Morph: second transformation")
    p_one.add_argument("--filename", type=str, help="Output filename (without extension)")
    add_common_args(p_one)

    # all subcommand
    p_all = subparsers.add_parser("all", help="Render every transformation on one pair")
    p_all.add_argument("source", help="Source audio file")
    p_all.add_argument("target", help="Target audio file")
    add_common_args(p_all)

    # catalog subcommand
    subparsers.add_parser("catalog", help="List transformations and params")

    args = parser.parse_args()

    if args.command == "one":
        return cmd_one(args)
    elif args.command == "all":
        return cmd_all(args)
    elif args.command == "catalog":
        return cmd_catalog(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
