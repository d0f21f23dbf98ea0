"""
Command-line interface for bikegeom.

Provides commands for analysing photographs, classifying pre-detected
primitives and writing a default config.
"""

import argparse
import sys

from bikegeom.config import save_default_config
from bikegeom.tracer import configure_tracer, get_tracer


def add_trace_arguments(parser):
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="bikegeom: detect wheels and frame tubes in bicycle photographs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Analyse a bicycle photograph")
    run_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input image file",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug artifact generation",
    )
    run_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace earlier output images instead of numbering new ones",
    )
    add_trace_arguments(run_parser)

    # Classify command
    classify_parser = subparsers.add_parser("classify", help="Classify pre-detected primitives")
    classify_parser.add_argument(
        "--primitives", "-p",
        required=True,
        help="Path to primitives JSON file",
    )
    classify_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    classify_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    add_trace_arguments(classify_parser)

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="bikegeom_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "classify":
        return handle_classify(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def configure_from_args(args):
    configure_tracer(
        enabled=args.trace,
        level=args.trace_level,
        file_path=args.trace_file,
        json_output=args.trace_json,
    )
    return get_tracer()


def print_results(results, out_dir):
    print(f"  Wheels found: {results.wheels_found}")
    print(f"  Frame tubes found: {results.frame_tubes_found}")
    print(f"  Wheelbase: {results.measurements.wheelbase_pixels:.1f} px")
    print(f"  Wheel detection confidence: {results.confidence_scores.wheel_detection:.2f}")
    print(f"  Frame detection confidence: {results.confidence_scores.frame_detection:.2f}")
    if results.analysis.used_fallback:
        print("  [!] No wheel pair found; frame lines left unclassified")
    print(f"\nOutputs saved to: {out_dir}/")


def handle_run(args):
    """Handle the run command."""
    tracer = configure_from_args(args)

    try:
        from bikegeom.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            results = run_pipeline(
                image_path=args.input,
                out_dir=args.out,
                config_path=args.config,
                debug=args.debug,
                overwrite=args.overwrite,
            )

        print("\nAnalysis completed successfully.")
        print_results(results, args.out)
        return 0

    except Exception as e:
        tracer.event(f"Pipeline failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_classify(args):
    """Handle the classify command."""
    tracer = configure_from_args(args)

    try:
        from bikegeom.pipeline import run_primitives

        with tracer.span("cli_classify", module="cli"):
            results = run_primitives(
                primitives_path=args.primitives,
                out_dir=args.out,
                config_path=args.config,
            )

        print("\nClassification completed successfully.")
        print_results(results, args.out)
        return 0

    except Exception as e:
        tracer.event(f"Classification failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
