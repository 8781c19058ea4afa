#!/usr/bin/env python3
"""autoenv command line.

Examples:
  autoenv generate                    # Scan current directory
  autoenv generate ./my-project       # Scan specific directory
  autoenv generate -o .env.example    # Generate .env.example file
  autoenv scan                        # Just list found variables
  autoenv config                      # Show current configuration
  autoenv init-config                 # Write a sample autoenv.toml
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import DEFAULT_CONFIG_NAME, Config, find_config, load_config, write_sample_config
from .envfile import write_env_file
from .errors import AutoEnvError
from .scanner import EnvScanner

logger = logging.getLogger(__name__)

NOTHING_FOUND = "No environment variables found in Rust files."


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_effective_config(scan_path: Path, config_path: Path | None, verbose: bool) -> Config:
    path = find_config(scan_path, config_path)
    if path is None:
        return Config()
    if verbose:
        print(f"Loading config from: {path}")
    return load_config(path)


def cmd_generate(args: argparse.Namespace) -> int:
    scan_path = args.path
    if args.verbose:
        print(f"Scanning directory: {scan_path}")

    config = _load_effective_config(scan_path, args.config, args.verbose).with_overrides(
        output=args.output, no_merge=args.no_merge, ignore=args.ignore
    )

    scanner = EnvScanner(config, max_workers=args.jobs)
    variables = scanner.scan_directory(scan_path)

    if not variables:
        print(NOTHING_FOUND)
        return 0

    if args.verbose:
        print(f"Found {len(variables)} environment variables:")
        for name in sorted(variables):
            print(f"  - {name}")

    output_path = scan_path / config.output
    write_env_file(variables, output_path, merge_existing=config.merge_existing)

    print(f"Generated {config.output} with {len(variables)} variables")
    if args.verbose:
        print(f"Output path: {output_path}")
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    scan_path = args.path
    config = _load_effective_config(scan_path, args.config, args.verbose).with_overrides(
        ignore=args.ignore
    )
    scanner = EnvScanner(config, max_workers=args.jobs)

    if args.show_locations:
        locations = scanner.scan_directory_with_locations(scan_path)
        names = list(locations)
    else:
        locations = {}
        names = sorted(scanner.scan_directory(scan_path))

    if not names:
        print(NOTHING_FOUND)
        return 0

    print(f"Found {len(names)} environment variables:")
    for name in names:
        print(f"  {name}")
        for location in locations.get(name, ()):
            print(f"      {location}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    config_path = args.config or Path(DEFAULT_CONFIG_NAME)

    if config_path.exists():
        config = load_config(config_path)
        print(f"Configuration from: {config_path}")
        print()
        print(config.to_toml())
    else:
        print(f"Configuration file not found: {config_path}")
        print("Using default configuration:")
        print()
        print(Config().to_toml())
        print("To create a configuration file, run:")
        print("  autoenv init-config")
    return 0


def cmd_init_config(args: argparse.Namespace) -> int:
    config_path = args.output or Path(DEFAULT_CONFIG_NAME)
    _, message = write_sample_config(config_path, force=args.force)
    print(message)
    return 0


def _add_scan_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=Path("."),
        metavar="DIRECTORY",
        help="Directory to scan (default: current directory)",
    )
    p.add_argument("-c", "--config", type=Path, metavar="CONFIG", help="Configuration file path")
    p.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="VARIABLE",
        help="Variable to ignore (can be used multiple times)",
    )
    p.add_argument("-j", "--jobs", type=int, default=None, help="Number of scanner threads")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose output")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoenv",
        description="Automatically generate .env files from Rust source code",
        epilog=__doc__.split("\n", 2)[2],
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen_p = subparsers.add_parser("generate", help="Generate .env file by scanning Rust source files")
    _add_scan_options(gen_p)
    gen_p.add_argument("-o", "--output", metavar="FILE", help="Output file name (default: .env)")
    gen_p.add_argument(
        "--no-merge",
        action="store_true",
        help="Don't merge with existing file (overwrite instead)",
    )
    gen_p.set_defaults(func=cmd_generate)

    scan_p = subparsers.add_parser(
        "scan", help="Scan and list found environment variables without generating file"
    )
    _add_scan_options(scan_p)
    scan_p.add_argument(
        "--show-locations",
        action="store_true",
        help="Show files where each variable was found",
    )
    scan_p.set_defaults(func=cmd_scan)

    config_p = subparsers.add_parser("config", help="Show current configuration")
    config_p.add_argument("-c", "--config", type=Path, metavar="CONFIG", help="Configuration file path")
    config_p.set_defaults(func=cmd_config, verbose=False)

    init_p = subparsers.add_parser("init-config", help="Create a sample configuration file")
    init_p.add_argument(
        "output",
        nargs="?",
        type=Path,
        metavar="FILE",
        help=f"Output path for config file (default: {DEFAULT_CONFIG_NAME})",
    )
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init_p.set_defaults(func=cmd_init_config, verbose=False)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        return args.func(args)
    except AutoEnvError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
