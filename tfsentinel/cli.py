"""
Command Line Interface for tfsentinel
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .checks import CheckRegistry, default_registry
from .config import ScanConfig, find_config, load_config
from .errors import TfSentinelError
from .hcl.parser import Parser
from .models import Severity
from .reporters import get_reporter
from .scanner import Scanner

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='tfsentinel',
        description='tfsentinel - Find security problems in Terraform configuration',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  # Scan the current directory
  %(prog)s ./infra                          # Scan a directory
  %(prog)s ./infra -f json                  # JSON output
  %(prog)s ./infra -f sarif -o out.sarif    # SARIF output to a file
  %(prog)s ./infra -e AWS002,AWS017         # Skip some checks
        """
    )

    parser.add_argument(
        'directory',
        nargs='?',
        help='Directory containing Terraform files (default: current directory)'
    )

    # Output options
    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument(
        '-f', '--format',
        choices=['text', 'json', 'sarif'],
        default='text',
        help='Output format (default: text)'
    )
    output_group.add_argument(
        '-o', '--output',
        help='Output file path (default: stdout)'
    )
    output_group.add_argument(
        '--no-colour', '--no-color',
        dest='no_colour',
        action='store_true',
        help='Disable coloured output'
    )

    # Check options
    check_group = parser.add_argument_group('Check Options')
    check_group.add_argument(
        '-c', '--config',
        help='Config file (default: .tfsentinel.yml in the scanned directory)'
    )
    check_group.add_argument(
        '-e', '--exclude',
        action='append',
        default=[],
        help='Comma separated check codes to skip (can be repeated)'
    )
    check_group.add_argument(
        '--minimum-severity',
        choices=[s.value for s in Severity],
        help='Only run checks of at least this severity'
    )
    check_group.add_argument(
        '--list-checks',
        action='store_true',
        help='List all available checks and exit'
    )

    # Other options
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Verbose output'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Debug mode (very verbose)'
    )
    parser.add_argument(
        '-j', '--jobs',
        type=int,
        default=1,
        help='Number of files to parse in parallel (default: 1)'
    )
    parser.add_argument(
        '-v', '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(args)


def list_checks(registry: CheckRegistry) -> None:
    """List the checks in a registry"""
    print(f"\nAvailable Checks ({len(registry)} total):\n")
    print("-" * 80)

    by_provider = {}
    for check in registry:
        by_provider.setdefault(check.provider, []).append(check)

    for provider in sorted(by_provider):
        print(f"\n[{provider}]")
        for check in by_provider[provider]:
            print(f"  {check.code:<8} {check.severity.value:<8} {check.description}")

    print("\n" + "-" * 80)


def load_scan_config(args: argparse.Namespace, directory: Path) -> ScanConfig:
    """Config file settings, with command line options applied on top"""
    if args.config:
        config = load_config(args.config)
    else:
        found = find_config(directory)
        config = load_config(found) if found else ScanConfig()

    for value in args.exclude:
        config.merge_exclude(value.split(','))
    if args.minimum_severity:
        config.minimum_severity = Severity.from_string(args.minimum_severity)
    return config


def run_scan(args: argparse.Namespace) -> int:
    """Run the scan and write the report"""
    directory = Path(args.directory) if args.directory else Path.cwd()
    config = load_scan_config(args, directory)

    parser = Parser(max_workers=max(1, args.jobs))
    blocks = parser.parse_directory(directory)

    registry = default_registry(exclude=config.exclude, minimum_severity=config.minimum_severity)
    results = Scanner(registry, ignores=parser.ignores).scan(blocks)

    reporter_kwargs = {}
    if args.format == 'text':
        reporter_kwargs['use_colors'] = not args.no_colour
        reporter_kwargs['verbose'] = args.verbose
    elif args.format == 'sarif':
        reporter_kwargs['checks'] = registry.all()
        reporter_kwargs['base_path'] = str(directory)

    reporter = get_reporter(args.format, **reporter_kwargs)
    reporter.report(results, args.output)

    # Machine readable output always succeeds once written
    if args.format != 'text':
        return 0
    return 1 if results else 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parsed_args = parse_args(args)

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if parsed_args.list_checks:
        minimum = Severity.from_string(parsed_args.minimum_severity) if parsed_args.minimum_severity else None
        list_checks(default_registry(minimum_severity=minimum))
        return 0

    try:
        return run_scan(parsed_args)
    except KeyboardInterrupt:
        print("\nScan interrupted by user", file=sys.stderr)
        return 130
    except TfSentinelError as e:
        logger.debug("Scan aborted", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        if parsed_args.debug:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
