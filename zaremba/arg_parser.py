"""
Argument parsing for the zaremba command line.
"""
import argparse
import re

from .typed_config import DEFAULT_CONFIG_PATH

_SCIENTIFIC = re.compile(r'^(\d+)[eE](\d+)$')


def parse_big_int(value: str) -> int:
    """
    Parse a positive integer, supporting scientific notation and powers of ten.

    Unlike going through float, this stays exact for numbers beyond 2**53.

    Examples:
        "1000000" -> 1000000
        "1e6" -> 1000000
        "26e7" -> 260000000
        "10**30" -> 10**30

    Raises:
        argparse.ArgumentTypeError: If value cannot be parsed
    """
    text = value.strip().replace('_', '')
    if text.isdigit():
        result = int(text)
    elif _SCIENTIFIC.match(text):
        mantissa, exponent = _SCIENTIFIC.match(text).groups()
        result = int(mantissa) * 10 ** int(exponent)
    elif text.startswith('10**') and text[4:].isdigit():
        result = 10 ** int(text[4:])
    else:
        raise argparse.ArgumentTypeError(f"Invalid integer or scientific notation: {value}")

    if result < 1:
        raise argparse.ArgumentTypeError(f"Value must be positive: {value}")
    return result


def parse_positive_int(value: str) -> int:
    try:
        result = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from e
    if result < 1:
        raise argparse.ArgumentTypeError(f"Value must be positive: {value}")
    return result


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with one subcommand per tool."""
    parser = argparse.ArgumentParser(
        prog='zaremba',
        description='Tool to find z(n) and v(n) record-setters.',
    )
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH, help='Config file path')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log at DEBUG level')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only print results')
    parser.add_argument('--no-log-file', action='store_true', help='Log to stderr only')

    subparsers = parser.add_subparsers(dest='command', metavar='command')
    subparsers.required = True

    waterfall = subparsers.add_parser(
        'waterfall',
        help='Print the waterfall numbers below max-n',
        description='Print the waterfall numbers below max-n as "value: [primorial exponents]". '
                    'For example "5400: [0, 1, 2]" means 5400 = 6^1 * 30^2.',
    )
    waterfall.add_argument('max_n', type=parse_big_int, help='Exclusive upper bound (e.g. 1e6)')
    waterfall.add_argument('--step', type=parse_big_int,
                           help='Enumerate in batches of this width (default: search.batch_step)')

    records = subparsers.add_parser(
        'records',
        help='Find and print all n that produce a record-setter for z(n) or v(n)',
    )
    records.add_argument('--max-n', type=parse_big_int,
                         help='Stop below this n (required with --enumerate; default: run forever)')
    records.add_argument('--resume', metavar='FILE', help='Resume from a checkpoint file')
    records.add_argument('--checkpoint', metavar='FILE',
                         help='Write a checkpoint after every record')
    records.add_argument('--output', metavar='FILE',
                         help='Also append record lines to this file')
    records.add_argument('--enumerate', action='store_true',
                         help='Check every waterfall number instead of walking with step sizes')

    k_primes = subparsers.add_parser(
        'k-primes',
        help='Check for v(n) record-setters where n uses exactly the first k primes',
    )
    k_primes.add_argument('--k', type=parse_positive_int, required=True,
                          help="Number of unique, consecutive primes in n's factorization")
    k_primes.add_argument('--V', dest='v_record', type=float, required=True,
                          help='Largest known record-setter for v(n)')

    subparsers.add_parser(
        'max-v',
        help='Search for the highest possible v(n) by k-primes bootstrapping',
    )

    single = subparsers.add_parser('single', help='Compute z(n) and v(n) for a single n')
    single.add_argument('n', type=parse_big_int)

    factor = subparsers.add_parser('factor', help='Factor a waterfall number')
    factor.add_argument('n', type=parse_big_int)

    latex = subparsers.add_parser('latex', help='Reformat records output as LaTeX table')
    latex.add_argument('records_file', help='File of JSON record lines')

    return parser


def validate_args(args: argparse.Namespace) -> dict:
    """
    Cross-argument checks argparse can't express.

    Returns:
        Dictionary of field -> error message (empty if valid)
    """
    errors = {}
    if getattr(args, 'command', None) == 'records':
        if args.enumerate and args.max_n is None:
            errors['max_n'] = "--enumerate needs --max-n"
        if args.enumerate and args.resume:
            errors['resume'] = "--resume only applies to the stepped walk"
    return errors
