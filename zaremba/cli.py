"""
Command implementations for the zaremba tool.

Each command takes the parsed arguments, the loaded configuration and a
UserOutput, and returns the process exit code.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .arg_parser import create_parser, validate_args
from .errors import ZarembaError
from .file_utils import append_json_line, load_json, read_json_lines, save_json
from .k_primes import max_v_by_bootstrapping, search_v_record_k_primes
from .primes import PrimeTable, set_prime_table
from .records import RecordWalker, find_records
from .schemas import Checkpoint, RecordSetterLine
from .typed_config import AppConfig, TypedConfigLoader, setup_logging
from .user_output import UserOutput
from .waterfall import factor, find_all, prime_to_primorial_exponents
from .zaremba_math import evaluate

logger = logging.getLogger(__name__)


def cmd_waterfall(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    step = args.step or config.search.batch_step
    for number in find_all(step_size=step):
        if number.value >= args.max_n:
            break
        output.waterfall_number(number.value, number.primorial_exponents)
    return 0


def _load_checkpoint(path: str, output: UserOutput) -> Optional[Checkpoint]:
    raw = load_json(Path(path))
    if raw is None:
        output.error(f"Could not read checkpoint: {path}")
        return None
    try:
        return Checkpoint.model_validate(raw)
    except ValidationError as e:
        output.error(f"Invalid checkpoint {path}: {e}")
        return None


def cmd_records(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    checkpoint_file = args.checkpoint or config.output.checkpoint_file
    records_file = args.output or config.output.records_file

    if args.enumerate:
        records = find_records(args.max_n)
        walker = None
    else:
        state = None
        if args.resume:
            checkpoint = _load_checkpoint(args.resume, output)
            if checkpoint is None:
                return 1
            state = checkpoint.to_state()
            logger.info("Resuming walk after n=%d (z record %s, v record %s)",
                        state.n, state.record_z, state.record_v)
        walker = RecordWalker(state, v_recalc_steps=config.search.v_recalc_steps)
        records = walker.walk(args.max_n)

    count = 0
    for record in records:
        line = RecordSetterLine.from_record(record)
        output.record(line)
        count += 1
        if records_file and not append_json_line(Path(records_file), line.to_json_dict()):
            return 1
        if walker is not None and checkpoint_file:
            checkpoint = Checkpoint.from_state(walker.checkpoint())
            if not save_json(Path(checkpoint_file), checkpoint.model_dump(mode="json")):
                return 1

    logger.info("Found %d record-setters", count)
    return 0


def cmd_k_primes(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    intermediate, results = search_v_record_k_primes(args.k, args.v_record)
    output.info(f"Max z(n) = {intermediate.z_max}")
    output.info(f"Max log(tau(n)) = {intermediate.log_tau_max}, tau(n) = {intermediate.tau_max}")

    new_records: List[str] = []
    checked = 0
    for res in results:
        line = (f"primorials={list(res.primorials)}\tprimes = {list(res.primes)}\ttau = {res.tau}"
                f"\tn = {res.n}\tz = {res.z}\tv = {res.v}")
        output.result(line)
        if res.v > args.v_record:
            new_records.append(line)
        checked += 1

    output.info(f"Checked {checked} candidates; {len(new_records)} new records found.")
    for line in new_records:
        output.result(f"New record! {line}")
    return 0


def cmd_max_v(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    for result in max_v_by_bootstrapping():
        output.result(str(result.v))
    return 0


def cmd_single(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    prime_exps = factor(args.n)
    if prime_exps is None:
        output.error("Not a waterfall number", log=False)
        return 1
    z_value, tau, v_value = evaluate(args.n, prime_exps)
    output.evaluation(z_value, tau, v_value)
    return 0


def cmd_factor(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    prime_exps = factor(args.n)
    if prime_exps is None:
        output.error("Not a waterfall number, cannot factor", log=False)
        return 1
    output.factor_report(prime_exps, prime_to_primorial_exponents(prime_exps))
    return 0


def cmd_latex(args: argparse.Namespace, config: AppConfig, output: UserOutput) -> int:
    try:
        lines = [RecordSetterLine.model_validate(raw) for raw in read_json_lines(Path(args.records_file))]
    except (OSError, ValueError) as e:
        # ValidationError is a ValueError
        output.error(f"Could not read records from {args.records_file}: {e}")
        return 1
    output.latex_table(lines)
    return 0


COMMANDS: Dict[str, Callable[[argparse.Namespace, AppConfig, UserOutput], int]] = {
    'waterfall': cmd_waterfall,
    'records': cmd_records,
    'k-primes': cmd_k_primes,
    'max-v': cmd_max_v,
    'single': cmd_single,
    'factor': cmd_factor,
    'latex': cmd_latex,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)
    output = UserOutput(quiet=args.quiet)

    errors = validate_args(args)
    if errors:
        for field, message in errors.items():
            output.error(f"{field}: {message}", log=False)
        return 2

    try:
        config = TypedConfigLoader().load(args.config, required=args.config != parser.get_default('config'))
    except (OSError, ValueError, yaml.YAMLError) as e:
        output.error(f"Failed to load configuration: {e}", log=False)
        return 2

    if args.verbose:
        config.logging.level = "DEBUG"
    setup_logging(config.logging, to_file=not args.no_log_file)
    set_prime_table(PrimeTable(config.primes.max_primes))

    try:
        return COMMANDS[args.command](args, config, output)
    except ZarembaError as e:
        output.error(str(e))
        return 1
    except KeyboardInterrupt:
        output.error("Interrupted", log=False)
        return 130


if __name__ == '__main__':
    sys.exit(main())
