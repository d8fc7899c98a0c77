#!/usr/bin/env python3
"""
intcode - Intcode VM command line
=================================

    intcode run      - Run a program with queued or interactive input
    intcode disasm   - Disassemble a program image
    intcode chain    - Run a chain of instances (serial or feedback loop)

Usage:
    python intcode.py <command> [options]
    python intcode.py <command> --help

Examples:
    python intcode.py run input.txt -i 1
    python intcode.py run input.txt --set 1=12 --set 2=2 --dump-memory
    python intcode.py run input.txt --interactive
    python intcode.py disasm input.txt --start 0 --end 40
    python intcode.py chain input.txt --phases 5,6,7,8,9 --feedback --search
    python intcode.py -v run input.txt --trace
"""

import argparse
import logging
import sys
from pathlib import Path

from intcode_vm import IntcodeError, ProgramState, State, __version__
from intcode_vm.chain import best_phase_setting, run_feedback_loop, run_serial
from intcode_vm.disassembler import disassemble, format_listing
from intcode_vm.loader import format_program, load_program_file


log = logging.getLogger('intcode')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcode",
        description="Intcode VM - run, disassemble and chain Intcode programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"intcode {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress all log output except errors")
    parser.add_argument("--log-file", type=str, help="Write log to file")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a program")
    p_run.add_argument("program", help="Comma-separated program source file")
    p_run.add_argument("-i", "--input", type=int, action="append", default=[],
                       help="Queue an input value (repeatable)")
    p_run.add_argument("--set", action="append", default=[], metavar="ADDR=VALUE",
                       help="Patch a memory cell before running (repeatable)")
    p_run.add_argument("--interactive", action="store_true",
                       help="Prompt on stdin whenever the program needs input")
    p_run.add_argument("--dump-memory", action="store_true",
                       help="Print the final memory image")
    p_run.add_argument("--trace", action="store_true",
                       help="Print an instruction trace after the run")

    # ── disasm ───────────────────────────────────────────────────────────
    p_dis = sub.add_parser("disasm", help="Disassemble a program")
    p_dis.add_argument("program", help="Comma-separated program source file")
    p_dis.add_argument("--start", type=int, default=0, help="First address")
    p_dis.add_argument("--end", type=int, default=None,
                       help="End address, exclusive (default: end of program)")

    # ── chain ────────────────────────────────────────────────────────────
    p_chain = sub.add_parser("chain", help="Run a chain of program instances")
    p_chain.add_argument("program", help="Comma-separated program source file")
    p_chain.add_argument("--phases", required=True,
                         help="Comma-separated phase settings, e.g. 0,1,2,3,4")
    p_chain.add_argument("--signal", type=int, default=0, help="Initial signal")
    p_chain.add_argument("--feedback", action="store_true",
                         help="Wire the last instance back to the first")
    p_chain.add_argument("--search", action="store_true",
                         help="Try every ordering of the phases, report the best")

    return parser


def setup_logging(args):
    """Configure logging from -v / -q / --log-file."""
    if args.quiet:
        level = logging.ERROR
    elif args.verbose == 0:
        level = logging.WARNING
    elif args.verbose == 1:
        level = logging.INFO
    else:  # -vv or more
        level = logging.DEBUG

    handlers = []
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers.append(console)

    if args.log_file:
        log_path = Path(args.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)
        level = logging.DEBUG

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _parse_assignment(text: str):
    """Parse ADDR=VALUE into a pair of ints."""
    addr, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"expected ADDR=VALUE, got {text!r}")
    return int(addr), int(value)


def _parse_phases(text: str):
    return [int(part) for part in text.split(",") if part.strip()]


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

def cmd_run(args):
    vm = ProgramState(load_program_file(args.program), args.input)
    length = len(vm.memory)
    for assignment in args.set:
        addr, value = _parse_assignment(assignment)
        vm.write(addr, value)
    if args.trace:
        vm.enable_trace()

    if args.interactive:
        while vm.run_to_next_input() is State.AWAITING_INPUT:
            for value in vm.drain_output():
                print(value)
            line = input("? ")
            vm.push_input(int(line.strip()))
        for value in vm.drain_output():
            print(value)
    else:
        vm.run_to_completion()
        print(",".join(str(value) for value in vm.outputs))

    if args.trace:
        print(vm.get_trace())
    if args.dump_memory:
        print(format_program(vm.memory.to_list(max(length, len(vm.memory)))))
    log.info("%d steps executed", vm.steps)
    return 0


def cmd_disasm(args):
    vm = ProgramState(load_program_file(args.program))
    print(format_listing(disassemble(vm.memory, args.start, args.end)))
    return 0


def cmd_chain(args):
    program = ProgramState(load_program_file(args.program))
    phases = _parse_phases(args.phases)

    if args.search:
        signal, ordering = best_phase_setting(program, phases, feedback=args.feedback)
        print(f"{signal} {','.join(str(p) for p in ordering)}")
    elif args.feedback:
        print(run_feedback_loop(program, phases, args.signal))
    else:
        print(run_serial(program, phases, args.signal))
    return 0


COMMANDS = {
    "run": cmd_run,
    "disasm": cmd_disasm,
    "chain": cmd_chain,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args)
    try:
        return COMMANDS[args.command](args)
    except IntcodeError as e:
        log.error("%s", e)
        return 1
    except (ValueError, EOFError) as e:
        log.error("bad input: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
