"""
tty-relay: switch a USB serial power relay from the shell.

Usage:
    tty-relay on
    tty-relay --tty /dev/ttyUSB1 off
    tty-relay timed_start 30          # off now, on again after 30 s
    tty-relay timed_stop 600          # on now, off again after 10 min
    tty-relay --generate bash > /etc/bash_completion.d/tty-relay

Exit status is 0 on success, 1 when the relay could not be driven and 2 on
usage errors.
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from pathlib import Path

from . import __version__
from .config import RelayConfig, load_config, parse_polarity
from .controller import TTYRelay
from .exceptions import (
    DeviceNotFoundError,
    OpenFailedError,
    RelayError,
    ValidationError,
    WriteFailedError,
)

logger = logging.getLogger(__name__)

PROG = "tty-relay"
LOG_ENV = "TTY_RELAY_LOG"

COMMANDS = {
    "on": "enable power",
    "off": "disable power",
    "toggle": "toggle power",
    "jog": "quick toggle power",
    "timed_start": "start after n seconds",
    "timed_stop": "stop after n seconds",
}
TIMED_COMMANDS = ("timed_start", "timed_stop")
SHELLS = ("bash", "zsh", "fish")
POLARITIES = ("no", "nc")

_ERROR_LABELS = {
    DeviceNotFoundError: "Device not found",
    OpenFailedError: "Cannot open device",
    WriteFailedError: "Write failed",
    ValidationError: "Invalid argument",
}

_INT_RE = re.compile(r"[+-]?[0-9]+")

# ---------------------------------------------------------------------------
# Terminal helpers
# ---------------------------------------------------------------------------


class C:
    """ANSI color codes (no-op on non-TTY)."""

    if sys.stderr.isatty():
        RED = "\033[31m"
        RESET = "\033[0m"
    else:
        RED = RESET = ""


def fail(text: str) -> None:
    print(f"{C.RED}✗{C.RESET} {text}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------


def existing_path(value: str) -> str:
    if not Path(value).exists():
        raise argparse.ArgumentTypeError(f"Invalid path: {value}")
    return value


def int32(value: str) -> int:
    """Parse a signed 32-bit decimal literal."""
    if not _INT_RE.fullmatch(value):
        raise argparse.ArgumentTypeError(f"invalid digit found in {value!r}")
    number = int(value)
    if not (-(2**31) <= number < 2**31):
        raise argparse.ArgumentTypeError(f"number too large to fit in 32 bits: {value}")
    return number


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def log_level(verbosity: int = 0) -> int:
    """Return the level named by ``$TTY_RELAY_LOG``, lowered by the ``-v`` count."""
    level = logging.WARNING
    env_level = os.environ.get(LOG_ENV)
    if env_level:
        named = logging.getLevelName(env_level.strip().upper())
        if isinstance(named, int):
            level = named
    if verbosity >= 2:
        level = min(level, logging.DEBUG)
    elif verbosity == 1:
        level = min(level, logging.INFO)
    return level


def configure_logging(verbosity: int = 0) -> None:
    logging.basicConfig(
        level=log_level(verbosity),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Shell completion
# ---------------------------------------------------------------------------

_OPTIONS = (
    "--tty",
    "-t",
    "--config",
    "--polarity",
    "--generate",
    "--verbose",
    "-v",
    "--version",
    "--help",
    "-h",
)

_BASH_TEMPLATE = """\
_@FUNC@() {
    local cur prev
    cur="${COMP_WORDS[COMP_CWORD]}"
    prev="${COMP_WORDS[COMP_CWORD-1]}"
    case "$prev" in
        --tty|-t|--config)
            COMPREPLY=($(compgen -f -- "$cur"))
            return 0
            ;;
        --polarity)
            COMPREPLY=($(compgen -W "@POLARITIES@" -- "$cur"))
            return 0
            ;;
        --generate)
            COMPREPLY=($(compgen -W "@SHELLS@" -- "$cur"))
            return 0
            ;;
        @TIMED@)
            return 0
            ;;
    esac
    COMPREPLY=($(compgen -W "@COMMANDS@ @OPTIONS@" -- "$cur"))
}
complete -F _@FUNC@ @PROG@
"""


def _bash_completion() -> str:
    return (
        _BASH_TEMPLATE.replace("@FUNC@", PROG.replace("-", "_"))
        .replace("@PROG@", PROG)
        .replace("@POLARITIES@", " ".join(POLARITIES))
        .replace("@SHELLS@", " ".join(SHELLS))
        .replace("@TIMED@", "|".join(TIMED_COMMANDS))
        .replace("@COMMANDS@", " ".join(COMMANDS))
        .replace("@OPTIONS@", " ".join(_OPTIONS))
    )


def _zsh_completion() -> str:
    commands = "\n".join(f"        '{name}:{about}'" for name, about in COMMANDS.items())
    return (
        f"#compdef {PROG}\n"
        "\n"
        "local -a commands\n"
        "commands=(\n"
        f"{commands}\n"
        ")\n"
        "\n"
        "_arguments \\\n"
        "    '(-t --tty)'{-t,--tty}'[manually select tty port]:tty port:_files' \\\n"
        "    '--config[YAML config file]:config file:_files' \\\n"
        f"    '--polarity[enable-byte polarity]:polarity:({' '.join(POLARITIES)})' \\\n"
        f"    '--generate[print a completion script]:shell:({' '.join(SHELLS)})' \\\n"
        "    '*'{-v,--verbose}'[more log output]' \\\n"
        "    '--version[show version]' \\\n"
        "    '1:command:->command' \\\n"
        "    '2:seconds:'\n"
        "\n"
        "case $state in\n"
        "    command) _describe 'command' commands ;;\n"
        "esac\n"
    )


def _fish_completion() -> str:
    lines = [f"complete -c {PROG} -f"]
    for name, about in COMMANDS.items():
        lines.append(
            f"complete -c {PROG} -n '__fish_use_subcommand' -a {name} -d '{about}'"
        )
    lines += [
        f"complete -c {PROG} -s t -l tty -r -F -d 'manually select tty port'",
        f"complete -c {PROG} -l config -r -F -d 'YAML config file'",
        f"complete -c {PROG} -l polarity -x -a '{' '.join(POLARITIES)}' -d 'enable-byte polarity'",
        f"complete -c {PROG} -l generate -x -a '{' '.join(SHELLS)}' -d 'print a completion script'",
        f"complete -c {PROG} -s v -l verbose -d 'more log output'",
        f"complete -c {PROG} -l version -d 'show version'",
    ]
    return "\n".join(lines) + "\n"


_GENERATORS = {
    "bash": _bash_completion,
    "zsh": _zsh_completion,
    "fish": _fish_completion,
}


def generate_completion(shell: str) -> str:
    """Return the completion script for *shell*."""
    try:
        return _GENERATORS[shell]()
    except KeyError:
        raise ValueError(f"Unknown shell: {shell}") from None


# ---------------------------------------------------------------------------
# Parser & dispatch
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description="tty power management")
    parser.add_argument(
        "-t",
        "--tty",
        type=existing_path,
        metavar="PATH",
        help="manually select tty port (skips USB discovery)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file with tty, polarity, vendor_id and product_id",
    )
    parser.add_argument(
        "--polarity",
        choices=POLARITIES,
        help="enable-byte polarity: no (normally open, default) or nc (normally closed)",
    )
    parser.add_argument(
        "--generate",
        choices=SHELLS,
        metavar="SHELL",
        help=f"print a completion script for {', '.join(SHELLS)} and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log more (-v info, -vv debug); $%s also sets the level" % LOG_ENV,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name, about in COMMANDS.items():
        cmd = sub.add_parser(name, help=about, description=about)
        if name in TIMED_COMMANDS:
            cmd.add_argument("seconds", type=int32, help="delay in seconds (0-65535)")
    return parser


def run_command(relay: TTYRelay, command: str, seconds: int | None = None) -> None:
    """Invoke the relay operation that *command* names."""
    if command == "on":
        relay.on()
    elif command == "off":
        relay.off()
    elif command == "toggle":
        relay.toggle()
    elif command == "jog":
        relay.jog()
    elif command == "timed_start":
        relay.timed_on(seconds)
    elif command == "timed_stop":
        relay.timed_off(seconds)
    else:
        raise ValueError(f"Unknown command: {command}")


def resolve_settings(args: argparse.Namespace) -> RelayConfig:
    """Merge the config file (if any) with command-line overrides."""
    config = load_config(args.config) if args.config else RelayConfig()
    return RelayConfig(
        tty=args.tty or config.tty,
        polarity=parse_polarity(args.polarity) if args.polarity else config.polarity,
        vendor_id=config.vendor_id,
        product_id=config.product_id,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.generate:
        print(f"Generating completion file for {args.generate}...", file=sys.stderr)
        sys.stdout.write(generate_completion(args.generate))
        return 0

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    try:
        settings = resolve_settings(args)
    except (FileNotFoundError, ValidationError) as exc:
        fail(f"Config error: {exc}")
        return 1

    try:
        with TTYRelay.open(
            settings.tty,
            polarity=settings.polarity,
            vendor_id=settings.vendor_id,
            product_id=settings.product_id,
        ) as relay:
            run_command(relay, args.command, getattr(args, "seconds", None))
    except RelayError as exc:
        label = _ERROR_LABELS.get(type(exc), "Relay error")
        fail(f"{label}: {exc}")
        logger.debug("%s failed", args.command, exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
