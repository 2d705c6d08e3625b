import argparse
import logging
import sys

from ascii_renderer import PrintingPlayback, render_ascii
from command_parser import CommandParser
from dsl import SCRIPT_HELP, run_script
from levels import BUILTIN_LEVELS, LevelError, load_level
from logger_config import configure_logging
from progress import JsonProgressRecorder
from session import GameSession

logger = logging.getLogger(__name__)


def run_headless(level_name, commands=None, seed=None, recorder=None) -> bool:
    level = load_level(level_name, seed)
    print(f"Level {level.level} ({level.name})")
    print(render_ascii(level, show_coords=True))
    if commands is None:
        return True

    session = GameSession(level, recorder=recorder, renderer=PrintingPlayback())
    result = session.submit(commands)
    if not result.valid:
        print(f"rejected: {result.message}")
        return False
    print(f"outcome: {result.outcome.value}")
    print(result.message)
    print(render_ascii(level, result.state.position, show_coords=True))
    return result.success


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Command grid puzzle: move the character with D/I/S/B commands.")
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and print the board and step events as text.",
    )
    parser.add_argument(
        "--level",
        default="first-steps",
        help="Built-in level name ({}) or a level number to generate.".format(", ".join(sorted(BUILTIN_LEVELS))),
    )
    parser.add_argument("--seed", type=int, help="Seed for generated levels.")
    parser.add_argument("--commands", help="Commands to run in headless mode, e.g. 'D3,S3,D1'.")
    parser.add_argument(
        "--script",
        help=f"Headless script: commands separated by newlines/semicolons: {SCRIPT_HELP}",
    )
    parser.add_argument(
        "--script-file",
        help="Path to a script file (ignored if --script is provided).",
    )
    parser.add_argument("--progress-file", help="JSON file that receives level progress records.")
    parser.add_argument("--help-commands", action="store_true", help="Print the command language reference.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--error-log", help="Also write errors to this rotating log file.")
    args = parser.parse_args(argv)

    configure_logging(args.log_level.upper(), args.error_log)

    if args.help_commands:
        print(CommandParser.help_text())
        return 0

    recorder = JsonProgressRecorder(args.progress_file) if args.progress_file else None

    script_text = None
    if args.script:
        script_text = args.script
    elif args.script_file:
        with open(args.script_file, "r", encoding="utf-8") as fh:
            script_text = fh.read()

    try:
        if script_text is not None:
            run_script(script_text, default_level_name=args.level, seed=args.seed, recorder=recorder)
            return 0
        if args.headless:
            return 0 if run_headless(args.level, args.commands, args.seed, recorder) else 1
    except LevelError as exc:
        logger.error("%s", exc)
        print(exc, file=sys.stderr)
        return 2

    from game import run_game

    run_game(args.level, seed=args.seed, recorder=recorder)
    return 0


if __name__ == "__main__":
    sys.exit(main())
