from typing import Callable, Dict, Iterable, List, Optional

from ascii_renderer import PrintingPlayback, render_ascii
from command_parser import CommandParser, ParserOptions
from levels import load_level
from session import GameSession

SCRIPT_HELP = (
    "level NAME|NUMBER | seed N | time SECONDS | validate CMDS | run CMDS | show | "
    "trace on|off | restart | exit | help"
)


def run_script(script_text: str, default_level_name: str = "first-steps", seed: Optional[int] = None, recorder=None) -> None:
    playback = PrintingPlayback()
    level = load_level(default_level_name, seed)
    session = GameSession(level, recorder=recorder, renderer=playback)
    elapsed = 0.0

    def load(name: str) -> None:
        nonlocal level, session, elapsed
        level = load_level(name, seed)
        session = GameSession(level, recorder=recorder, renderer=playback)
        elapsed = 0.0

    def commands_text(args: List[str], usage: str) -> str:
        if not args:
            raise ValueError(usage)
        return " ".join(args)

    def handle_level(args: List[str]) -> None:
        if not args:
            raise ValueError("level <name|number> expected")
        load(args[0])
        print(f"Level {level.level} ({level.name})")

    def handle_seed(args: List[str]) -> None:
        nonlocal seed
        if not args:
            raise ValueError("seed <n> expected")
        seed = int(args[0])

    def handle_time(args: List[str]) -> None:
        nonlocal elapsed
        if not args:
            raise ValueError("time <seconds> expected")
        elapsed = float(args[0])
        if session.check_time(elapsed):
            print(f"timeout: {level.time_limit}s")

    def handle_validate(args: List[str]) -> None:
        text = commands_text(args, "validate <commands> expected")
        result = CommandParser(ParserOptions.for_level(level)).validate(text)
        print("valid" if result.valid else f"invalid: {result.error}")

    def handle_run(args: List[str]) -> None:
        text = commands_text(args, "run <commands> expected")
        result = session.submit(text, elapsed)
        if not result.valid:
            print(f"rejected: {result.message}")
            return
        state = result.state
        print(
            f"outcome: {result.outcome.value} at {state.position} "
            f"energized={state.energized} commands={result.commands_used}"
        )
        print(result.message)

    def handle_show(args: List[str]) -> None:
        print(render_ascii(level, session.position, show_coords=True))

    def handle_trace(args: List[str]) -> None:
        if not args or args[0].lower() not in ("on", "off"):
            raise ValueError("trace on|off expected")
        playback.moves = args[0].lower() == "on"

    def handle_restart(args: List[str]) -> None:
        nonlocal elapsed
        session.restart()
        elapsed = 0.0

    def handle_exit(args: List[str]) -> None:
        record = session.exit(elapsed)
        if record is not None:
            print(f"recorded exit on level {record.level}")

    def handle_help(args: List[str]) -> None:
        print(SCRIPT_HELP)

    def build_handlers() -> Dict[str, Callable[[List[str]], None]]:
        handlers: Dict[str, Callable[[List[str]], None]] = {}

        def register(names: Iterable[str], func: Callable[[List[str]], None]) -> None:
            for name in names:
                handlers[name] = func

        register(("level", "load"), handle_level)
        register(("seed",), handle_seed)
        register(("time", "elapsed"), handle_time)
        register(("validate", "check"), handle_validate)
        register(("run", "play"), handle_run)
        register(("show", "print"), handle_show)
        register(("trace",), handle_trace)
        register(("restart", "reset"), handle_restart)
        register(("exit", "quit"), handle_exit)
        register(("help",), handle_help)
        return handlers

    handlers = build_handlers()

    for raw in script_text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        commands = [cmd.strip() for cmd in line.split(";") if cmd.strip()]
        for cmd in commands:
            parts = cmd.split()
            name = parts[0].lower()
            args = parts[1:]

            handler = handlers.get(name)
            if handler is None:
                raise ValueError(f"Unknown script command '{name}'")
            handler(args)

    print("Script complete")
    print(render_ascii(level, session.position, show_coords=True))
