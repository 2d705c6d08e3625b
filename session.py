import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from command_expander import count_unit_steps, expand
from command_parser import CommandParser, ParserOptions
from levels import GridLevel
from progress import ProgressRecord
from simulation_engine import SimulationEngine, StepEvent
from simulation_state import Outcome, RunState
from typedefs import Coord

logger = logging.getLogger(__name__)

OUTCOME_MESSAGES = {
    Outcome.OUT_OF_BOUNDS: "¡Rebasaste los límites del mapa!",
    Outcome.FELL_VOID: "¡Caíste al vacío! Intenta de nuevo.",
    Outcome.BITTEN_SNAKE: "¡Te mordió una serpiente! Intenta de nuevo.",
    Outcome.NEEDS_ENERGY: "¡Necesitas energía para pasar por la puerta!",
    Outcome.VICTORY: "¡Nivel completado!",
    Outcome.RUNNING: "Los comandos terminaron antes de llegar al portal. Sigue intentando.",
}
TIMEOUT_MESSAGE = "Tiempo límite sobrepasado. ¡Vuelve a intentarlo!"
COMPLETED_MESSAGE = "Este nivel ya fue completado."


@dataclass
class SessionResult:
    valid: bool
    message: str
    outcome: Optional[Outcome] = None
    events: List[StepEvent] = field(default_factory=list)
    commands_used: int = 0
    state: Optional[RunState] = None
    record: Optional[ProgressRecord] = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.VICTORY


class GameSession:
    """One player's attempts at one level.

    ``renderer`` is any object with a blocking ``play(event)``; ``recorder``
    any object with ``record(progress_record)``. ``clock`` returns the seconds
    elapsed since the level was loaded and is how time limits are enforced
    while a run is animating.
    """

    def __init__(
        self,
        level: GridLevel,
        recorder=None,
        renderer=None,
        clock: Optional[Callable[[], float]] = None,
        require_comma: bool = True,
    ):
        self.level = level
        self.recorder = recorder
        self.renderer = renderer
        self.clock = clock
        self.parser = CommandParser(ParserOptions.for_level(level, require_comma))
        self.engine = SimulationEngine(level)
        self.position: Coord = level.start
        self.timed_out = False
        self.completed = False
        self.last_state: Optional[RunState] = None
        self.last_commands_used = 0

    def _elapsed(self, elapsed: Optional[float]) -> float:
        if elapsed is not None:
            return elapsed
        return self.clock() if self.clock is not None else 0.0

    def check_time(self, elapsed: float) -> bool:
        limit = self.level.time_limit
        if self.timed_out:
            return True
        if limit is None or elapsed < limit:
            return False
        logger.info("Time limit of %ss reached on level %d", limit, self.level.level)
        self.engine.abort()
        self.timed_out = True
        self.position = self.level.start
        return True

    def submit(self, text: str, elapsed: Optional[float] = None) -> SessionResult:
        if self.completed:
            return SessionResult(False, COMPLETED_MESSAGE)
        if self.check_time(self._elapsed(elapsed)):
            return SessionResult(False, TIMEOUT_MESSAGE)

        validation = self.parser.validate(text)
        if not validation.valid:
            logger.info("Rejected commands %r: %s", text, validation.error)
            return SessionResult(False, validation.error)

        program = self.parser.parse(text)
        commands_used = len(program)
        self.last_commands_used = commands_used
        moves = expand(program)
        logger.debug("Running %d commands, %d unit steps", commands_used, count_unit_steps(moves))
        events: List[StepEvent] = []
        state = self.engine.start(moves)
        self.last_state = state

        try:
            while self.engine.in_flight:
                event = self.engine.step()
                events.append(event)
                if self.renderer is not None:
                    self.renderer.play(event)
                if self.clock is not None and self.check_time(self.clock()):
                    return SessionResult(False, TIMEOUT_MESSAGE, state.outcome, events, commands_used, state)
                self.engine.acknowledge()
        finally:
            if self.engine.in_flight:
                logger.warning("Run on level %d interrupted at %s", self.level.level, state.position)
                self.engine.abort()
                self.position = self.level.start

        result = SessionResult(True, OUTCOME_MESSAGES[state.outcome], state.outcome, events, commands_used, state)
        if state.outcome is Outcome.VICTORY:
            self.completed = True
            self.position = state.position
            result.record = self._record(True, commands_used, self._elapsed(elapsed), state.energized)
        elif state.outcome.hazard:
            self.position = self.level.start
        else:
            self.position = state.position
        return result

    def exit(self, elapsed: Optional[float] = None) -> Optional[ProgressRecord]:
        energized = self.last_state.energized if self.last_state is not None else False
        self.engine.abort()
        return self._record(False, self.last_commands_used, self._elapsed(elapsed), energized)

    def restart(self) -> None:
        self.engine.abort()
        self.position = self.level.start
        self.timed_out = False
        self.completed = False
        self.last_state = None
        self.last_commands_used = 0

    def _record(self, success: bool, commands_used: int, elapsed: float, energized: bool) -> Optional[ProgressRecord]:
        if self.recorder is None:
            return None
        record = ProgressRecord(
            level=self.level.level,
            commands_used=commands_used,
            time_taken=int(elapsed),
            energized=energized,
            success=success,
        )
        self.recorder.record(record)
        return record

