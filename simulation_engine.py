import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, Iterator, List, Optional

from commands import Direction, Move
from levels import CellType, GridLevel
from simulation_state import Outcome, RunState
from typedefs import Coord

logger = logging.getLogger(__name__)


class SimulationError(Exception):
    pass


class SimulationBusyError(SimulationError):
    pass


class AcknowledgementPendingError(SimulationError):
    pass


class EventKind(Enum):
    MOVED = "moved"
    COLLECTED_ENERGY = "collected_energy"
    FAILED = "failed"
    DOOR_LOCKED = "door_locked"
    VICTORY = "victory"
    EXHAUSTED = "exhausted"


FINAL_EVENTS = frozenset({EventKind.FAILED, EventKind.DOOR_LOCKED, EventKind.VICTORY, EventKind.EXHAUSTED})
FAILURE_KINDS = {
    Outcome.OUT_OF_BOUNDS: "out_of_bounds",
    Outcome.FELL_VOID: "void",
    Outcome.BITTEN_SNAKE: "snake",
}


@dataclass(frozen=True)
class StepEvent:
    kind: EventKind
    position: Coord
    outcome: Outcome = Outcome.RUNNING
    failure: Optional[str] = None
    energy_collected: int = 0

    @property
    def final(self) -> bool:
        return self.kind in FINAL_EVENTS


def _unit_steps(moves: Iterable[Move]) -> Iterator[Direction]:
    for move in moves:
        for _ in range(move.steps):
            yield move.direction


class SimulationEngine:
    """Replays flattened moves over a level one unit step at a time.

    Every event returned by ``step`` must be acknowledged before the next one
    is requested. Acknowledging a ``MOVED`` event is what evaluates the cell the
    character just entered, so a renderer finishes the walk animation before
    any hazard, energy or door effect is applied.
    """

    def __init__(self, level: GridLevel):
        self.level = level
        self.state: Optional[RunState] = None
        self._steps: Iterator[Direction] = iter(())
        self._queue: Deque[StepEvent] = deque()
        self._pending: Optional[StepEvent] = None
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start(self, moves: Iterable[Move]) -> RunState:
        if self._in_flight:
            raise SimulationBusyError("A run is already in progress on this level")
        self.state = RunState(position=self.level.start)
        self._steps = _unit_steps(list(moves))
        self._queue.clear()
        self._pending = None
        self._in_flight = True
        logger.info("Starting run on level %d from %s", self.level.level, self.level.start)
        return self.state

    def step(self) -> StepEvent:
        if not self._in_flight:
            raise SimulationError("No run in progress")
        if self._pending is not None:
            raise AcknowledgementPendingError(f"Event {self._pending.kind.value} has not been acknowledged")
        if not self._queue:
            self._advance()
        self._pending = self._queue.popleft()
        return self._pending

    def acknowledge(self) -> None:
        event = self._pending
        if event is None:
            raise SimulationError("No event to acknowledge")
        self._pending = None
        if event.kind is EventKind.MOVED:
            self._enter_cell()
        elif event.final:
            self._in_flight = False
            logger.info("Run on level %d ended: %s at %s", self.level.level, event.outcome.value, event.position)

    def abort(self) -> None:
        if self._in_flight:
            logger.info("Run on level %d aborted at %s", self.level.level, self.state.position)
        self._queue.clear()
        self._pending = None
        self._in_flight = False

    def _emit(self, kind: EventKind, failure: Optional[str] = None) -> None:
        state = self.state
        self._queue.append(
            StepEvent(kind, state.position, state.outcome, failure, state.energy_collected)
        )

    def _finish(self, outcome: Outcome, kind: EventKind) -> None:
        self.state.outcome = outcome
        self._emit(kind, FAILURE_KINDS.get(outcome))

    def _advance(self) -> None:
        state = self.state
        direction = next(self._steps, None)
        if direction is None:
            self._emit(EventKind.EXHAUSTED)
            return

        dx, dy = direction.delta
        x, y = state.position[0] + dx, state.position[1] + dy
        if not self.level.in_bounds(x, y):
            self._finish(Outcome.OUT_OF_BOUNDS, EventKind.FAILED)
            return

        state.position = (x, y)
        state.steps_taken += 1
        logger.debug("Step %d: moved %s to %s", state.steps_taken, direction.name, state.position)
        self._emit(EventKind.MOVED)

    def _enter_cell(self) -> None:
        state = self.state
        cell_type = self.level.cell_at(state.position).type
        if cell_type is CellType.VOID:
            self._finish(Outcome.FELL_VOID, EventKind.FAILED)
        elif cell_type is CellType.SNAKE:
            self._finish(Outcome.BITTEN_SNAKE, EventKind.FAILED)
        elif cell_type is CellType.ENERGY:
            state.collect_energy()
            self._emit(EventKind.COLLECTED_ENERGY)
        elif cell_type is CellType.DOOR:
            if state.energized:
                self._finish(Outcome.VICTORY, EventKind.VICTORY)
            else:
                self._finish(Outcome.NEEDS_ENERGY, EventKind.DOOR_LOCKED)


def run(level: GridLevel, moves: Iterable[Move], engine: Optional[SimulationEngine] = None) -> Iterator[StepEvent]:
    """Yield each event of a run; resuming the generator acknowledges it."""
    engine = engine if engine is not None else SimulationEngine(level)
    engine.start(moves)
    try:
        while engine.in_flight:
            event = engine.step()
            yield event
            engine.acknowledge()
    finally:
        if engine.in_flight:
            engine.abort()


def simulate(level: GridLevel, moves: Iterable[Move]) -> RunState:
    engine = SimulationEngine(level)
    events: List[StepEvent] = list(run(level, moves, engine))
    logger.debug("Simulated %d events", len(events))
    return engine.state
