import unittest

from command_parser import CommandParser
from commands import Direction, Move
from levels import get_level, parse_level
from simulation_engine import (
    AcknowledgementPendingError,
    EventKind,
    SimulationBusyError,
    SimulationEngine,
    SimulationError,
    run,
    simulate,
)
from simulation_state import Outcome


def moves(text):
    return CommandParser().expand(text)


def kinds(events):
    return [event.kind for event in events]


class SimulationEngineProtocolTest(unittest.TestCase):
    def setUp(self):
        self.level = get_level("first-steps")
        self.engine = SimulationEngine(self.level)

    def test_step_requires_a_run(self):
        with self.assertRaises(SimulationError):
            self.engine.step()

    def test_acknowledge_requires_an_event(self):
        self.engine.start([Move(Direction.RIGHT, 1)])
        with self.assertRaises(SimulationError):
            self.engine.acknowledge()

    def test_each_event_must_be_acknowledged(self):
        self.engine.start([Move(Direction.RIGHT, 1)])
        event = self.engine.step()
        self.assertIs(event.kind, EventKind.MOVED)
        self.assertEqual(event.position, (1, 4))
        with self.assertRaises(AcknowledgementPendingError):
            self.engine.step()
        self.engine.acknowledge()

        event = self.engine.step()
        self.assertIs(event.kind, EventKind.EXHAUSTED)
        self.assertTrue(event.final)
        self.assertTrue(self.engine.in_flight)
        self.engine.acknowledge()
        self.assertFalse(self.engine.in_flight)

    def test_second_run_is_rejected_while_in_flight(self):
        self.engine.start([Move(Direction.RIGHT, 1)])
        with self.assertRaises(SimulationBusyError):
            self.engine.start([Move(Direction.UP, 1)])
        self.engine.abort()
        state = self.engine.start([Move(Direction.UP, 1)])
        self.assertEqual(state.position, self.level.start)

    def test_cell_is_evaluated_on_acknowledge(self):
        self.engine.start(moves("S1,D1"))
        self.engine.step()
        self.engine.acknowledge()
        event = self.engine.step()
        self.assertEqual(event.position, (1, 3))
        self.assertIs(self.engine.state.outcome, Outcome.RUNNING)
        self.engine.acknowledge()
        self.assertIs(self.engine.state.outcome, Outcome.FELL_VOID)

        event = self.engine.step()
        self.assertIs(event.kind, EventKind.FAILED)
        self.assertEqual(event.failure, "void")


class SimulationOutcomeTest(unittest.TestCase):
    def setUp(self):
        self.level = get_level("first-steps")

    def test_victory_after_energy(self):
        events = list(run(self.level, moves("D3,S3,D1")))
        self.assertEqual(kinds(events), [EventKind.MOVED] * 6 + [EventKind.COLLECTED_ENERGY, EventKind.MOVED, EventKind.VICTORY])
        self.assertEqual(events[6].position, (3, 1))
        self.assertEqual(events[6].energy_collected, 1)

        state = simulate(self.level, moves("D3,S3,D1"))
        self.assertIs(state.outcome, Outcome.VICTORY)
        self.assertEqual(state.position, (4, 1))
        self.assertTrue(state.energized)
        self.assertEqual(state.steps_taken, 7)

    def test_out_of_bounds_does_not_move(self):
        events = list(run(self.level, moves("I1")))
        self.assertEqual(kinds(events), [EventKind.FAILED])
        self.assertEqual(events[0].failure, "out_of_bounds")
        self.assertEqual(events[0].position, (0, 4))
        state = simulate(self.level, moves("D1,B1"))
        self.assertIs(state.outcome, Outcome.OUT_OF_BOUNDS)
        self.assertEqual(state.position, (1, 4))
        self.assertEqual(state.steps_taken, 1)

    def test_door_without_energy_is_locked(self):
        events = list(run(self.level, moves("D4,S3")))
        self.assertIs(events[-1].kind, EventKind.DOOR_LOCKED)
        self.assertIs(events[-1].outcome, Outcome.NEEDS_ENERGY)
        self.assertEqual(events[-1].position, (4, 1))

    def test_door_on_a_grid_without_energy_stays_locked(self):
        level = parse_level(["@.D"])
        state = simulate(level, [Move(Direction.RIGHT, 2)])
        self.assertIs(state.outcome, Outcome.NEEDS_ENERGY)
        self.assertEqual(state.position, (2, 0))
        self.assertFalse(state.energized)

    def test_run_stops_at_first_hazard(self):
        state = simulate(self.level, moves("S1,D1,D3"))
        self.assertIs(state.outcome, Outcome.FELL_VOID)
        self.assertEqual(state.position, (1, 3))
        self.assertEqual(state.steps_taken, 2)

    def test_commands_can_run_out(self):
        state = simulate(self.level, moves("D2"))
        self.assertIs(state.outcome, Outcome.RUNNING)
        self.assertEqual(state.position, (2, 4))

    def test_failure_is_reported_at_the_intermediate_cell(self):
        level = parse_level(["@.V", "...", "..D"])
        state = simulate(level, [Move(Direction.RIGHT, 3)])
        self.assertIs(state.outcome, Outcome.FELL_VOID)
        self.assertEqual(state.position, (2, 0))

    def test_snake(self):
        state = simulate(get_level("snake-pit"), moves("S1,D1"))
        self.assertIs(state.outcome, Outcome.BITTEN_SNAKE)
        self.assertEqual(state.position, (1, 5))

    def test_energy_cells_count_every_visit(self):
        state = simulate(get_level("stairs"), moves("(D4,S2,B2,I4)x2,S10,D10"))
        self.assertIs(state.outcome, Outcome.VICTORY)
        self.assertEqual(state.energy_collected, 2)

    def test_closing_the_generator_aborts_the_run(self):
        engine = SimulationEngine(self.level)
        events = run(self.level, moves("D3"), engine)
        next(events)
        self.assertTrue(engine.in_flight)
        events.close()
        self.assertFalse(engine.in_flight)


if __name__ == "__main__":
    unittest.main()
