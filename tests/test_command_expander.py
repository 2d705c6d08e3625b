import unittest

from command_expander import count_unit_steps, expand, final_position
from commands import Direction, LoopBlock, Move

R, L, U, D = Direction.RIGHT, Direction.LEFT, Direction.UP, Direction.DOWN


class ExpandTest(unittest.TestCase):
    def test_moves_pass_through(self):
        program = (Move(R, 2), Move(D, 1))
        self.assertEqual(expand(program), [Move(R, 2), Move(D, 1)])

    def test_loops_repeat_in_order(self):
        program = (Move(U, 1), LoopBlock((Move(R, 1), Move(D, 2)), 3), Move(L, 4))
        self.assertEqual(
            expand(program),
            [Move(U, 1)] + [Move(R, 1), Move(D, 2)] * 3 + [Move(L, 4)],
        )

    def test_empty_program(self):
        self.assertEqual(expand(()), [])

    def test_count_unit_steps(self):
        self.assertEqual(count_unit_steps([Move(R, 3), Move(U, 15)]), 18)


class FinalPositionTest(unittest.TestCase):
    def test_up_decreases_y(self):
        self.assertEqual(final_position((2, 5), [Move(U, 3), Move(R, 1)]), (3, 2))

    def test_ignores_bounds(self):
        self.assertEqual(final_position((0, 0), [Move(L, 3), Move(U, 1)]), (-3, -1))


class MoveTest(unittest.TestCase):
    def test_rejects_non_positive_steps(self):
        with self.assertRaises(ValueError):
            Move(R, 0)

    def test_rejects_unknown_direction(self):
        with self.assertRaises(ValueError):
            Move("Q", 1)

    def test_direction_from_symbol(self):
        self.assertIs(Direction.from_symbol("b"), D)
        with self.assertRaises(ValueError):
            Direction.from_symbol("Q")


if __name__ == "__main__":
    unittest.main()
