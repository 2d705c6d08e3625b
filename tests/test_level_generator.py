import random
import unittest

from levels import CellType
from level_generator import LevelGenerator, simple_path, time_limit_for


def generate(level_number, seed=1, size=15):
    return LevelGenerator(size, random.Random(seed)).generate(level_number)


def cells_of(level, cell_type):
    return [(cell.x, cell.y) for cell in level.cells() if cell.type is cell_type]


class LevelGeneratorTest(unittest.TestCase):
    def test_same_seed_same_level(self):
        self.assertEqual(generate(12, seed=5).grid, generate(12, seed=5).grid)

    def test_corners(self):
        level = generate(4)
        self.assertEqual(level.start, (0, 14))
        self.assertEqual(level.door, (14, 0))
        self.assertEqual(cells_of(level, CellType.DOOR), [(14, 0)])
        self.assertIs(level.cell_at(level.start).type, CellType.SAFE)

    def test_energy_count_and_placement(self):
        for number, expected in ((1, 1), (2, 2), (3, 3), (18, 3)):
            with self.subTest(level=number):
                level = generate(number)
                self.assertEqual(len(level.energy_positions), expected)
                self.assertEqual(sorted(cells_of(level, CellType.ENERGY)), sorted(level.energy_positions))
                for x, y in level.energy_positions:
                    self.assertTrue(0 < x < 14 and 0 < y < 14)

    def test_obstacles(self):
        for seed in range(5):
            level = generate(8, seed=seed)
            voids = cells_of(level, CellType.VOID)
            snakes = cells_of(level, CellType.SNAKE)
            self.assertLessEqual(len(voids), 12)
            self.assertLessEqual(len(snakes), 8)
            self.assertLessEqual(len(voids) + len(snakes), 20)
            self.assertNotIn(level.start, voids + snakes)

    def test_level_rules(self):
        early = generate(3)
        self.assertTrue(early.has_guide_lines)
        self.assertTrue(any(cell.is_path for cell in early.cells()))
        self.assertFalse(early.allows_loops)
        self.assertIsNone(early.time_limit)

        late = generate(14)
        self.assertFalse(late.has_guide_lines)
        self.assertFalse(any(cell.is_path for cell in late.cells()))
        self.assertTrue(late.allows_loops)
        self.assertEqual(late.time_limit, 40)
        self.assertEqual(late.required_energy, 3)

    def test_small_grid(self):
        level = generate(5, size=3)
        self.assertEqual(level.energy_positions, [(1, 1)])
        with self.assertRaises(ValueError):
            LevelGenerator(size=2)


class HelpersTest(unittest.TestCase):
    def test_time_limits(self):
        self.assertIsNone(time_limit_for(9))
        self.assertEqual(time_limit_for(10), 60)
        self.assertEqual(time_limit_for(20), 10)
        self.assertEqual(time_limit_for(22), 10)
        self.assertEqual(time_limit_for(40), 10)

    def test_simple_path_goes_across_then_up(self):
        self.assertEqual(simple_path((0, 2), (2, 0)), [(1, 2), (2, 2), (2, 1), (2, 0)])
        self.assertEqual(simple_path((1, 1), (1, 1)), [])


if __name__ == "__main__":
    unittest.main()
