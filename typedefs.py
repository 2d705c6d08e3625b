from typing import Tuple

Coord = Tuple[int, int]
