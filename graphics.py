import pygame

from game_constants import FPS, STEP_MS
from levels import CellType, GridLevel
from simulation_engine import EventKind, StepEvent

TILE = 32

CELL_COLORS = {
    CellType.SAFE: (34, 197, 94),
    CellType.ENERGY: (251, 191, 36),
    CellType.VOID: (0, 0, 0),
    CellType.SNAKE: (220, 38, 38),
    CellType.DOOR: (37, 99, 235),
}
PLAYER_COLOR = (240, 240, 240)
ENERGIZED_COLOR = (253, 224, 71)
GUIDE_DOT = (255, 255, 255)
FLASH_COLORS = {
    EventKind.COLLECTED_ENERGY: (253, 224, 71),
    EventKind.FAILED: (127, 29, 29),
    EventKind.DOOR_LOCKED: (30, 58, 138),
    EventKind.VICTORY: (147, 197, 253),
}
FLASH_MS = 400

_CELL_SURFACE_CACHE = {}
_PLAYER_SURFACE_CACHE = {}


def _make_surface(color):
    surface = pygame.Surface((TILE, TILE), pygame.SRCALPHA)
    surface.fill(color)
    return surface


def _darken(color, factor=0.6):
    r, g, b = color
    return (int(r * factor), int(g * factor), int(b * factor))


def get_cell_surface(cell_type, is_path=False):
    key = (cell_type, is_path)
    if key not in _CELL_SURFACE_CACHE:
        color = CELL_COLORS[cell_type]
        surface = _make_surface(color)
        pygame.draw.rect(surface, _darken(color), surface.get_rect(), 1)
        if is_path:
            pygame.draw.circle(surface, GUIDE_DOT, (TILE // 2, TILE // 2), TILE // 8)
        _CELL_SURFACE_CACHE[key] = surface
    return _CELL_SURFACE_CACHE[key]


def get_player_surface(energized=False):
    if energized not in _PLAYER_SURFACE_CACHE:
        surface = pygame.Surface((TILE, TILE), pygame.SRCALPHA)
        color = ENERGIZED_COLOR if energized else PLAYER_COLOR
        pygame.draw.circle(surface, color, (TILE // 2, TILE // 2), TILE // 3)
        pygame.draw.circle(surface, _darken(color, 0.4), (TILE // 2, TILE // 2), TILE // 3, 2)
        _PLAYER_SURFACE_CACHE[energized] = surface
    return _PLAYER_SURFACE_CACHE[energized]


class TileSprite(pygame.sprite.Sprite):
    def __init__(self, x, y, image):
        super().__init__()
        self.grid_pos = (x, y)
        self.image = image
        self.rect = self.image.get_rect()
        self.rect.topleft = (x * TILE, y * TILE)


class CellSprite(TileSprite):
    def __init__(self, cell, show_path=True):
        super().__init__(cell.x, cell.y, get_cell_surface(cell.type, cell.is_path and show_path))


class PlayerSprite(TileSprite):
    def __init__(self, x, y):
        super().__init__(x, y, get_player_surface())
        self.energized = False

    def set_energized(self, energized):
        if energized != self.energized:
            self.energized = energized
            self.image = get_player_surface(energized)

    def place(self, x, y):
        self.grid_pos = (x, y)
        self.rect.topleft = (x * TILE, y * TILE)

    def place_between(self, start, end, t):
        sx, sy = start
        ex, ey = end
        self.rect.topleft = (round((sx + (ex - sx) * t) * TILE), round((sy + (ey - sy) * t) * TILE))


def build_static_sprites(level: GridLevel, show_path=True):
    static_sprites = pygame.sprite.Group()
    for cell in level.cells():
        static_sprites.add(CellSprite(cell, show_path))
    return static_sprites


class PygameRenderer:
    """Renderer sink that animates each step event and returns when it is done."""

    def __init__(self, surface, level: GridLevel, step_ms: int = STEP_MS, redraw=None):
        self.surface = surface
        self.level = level
        self.step_ms = step_ms
        self.redraw = redraw
        self.clock = pygame.time.Clock()
        self.static_sprites = build_static_sprites(level, level.has_guide_lines)
        self.player = PlayerSprite(*level.start)
        self.player_group = pygame.sprite.GroupSingle(self.player)
        self.flash = None

    def reset(self, position=None):
        x, y = position if position is not None else self.level.start
        self.player.place(x, y)
        self.player.set_energized(False)
        self.flash = None

    def draw(self):
        self.static_sprites.draw(self.surface)
        if self.flash is not None:
            (fx, fy), color = self.flash
            pygame.draw.rect(self.surface, color, (fx * TILE, fy * TILE, TILE, TILE), 4)
        self.player_group.draw(self.surface)

    def _frame(self):
        # keep the window responsive while an animation blocks the caller
        pygame.event.pump()
        if self.redraw is not None:
            self.redraw()
        else:
            self.draw()
            pygame.display.flip()
        self.clock.tick(FPS)

    def play(self, event: StepEvent) -> None:
        if event.kind is EventKind.MOVED:
            start = self.player.grid_pos
            elapsed = 0
            while elapsed < self.step_ms:
                self.player.place_between(start, event.position, elapsed / float(self.step_ms))
                self._frame()
                elapsed += self.clock.get_time()
            self.player.place(*event.position)
            self._frame()
            return

        if event.kind is EventKind.COLLECTED_ENERGY:
            self.player.set_energized(True)
        color = FLASH_COLORS.get(event.kind)
        if color is None:
            return
        self.flash = (event.position, color)
        elapsed = 0
        while elapsed < FLASH_MS:
            self._frame()
            elapsed += self.clock.get_time()
        self.flash = None
        self._frame()
