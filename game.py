import logging

import pygame

from command_parser import CommandParser
from game_constants import FPS
from graphics import TILE, PygameRenderer
from levels import LEVEL_ORDER, load_level
from session import TIMEOUT_MESSAGE, GameSession

logger = logging.getLogger(__name__)

MAX_LEVEL = 20
MAX_INPUT = 120


class CommandInput:
    def __init__(self):
        self.text = ""

    def handle_key(self, event) -> bool:
        """Apply a KEYDOWN event; returns True when the player submitted."""
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            return bool(self.text.strip())
        if event.key == pygame.K_BACKSPACE:
            self.text = self.text[:-1]
        elif event.key == pygame.K_ESCAPE:
            self.text = ""
        elif event.unicode and event.unicode.isprintable() and len(self.text) < MAX_INPUT:
            self.text += event.unicode
        return False


class LevelState:
    def __init__(self, initial_level: str, seed=None, recorder=None):
        self.seed = seed
        self.recorder = recorder
        self.playlist = list(LEVEL_ORDER) + [str(n) for n in range(1, MAX_LEVEL + 1)]
        if initial_level not in self.playlist:
            self.playlist.insert(0, initial_level)
        self.index = self.playlist.index(initial_level)
        self.level = None
        self.session = None
        self.started_ms = 0

    def load(self, renderer_factory) -> PygameRenderer:
        name = self.playlist[self.index]
        self.level = load_level(name, self.seed)
        renderer = renderer_factory(self.level)
        self.session = GameSession(
            self.level, recorder=self.recorder, renderer=renderer, clock=self.elapsed_s
        )
        self.started_ms = pygame.time.get_ticks()
        logger.info("Loaded level %s", name)
        return renderer

    def advance(self, offset: int) -> None:
        self.index = (self.index + offset) % len(self.playlist)

    def elapsed_s(self) -> float:
        return (pygame.time.get_ticks() - self.started_ms) / 1000.0

    def restart(self) -> None:
        self.session.restart()
        self.started_ms = pygame.time.get_ticks()


def run_game(initial_level: str = "first-steps", seed=None, recorder=None) -> None:
    pygame.init()
    instructions = [
        "Type commands (D3,S2,(D1,S1)x3) | Enter: run | Esc: clear | F5: restart | Tab/Shift+Tab: change level",
        "H: print command help to the console | Close the window to exit (records an exit for the level)",
    ]
    header_font = pygame.font.SysFont(None, 18)
    header_pad = 4
    header_height = header_font.get_linesize() * (len(instructions) + 1) + header_pad * 2
    footer_height = header_font.get_linesize() + header_pad * 2
    clock = pygame.time.Clock()

    command_input = CommandInput()
    level_state = LevelState(initial_level, seed, recorder)
    message = ""
    screen = None
    grid_surface = None
    renderer = None

    def draw_screen():
        screen.fill((20, 20, 20))
        width = level_state.level.width * TILE
        pygame.draw.rect(screen, (30, 30, 30), (0, 0, width, header_height))
        for idx, line in enumerate(instructions):
            text = header_font.render(line, True, (200, 200, 200))
            screen.blit(text, (4, header_pad + idx * header_font.get_linesize()))
        limit = level_state.level.time_limit
        clock_text = f"{level_state.elapsed_s():.0f}s" + (f" / {limit}s" if limit else "")
        status = f"Level {level_state.level.level}  {clock_text}  {message}"
        text = header_font.render(status, True, (250, 204, 21))
        screen.blit(text, (4, header_pad + len(instructions) * header_font.get_linesize()))
        renderer.draw()
        footer_y = header_height + level_state.level.height * TILE
        pygame.draw.rect(screen, (30, 30, 30), (0, footer_y, width, footer_height))
        prompt = header_font.render("> " + command_input.text, True, (240, 240, 240))
        screen.blit(prompt, (4, footer_y + header_pad))
        pygame.display.flip()

    def load_current():
        nonlocal screen, grid_surface, renderer, message

        def make_renderer(level):
            nonlocal screen, grid_surface
            width, height = level.width * TILE, level.height * TILE
            screen = pygame.display.set_mode((max(width, 640), header_height + height + footer_height))
            grid_surface = screen.subsurface((0, header_height, width, height))
            return PygameRenderer(grid_surface, level, redraw=draw_screen)

        renderer = level_state.load(make_renderer)
        message = ""
        pygame.display.set_caption(f"Command Grid - level {level_state.level.level}")

    def submit():
        nonlocal message
        session = level_state.session
        # every run starts from the level start
        if not session.completed and session.parser.validate(command_input.text).valid:
            renderer.reset()
        result = session.submit(command_input.text)
        message = result.message
        if result.valid and session.position == level_state.level.start:
            renderer.reset()
        if session.timed_out:
            level_state.restart()
            renderer.reset()

    load_current()
    running = True
    while running:
        clock.tick(FPS)
        session = level_state.session
        if session.check_time(level_state.elapsed_s()):
            level_state.restart()
            renderer.reset()
            message = TIMEOUT_MESSAGE

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                if not session.completed:
                    session.exit()
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_TAB:
                    shift = event.mod & pygame.KMOD_SHIFT
                    level_state.advance(-1 if shift else 1)
                    load_current()
                elif event.key == pygame.K_F5:
                    level_state.restart()
                    renderer.reset()
                    message = ""
                elif event.key == pygame.K_h and not command_input.text:
                    print(CommandParser.help_text())
                elif command_input.handle_key(event):
                    submit()

        draw_screen()

    pygame.quit()
