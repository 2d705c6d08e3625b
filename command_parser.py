"""
Parser and validator for the movement command language.

    program := (term ("," term)*)?
    term    := move | loop
    move    := DIRECTION DIGIT+            DIRECTION is one of D I S B
    loop    := "(" program ")" "X" DIGIT+

Whitespace is ignored and the input is uppercased before scanning, so
``d3, s2`` and ``D3,S2`` are the same program. Loops do not nest: a loop
written inside another loop contributes its moves once to the outer body.

Parse errors never raise. They are collected on a ``ParseState`` that is
threaded through the recursive loop parse and turned into a single message by
``CommandParser.validate``.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from command_expander import expand, final_position
from commands import SYMBOLS, Direction, LoopBlock, Move, ParsedProgram, Term
from game_constants import MAX_STEPS, MIN_ADVANCED_REPETITIONS, MIN_STEPS, is_advanced
from typedefs import Coord

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Comandos INCORRECTOS"
TOKEN_ERROR = "Comando incorrecto."
COMMA_ERROR = "Comandos INCORRECTOS: separa cada instrucción con una coma (,)."
REPETITIONS_ERROR = "Comando incorrecto: debe repetirse por lo menos 2 veces."
PORTAL_ERROR = "Comando incorrecto: el patrón del bucle debe terminar exactamente en el portal."
LOOPS_DISABLED_ERROR = "Comando incorrecto: los bucles no están disponibles en este nivel."
UNCLOSED_LOOP_ERROR = "Comando incorrecto: falta cerrar el paréntesis del bucle."
MISSING_X_ERROR = "Comando incorrecto: después del paréntesis debe ir 'x' y el número de repeticiones."
MISSING_COUNT_ERROR = "Comando incorrecto: indica cuántas veces se repite el bucle."
ZERO_COUNT_ERROR = "Comando incorrecto: el bucle debe repetirse al menos una vez."
EMPTY_LOOP_ERROR = "Comando incorrecto: el bucle no tiene instrucciones."
REPETITIONS_LIMIT_ERROR = "Comando incorrecto: el bucle se repite demasiadas veces."
PARSE_FAILURE = "Error al parsear comandos"

DIGITS = "0123456789"
MAX_COUNT_DIGITS = 6
OVERSIZED_COUNT = 10 ** MAX_COUNT_DIGITS
_WHITESPACE = re.compile(r"\s")

HELP_TEXT = """
Comandos disponibles:
- D[número]: Mover a la derecha (ej: D3)
- I[número]: Mover a la izquierda (ej: I2)
- S[número]: Mover hacia arriba (ej: S1)
- B[número]: Mover hacia abajo (ej: B4)
Cada instrucción avanza entre 1 y 15 casillas y se separa de la siguiente con una coma.

Bucles (nivel 10+):
- (comandos)x[repeticiones]: Repetir comandos (ej: (D1,S1)x3)
- Niveles 14-20: el bucle debe repetirse por lo menos 2 veces y el recorrido
  debe terminar exactamente en el portal.

Ejemplos:
- D3,S2,I1: Derecha 3, Subir 2, Izquierda 1
- (D2,S1)x5: Repetir "Derecha 2, Subir 1" cinco veces
"""


@dataclass
class ParseState:
    comma_error: bool = False
    invalid_token: bool = False
    message: Optional[str] = None

    def note(self, message: str) -> None:
        if self.message is None:
            self.message = message

    def mark_invalid(self) -> None:
        self.invalid_token = True
        self.note(TOKEN_ERROR)


@dataclass
class ParserOptions:
    level: Optional[int] = None
    start: Optional[Coord] = None
    door: Optional[Coord] = None
    require_comma: bool = True
    allows_loops: bool = True

    @property
    def advanced(self) -> bool:
        return is_advanced(self.level)

    @classmethod
    def for_level(cls, grid_level, require_comma: bool = True) -> "ParserOptions":
        return cls(
            level=grid_level.level,
            start=grid_level.start,
            door=grid_level.door,
            require_comma=require_comma,
            allows_loops=grid_level.allows_loops,
        )


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


def normalize(text: str) -> str:
    return _WHITESPACE.sub("", text or "").upper()


def _read_digits(text: str, start: int) -> Tuple[str, int]:
    i = start
    while i < len(text) and text[i] in DIGITS:
        i += 1
    return text[start:i], i


def _to_count(digits: str) -> int:
    """``int(digits)``, saturating at ``OVERSIZED_COUNT`` for very long digit runs."""
    significant = digits.lstrip("0")
    if len(significant) > MAX_COUNT_DIGITS:
        return OVERSIZED_COUNT
    return int(significant or "0")


def _parse_move(text: str, start: int) -> Optional[Tuple[Move, int]]:
    if start >= len(text) or text[start] not in SYMBOLS:
        return None
    digits, i = _read_digits(text, start + 1)
    if not digits:
        return None
    steps = _to_count(digits)
    if steps <= 0:
        return None
    return Move(Direction.from_symbol(text[start]), steps), i


def _matching_paren(text: str, start: int) -> int:
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _parse_loop(text: str, start: int, state: ParseState, require_comma: bool) -> Optional[Tuple[LoopBlock, int]]:
    end = _matching_paren(text, start)
    if end == -1:
        state.note(UNCLOSED_LOOP_ERROR)
        return None

    i = end + 1
    if i >= len(text) or text[i] != "X":
        state.note(MISSING_X_ERROR)
        return None
    digits, i = _read_digits(text, i + 1)
    if not digits:
        state.note(MISSING_COUNT_ERROR)
        return None
    repetitions = _to_count(digits)
    if repetitions <= 0:
        state.note(ZERO_COUNT_ERROR)
        return None
    if repetitions >= OVERSIZED_COUNT:
        state.note(REPETITIONS_LIMIT_ERROR)
        return None

    commands: List[Move] = []
    for term in _parse_terms(text[start + 1:end], state, require_comma):
        if isinstance(term, Move):
            commands.append(term)
        else:
            commands.extend(term.commands)
    if not commands:
        state.note(EMPTY_LOOP_ERROR)
        return None
    return LoopBlock(tuple(commands), repetitions), i


def _parse_terms(text: str, state: ParseState, require_comma: bool) -> List[Term]:
    terms: List[Term] = []
    i = 0
    while i < len(text):
        if text[i] == ",":
            i += 1
            continue

        if text[i] == "(":
            parsed = _parse_loop(text, i, state, require_comma)
        else:
            parsed = _parse_move(text, i)
        if parsed is None:
            state.mark_invalid()
            i += 1
            continue

        term, i = parsed
        terms.append(term)
        # ")" closes a loop body; the body itself is parsed without it.
        if require_comma and i < len(text) and text[i] not in ",)":
            state.comma_error = True
    return terms


def parse_program(text: str, require_comma: bool = True) -> Tuple[ParsedProgram, ParseState]:
    state = ParseState()
    terms = _parse_terms(normalize(text), state, require_comma)
    return tuple(terms), state


class CommandParser:
    """Parses and validates command text for one level.

    ``last_state`` holds the error flags of the most recent ``parse`` call on
    this instance; use one parser per concurrent caller.
    """

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options if options is not None else ParserOptions()
        self.last_state = ParseState()

    def parse(self, text: str) -> ParsedProgram:
        program, self.last_state = parse_program(text, self.options.require_comma)
        return program

    def expand(self, text: str) -> List[Move]:
        return expand(self.parse(text))

    def validate(self, text: str) -> ValidationResult:
        try:
            return self._validate(text)
        except Exception:
            logger.exception("Unexpected failure while validating commands %r", text)
            return ValidationResult(False, PARSE_FAILURE)

    def _validate(self, text: str) -> ValidationResult:
        program = self.parse(text)
        state = self.last_state
        options = self.options
        loops = [term for term in program if isinstance(term, LoopBlock)]

        if options.advanced:
            if any(loop.repetitions < MIN_ADVANCED_REPETITIONS for loop in loops):
                return ValidationResult(False, REPETITIONS_ERROR)
            if options.start is not None and options.door is not None:
                if final_position(options.start, expand(program)) != tuple(options.door):
                    return ValidationResult(False, PORTAL_ERROR)

        if state.comma_error:
            return ValidationResult(False, COMMA_ERROR)
        if state.invalid_token:
            return ValidationResult(False, state.message or GENERIC_ERROR)
        if not program:
            return ValidationResult(False, GENERIC_ERROR)
        if loops and not options.allows_loops:
            return ValidationResult(False, LOOPS_DISABLED_ERROR)

        for move in expand(program):
            if not isinstance(move.direction, Direction):
                return ValidationResult(False, f"Dirección inválida: {move.direction}")
            if move.steps < MIN_STEPS or move.steps > MAX_STEPS:
                return ValidationResult(False, f"Número de pasos inválido: {move.steps}")
        return ValidationResult(True)

    @staticmethod
    def help_text() -> str:
        return HELP_TEXT
