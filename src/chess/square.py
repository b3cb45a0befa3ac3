"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import InvalidSquareError

BOARD_SIZE = 8
FILES = "abcdefgh"
RANKS = "12345678"


def is_on_board(row: int, col: int) -> bool:
    return (0 <= row < BOARD_SIZE) and (0 <= col < BOARD_SIZE)


@dataclass(frozen=True, order=True)
class Square:
    """
    (row, col) coordinates, both in 0..7.

    Row 0 is the 8th rank (black's back rank), row 7 is the 1st rank. Col 0 is the a-file.
    Ordering follows the rows first, so sorting squares gives the row-major scan order of the board.
    """

    row: int
    col: int

    def __post_init__(self) -> None:
        if not is_on_board(self.row, self.col):
            raise InvalidSquareError(
                f"Square ({self.row}, {self.col}) lies outside the board."
            )

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' - 'h1' get converted to (0,0) - (7,7)"""
        if len(sq) != 2 or sq[0] not in FILES or sq[1] not in RANKS:
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square name.")
        col = FILES.index(sq[0])
        row = BOARD_SIZE - int(sq[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{self.file}{self.rank}"

    @property
    def file(self) -> str:
        return FILES[self.col]

    @property
    def rank(self) -> int:
        return BOARD_SIZE - self.row


# Row-major scan of the board: a8, b8, ..., h8, a7, ..., h1
ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)
)
