"""
Tower of Hanoi puzzle engine.

A HanoiSession holds the three pegs, the move counter, the active flag and
the current selection for one game. Front ends create a session and pass it
to their input handlers; there is no module-level game state.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from app.core.game_config import (
    DEFAULT_NUM_DISKS, GOAL_PEG, NUM_PEGS, START_PEG,
    get_disk_width, get_min_moves, is_valid_disk_count, is_valid_peg
)
from app.game.timer import SessionTimer

logger = logging.getLogger(__name__)

TimerFactory = Callable[["HanoiSession"], Optional[SessionTimer]]


@dataclass(frozen=True)
class Disk:
    """A disk identified by its size rank, 1 being the smallest."""
    size: int

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError(f"Disk size must be at least 1, got {self.size}")

    @property
    def width(self) -> int:
        return get_disk_width(self.size)


@dataclass(frozen=True)
class ClickResult:
    """
    Outcome of a single peg click.

    Attributes:
        selected: Peg whose top disk is selected after the click, if any
        moved: Whether the click completed a legal move
        won: Whether that move solved the puzzle
        elapsed: Elapsed seconds at the time of the click
    """
    selected: Optional[int] = None
    moved: bool = False
    won: bool = False
    elapsed: int = 0


class HanoiSession:
    def __init__(
        self,
        num_disks: int = DEFAULT_NUM_DISKS,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Optional[TimerFactory] = None
    ):
        if not is_valid_disk_count(num_disks):
            raise ValueError(f"Unsupported number of disks: {num_disks}")
        self.num_disks = num_disks
        self._clock = clock
        self._timer_factory = timer_factory
        self._timer: Optional[SessionTimer] = None

        self.pegs: List[List[Disk]] = []
        self.moves = 0
        self.active = False
        self.selected_peg: Optional[int] = None
        self.start_time: Optional[float] = None
        self._final_elapsed: Optional[int] = None

        self._build_start_stack()

    @property
    def minimum_moves(self) -> int:
        return get_min_moves(self.num_disks)

    @property
    def finished(self) -> bool:
        return self._final_elapsed is not None

    def start(self) -> None:
        """Begin timing the game. Does nothing if already running."""
        if self.active:
            return
        if self.finished:
            self.reset()
        self.active = True
        self.start_time = self._clock()
        if self._timer_factory is not None:
            self._timer = self._timer_factory(self)
            if self._timer is not None:
                self._timer.start()
        logger.debug(f"Game started with {self.num_disks} disks")

    def reset(self) -> None:
        """Put every disk back on the start peg and return to the idle state."""
        self._stop_timer()
        self.moves = 0
        self.active = False
        self.selected_peg = None
        self.start_time = None
        self._final_elapsed = None
        self._build_start_stack()

    def elapsed_seconds(self) -> int:
        """Whole seconds since start, recomputed from the start timestamp."""
        if self._final_elapsed is not None:
            return self._final_elapsed
        if self.start_time is None:
            return 0
        return int(self._clock() - self.start_time)

    def top_disk(self, index: int) -> Optional[Disk]:
        self._check_peg(index)
        peg = self.pegs[index]
        return peg[-1] if peg else None

    def select_peg(self, index: int) -> bool:
        """Select the top disk of a peg. Returns whether a selection was made."""
        self._check_peg(index)
        if not self.active or self.selected_peg is not None:
            return False
        if not self.pegs[index]:
            return False
        self.selected_peg = index
        return True

    def is_valid_move(self, from_peg: int, to_peg: int) -> bool:
        self._check_peg(from_peg)
        self._check_peg(to_peg)
        if from_peg == to_peg:
            return False
        if not self.pegs[from_peg]:
            return False
        if not self.pegs[to_peg]:
            return True
        return self.pegs[to_peg][-1].size > self.pegs[from_peg][-1].size

    def attempt_move(self, from_peg: int, to_peg: int) -> bool:
        """
        Move the top disk of `from_peg` onto `to_peg` if the move is legal.

        Illegal moves change nothing. The selection is cleared either way.
        """
        legal = self.is_valid_move(from_peg, to_peg)
        self.selected_peg = None
        if not legal:
            return False
        disk = self.pegs[from_peg].pop()
        self.pegs[to_peg].append(disk)
        self.moves += 1
        return True

    def check_win(self) -> bool:
        return len(self.pegs[GOAL_PEG]) == self.num_disks

    def click_peg(self, index: int) -> ClickResult:
        """Handle one click: the first selects a disk, the second tries to move it."""
        self._check_peg(index)
        if not self.active:
            return ClickResult(elapsed=self.elapsed_seconds())

        if self.selected_peg is None:
            self.select_peg(index)
            return ClickResult(selected=self.selected_peg, elapsed=self.elapsed_seconds())

        moved = self.attempt_move(self.selected_peg, index)
        won = moved and self.check_win()
        if won:
            self._finish()
        return ClickResult(moved=moved, won=won, elapsed=self.elapsed_seconds())

    def peg_sizes(self) -> Tuple[Tuple[int, ...], ...]:
        """Disk sizes on each peg, bottom to top."""
        return tuple(tuple(disk.size for disk in peg) for peg in self.pegs)

    def _finish(self) -> None:
        self._final_elapsed = self.elapsed_seconds()
        self._stop_timer()
        self.active = False
        self.selected_peg = None
        logger.info(f"Puzzle solved in {self.moves} moves and {self._final_elapsed}s")

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _build_start_stack(self) -> None:
        self.pegs = [[] for _ in range(NUM_PEGS)]
        self.pegs[START_PEG] = [Disk(size) for size in range(self.num_disks, 0, -1)]

    def _check_peg(self, index: int) -> None:
        if not is_valid_peg(index):
            raise ValueError(f"Peg index must be between 0 and {NUM_PEGS - 1}, got {index}")


def is_sorted_stack(disks: Sequence[Disk]) -> bool:
    """True if sizes strictly decrease from bottom to top."""
    return all(lower.size > upper.size for lower, upper in zip(disks, disks[1:]))
