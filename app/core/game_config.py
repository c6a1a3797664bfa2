"""
Configuration constants for the Tower of Hanoi puzzle.
"""

# Disk count limits
MIN_DISKS = 1
MAX_DISKS = 10
DEFAULT_NUM_DISKS = 6

# Board layout
NUM_PEGS = 3
START_PEG = 0
GOAL_PEG = 2

# Rendering
DISK_BASE_WIDTH = 20
DISK_WIDTH_STEP = 25


def get_min_moves(num_disks: int) -> int:
    """Get the optimal solution length for a given number of disks."""
    return 2 ** num_disks - 1

def is_valid_disk_count(num_disks: int) -> bool:
    """Check if a disk count is supported."""
    return MIN_DISKS <= num_disks <= MAX_DISKS

def is_valid_peg(index: int) -> bool:
    """Check if a peg index is on the board."""
    return 0 <= index < NUM_PEGS

def get_disk_width(size: int) -> int:
    """Display width of a disk, derived from its size."""
    return size * DISK_WIDTH_STEP + DISK_BASE_WIDTH
