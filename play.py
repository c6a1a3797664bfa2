"""
Terminal front end for the Tower of Hanoi puzzle.

Pegs are "clicked" by typing 1, 2 or 3: the first click picks up the top
disk, the second puts it down. Finished games are sent to the score service.

Usage:
    python play.py [--url http://localhost:3000] [--disks 6]
"""

import argparse
import logging
import sys

from app.client.score_client import ScoreClient, format_time, render_leaderboard
from app.core.game_config import DEFAULT_NUM_DISKS, get_disk_width
from app.game.hanoi import HanoiSession
from app.game.timer import SessionTimer

logger = logging.getLogger(__name__)

HELP = "Commands: 1/2/3 click a peg, s start, r reset, q quit"


def render_pegs(session: HanoiSession) -> str:
    """Draw the pegs side by side, top row first."""
    max_width = get_disk_width(session.num_disks) // 10 + 2
    selected = None
    if session.selected_peg is not None:
        selected = session.top_disk(session.selected_peg)

    rows = []
    for level in range(session.num_disks - 1, -1, -1):
        cells = []
        for peg in session.pegs:
            if level < len(peg):
                disk = peg[level]
                marker = "*" if disk == selected else "="
                cells.append((marker * (disk.width // 10)).center(max_width))
            else:
                cells.append("|".center(max_width))
        rows.append(" ".join(cells))
    rows.append(" ".join(str(i + 1).center(max_width) for i in range(len(session.pegs))))
    return "\n".join(rows)


def show_status(session: HanoiSession) -> None:
    print(render_pegs(session))
    print(f"Time: {format_time(session.elapsed_seconds())}  Moves: {session.moves}")


def make_title_timer(session: HanoiSession) -> SessionTimer:
    """Tick once a second, showing the elapsed time in the terminal title."""
    def on_tick():
        sys.stdout.write(f"\x1b]0;Hanoi {format_time(session.elapsed_seconds())}\x07")
        sys.stdout.flush()
    return SessionTimer(1.0, on_tick)


def handle_win(session: HanoiSession, client: ScoreClient) -> None:
    print(f"\nSolved in {session.moves} moves and {format_time(session.elapsed_seconds())}!")
    name = input("Congratulations! Enter your name for the high score: ")
    if not name.strip():
        return

    result = client.submit_score(name, session.elapsed_seconds(), session.moves)
    if not result.ok:
        print(result.error)
        return

    print(f"Score saved (#{result.score_id})")
    if result.leaderboard.ok:
        print(render_leaderboard(result.leaderboard.entries))
    else:
        print(result.leaderboard.error)


def main():
    parser = argparse.ArgumentParser(description="Play the Tower of Hanoi")
    parser.add_argument("--url", default="http://localhost:3000", help="Score service base URL")
    parser.add_argument("--disks", type=int, default=DEFAULT_NUM_DISKS, help="Number of disks")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    client = ScoreClient(args.url, num_disks=args.disks)
    session = HanoiSession(num_disks=args.disks, timer_factory=make_title_timer)

    print("=== Tower of Hanoi ===\n")
    leaderboard = client.fetch_leaderboard()
    print(render_leaderboard(leaderboard.entries) if leaderboard.ok else leaderboard.error)
    print(f"\nMove all {args.disks} disks to peg 3 in as few moves as possible "
          f"(best possible: {session.minimum_moves}).")
    print(HELP)

    try:
        while True:
            print()
            show_status(session)
            command = input("> ").strip().lower()

            if command == "q":
                break
            elif command == "s":
                session.start()
            elif command == "r":
                session.reset()
            elif command in ("1", "2", "3"):
                if not session.active:
                    print("Press s to start the game")
                    continue
                result = session.click_peg(int(command) - 1)
                if result.won:
                    show_status(session)
                    handle_win(session, client)
                    session.reset()
            else:
                print(HELP)
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        session.reset()


if __name__ == "__main__":
    main()
