from app.client.score_client import LeaderboardResult, SubmissionResult
from app.game.hanoi import HanoiSession
import play


class RecordingClient:
    def __init__(self, result):
        self.result = result
        self.submitted = []

    def submit_score(self, name, time, moves):
        self.submitted.append((name, time, moves))
        return self.result


class TestRenderPegs:

    def test_all_disks_drawn_on_first_peg(self):
        text = play.render_pegs(HanoiSession(num_disks=3))
        lines = text.splitlines()
        assert len(lines) == 4
        assert lines[-1].split() == ["1", "2", "3"]
        assert lines[0].split()[1:] == ["|", "|"]

    def test_selected_disk_marked(self):
        game = HanoiSession(num_disks=3)
        game.start()
        game.click_peg(0)
        assert "*" in play.render_pegs(game).splitlines()[0]

    def test_only_top_disk_of_selected_peg_marked(self):
        game = HanoiSession(num_disks=3)
        game.start()
        game.click_peg(0)
        game.click_peg(1)
        game.click_peg(0)
        lines = play.render_pegs(game).splitlines()
        # disk 2 sits on disk 3 on the first peg, disk 1 alone on the second
        assert lines[1].split() == ["*******", "|", "|"]
        assert lines[2].split() == ["=========", "====", "|"]

    def test_disk_widths_follow_size(self):
        game = HanoiSession(num_disks=3)
        bottom_row = play.render_pegs(game).splitlines()[2].split()
        assert bottom_row[0] == "=" * (game.pegs[0][0].width // 10)


class TestHandleWin:

    def test_submits_finished_game(self, monkeypatch, capsys):
        game = HanoiSession(num_disks=1)
        game.start()
        game.click_peg(0)
        game.click_peg(2)
        monkeypatch.setattr("builtins.input", lambda prompt="": "lee")
        client = RecordingClient(SubmissionResult(score_id=4, leaderboard=LeaderboardResult(entries=[
            {"name": "lee", "time": 3, "moves": 1}
        ])))

        play.handle_win(game, client)

        assert client.submitted == [("lee", game.elapsed_seconds(), 1)]
        out = capsys.readouterr().out
        assert "Score saved (#4)" in out
        assert "lee" in out

    def test_blank_name_skips_submission(self, monkeypatch):
        game = HanoiSession(num_disks=1)
        monkeypatch.setattr("builtins.input", lambda prompt="": "")
        client = RecordingClient(SubmissionResult())
        play.handle_win(game, client)
        assert client.submitted == []

    def test_error_is_printed(self, monkeypatch, capsys):
        game = HanoiSession(num_disks=1)
        monkeypatch.setattr("builtins.input", lambda prompt="": "max")
        client = RecordingClient(SubmissionResult(error="Error saving score: Invalid date"))
        play.handle_win(game, client)
        assert "Invalid date" in capsys.readouterr().out
