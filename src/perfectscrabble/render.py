"""Terminal rendering with rich — boards, score summaries and turn tables."""

from __future__ import annotations

from typing import Iterable

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from perfectscrabble.board import CENTER, EMPTY, PREMIUM_SQUARES, Grid, word_cells
from perfectscrabble.collection import CollectionBrowser, GameView, SortMode
from perfectscrabble.game import LiveGame
from perfectscrabble.recorder import SaveStatus
from perfectscrabble.scoring import ScoreSummary
from perfectscrabble.turns import Player, Turn

PLAYER_COLORS = {
    Player.A: "cyan",
    Player.B: "magenta",
}


def blank_cells(turns: Iterable[Turn]) -> set[tuple[int, int]]:
    """Board cells holding a blank tile."""
    cells: set[tuple[int, int]] = set()
    for turn in turns:
        if turn.blanks is None:
            continue
        covered = word_cells(turn)
        for i in turn.blanks.indices:
            if 0 <= i < len(covered):
                cells.add(covered[i])
    return cells


def board_text(grid: Grid, blanks: set[tuple[int, int]] | None = None) -> Text:
    """Render the grid with colored premium squares; blanks in lowercase."""
    blanks = blanks or set()
    size = len(grid)
    board = Text()
    board.append("     ", style="dim")
    for c in range(size):
        board.append(f"{chr(ord('A') + c):>3s}", style="dim")
    board.append("\n")

    for r in range(size):
        board.append(f"  {r + 1:>2d} ", style="dim")
        for c in range(size):
            letter = grid[r][c]
            if letter != EMPTY:
                if (r, c) in blanks:
                    board.append(f"  {letter.lower()}", style="bold yellow")
                else:
                    board.append(f"  {letter}", style="bold white")
                continue
            prem = PREMIUM_SQUARES.get((r, c))
            if prem == "TW":
                board.append(" 3W", style="bold red")
            elif prem == "DW":
                if (r, c) == CENTER:
                    board.append("  ★", style="bold yellow")
                else:
                    board.append(" 2W", style="bold magenta")
            elif prem == "TL":
                board.append(" 3L", style="bold blue")
            elif prem == "DL":
                board.append(" 2L", style="bold cyan")
            else:
                board.append("  .", style="dim")
        board.append("\n")

    return board


def score_table(scores: ScoreSummary) -> Table:
    table = Table(show_edge=False, expand=True)
    table.add_column("Player A", style=f"bold {PLAYER_COLORS[Player.A]}", justify="center")
    table.add_column("Player B", style=f"bold {PLAYER_COLORS[Player.B]}", justify="center")
    table.add_column("Total", style="bold green", justify="center")
    table.add_row(str(scores.player_a), str(scores.player_b), str(scores.total))
    return table


def turn_table(turns: Iterable[Turn]) -> Table:
    """Turn history. Rows are 1-based and columns lettered, as on the board."""
    table = Table(expand=True)
    for header in ("ID", "Bingo", "Direction", "Row", "Column", "Overlap", "Score", "Blanks"):
        table.add_column(header, justify="center")

    for turn in turns:
        overlap = f"{turn.overlap.tile} ({turn.overlap.index})" if turn.overlap else "None"
        blanks = (
            f"{turn.blanks.tile} ({', '.join(str(i) for i in turn.blanks.indices)})"
            if turn.blanks else "-"
        )
        table.add_row(
            str(turn.id),
            Text(turn.bingo, style=f"bold {PLAYER_COLORS[turn.player]}"),
            turn.direction.value,
            str(turn.row + 1),
            chr(ord("A") + turn.col),
            overlap,
            str(turn.score),
            blanks,
        )
    return table


def game_panel(view: GameView, show_board: bool = True, show_turns: bool = False) -> Panel:
    """One collection entry: id, timestamp, scores, and optionally board and turns."""
    game = view.game
    header = Text()
    header.append(f"Game ID: {game.id}", style="bold")
    if game.timestamp is not None:
        header.append(f"   {game.timestamp:%Y-%m-%d %H:%M:%S %Z}", style="dim")

    parts: list = [header, score_table(view.scores)]
    if view.replay_failed_at is not None:
        parts.append(Text(f"Board stops before turn {view.replay_failed_at}", style="bold red"))
    if show_board:
        parts.append(board_text(view.board, blank_cells(game.turns)))
    if show_turns:
        parts.append(turn_table(game.turns))
    return Panel(Group(*parts), border_style="green", padding=(0, 1))


def collection_view(browser: CollectionBrowser, show_boards: bool = True, show_turns: bool = False):
    """Everything the browser has loaded, plus its status line."""
    title = Text("Perfect Scrabble Games Collection", style="bold green")
    sort_label = "Date" if browser.sort is SortMode.TIMESTAMP else "Total Score"
    title.append(f"   sorted by {sort_label}", style="dim")

    if browser.error:
        return Group(title, Text(browser.error, style="bold red"))

    games = browser.games
    if not games:
        return Group(title, Text("No games found.", style="dim italic"))

    parts: list = [title]
    parts.extend(game_panel(v, show_boards, show_turns) for v in games)
    if browser.can_load_more:
        parts.append(Text("More games available (--pages N to load more)", style="dim"))
    return Group(*parts)


def live_game_view(game: LiveGame) -> Panel:
    """Board, scores and save status of a game in progress."""
    parts: list = [
        score_table(game.scores),
        board_text(game.board, blank_cells(game.turns)),
    ]
    player = game.current_player
    if player is not None:
        parts.append(Text(f"Turn {len(game.turns) + 1}: Player {player.value}",
                          style=f"bold {PLAYER_COLORS[player]}"))
    else:
        parts.append(Text("Game complete! 14 perfect turns played.", style="bold green"))

    recorder = game.recorder
    if recorder is not None:
        if recorder.status is SaveStatus.SAVING:
            parts.append(Text("Saving game to database...", style="dim"))
        elif recorder.status is SaveStatus.SAVED:
            parts.append(Text(f"Game ID: {recorder.saved_id}", style="bold"))
        elif recorder.status is SaveStatus.ERROR:
            parts.append(Text(f"Error saving game: {recorder.error}", style="bold red"))

    return Panel(Group(*parts), title="[bold]Board[/bold]", border_style="green", padding=(0, 1))
