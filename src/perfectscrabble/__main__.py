"""CLI entry point: python -m perfectscrabble <command>"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

from perfectscrabble.board import to_ascii
from perfectscrabble.config import AppConfig, load_config
from perfectscrabble.core.auth import AuthClient, TokenAuthority
from perfectscrabble.core.errors import ScrabbleError
from perfectscrabble.core.scorer import TurnScorer
from perfectscrabble.core.store import GameStore, get_db
from perfectscrabble.core.write_api import WriteClient, serve
from perfectscrabble.collection import BrowserState, CollectionBrowser, SortMode
from perfectscrabble.export import export_collection
from perfectscrabble.game import LiveGame
from perfectscrabble.recorder import GameRecorder
from perfectscrabble.render import board_text, blank_cells, collection_view, live_game_view, turn_table
from perfectscrabble.replay import board_at
from perfectscrabble.turns import sort_turns, turns_from_records

console = Console()


def _open_store(config: AppConfig) -> GameStore:
    db = get_db(config.mongo_uri, config.store.db_name)
    return GameStore(db, config.store.collection)


def _load_turn_file(path: Path) -> list:
    """Turns from a JSON file: a list of turn records, or {"turns": [...]}."""
    with open(path) as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("turns", [])
    return turns_from_records(raw)


def _cmd_browse(config: AppConfig, args) -> int:
    sort = SortMode(args.sort or config.browser.sort)
    browser = CollectionBrowser(_open_store(config), page_size=config.browser.page_size, sort=sort)
    browser.load()
    for _ in range(args.pages - 1):
        if not browser.can_load_more:
            break
        browser.load_more()

    console.print(collection_view(browser, show_boards=not args.no_boards, show_turns=args.turns))
    return 1 if browser.state is BrowserState.ERRORED else 0


def _cmd_export(config: AppConfig, args) -> int:
    directory = args.dir or config.export_dir
    try:
        path = export_collection(_open_store(config), directory)
    except ScrabbleError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        return 1
    console.print(f"Exported to {path}")
    return 0


def _cmd_replay(config: AppConfig, args) -> int:
    turns = sort_turns(_load_turn_file(args.file))
    k = len(turns) if args.step is None else args.step
    grid = board_at(turns, k)
    if args.ascii:
        print(to_ascii(grid))
    else:
        console.print(board_text(grid, blank_cells(turns[:k])))
        console.print(turn_table(turns[:k]))
    return 0


def _cmd_play(config: AppConfig, args) -> int:
    recorder = None
    if not args.no_save:
        writer = WriteClient(config.endpoints.write_url, timeout_s=config.endpoints.timeout_s)
        recorder = GameRecorder(writer, AuthClient.from_env(), config.store.collection)

    game = LiveGame(recorder)
    for turn in _load_turn_file(args.file):
        game.play(turn)
    console.print(live_game_view(game))
    return 0 if recorder is None or recorder.error is None else 1


def _cmd_score(config: AppConfig, args) -> int:
    positions = []
    for spec in args.blank or []:
        row, col = spec.split(",")
        positions.append({"row": int(row), "col": int(col)})

    scorer = TurnScorer(config.endpoints.scorer_url, timeout_s=config.endpoints.timeout_s)
    result = scorer.score_turn(args.turn, positions or None)
    if not result.success:
        console.print(f"[bold red]Scoring failed: {result.error}[/bold red]")
        return 1
    console.print(f"Score: [bold green]{result.score}[/bold green]")
    return 0


def _cmd_issue_token(config: AppConfig, args) -> int:
    print(TokenAuthority.from_env().issue(args.user_id))
    return 0


def _cmd_serve(config: AppConfig, args) -> int:
    db = get_db(config.mongo_uri, config.store.db_name)
    stores: dict[str, GameStore] = {}

    def store_for(collection: str) -> GameStore:
        if collection not in stores:
            stores[collection] = GameStore(db, collection)
        return stores[collection]

    server = serve(config.server.host, config.server.port, store_for, TokenAuthority.from_env())
    console.print(
        f"Write endpoint on http://{config.server.host}:{config.server.port}/api/write"
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perfectscrabble",
        description="Perfect Scrabble game viewer and recorder",
    )
    parser.add_argument("-c", "--config", type=Path, default=None,
                        help="Path to YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("browse", help="List stored games")
    p.add_argument("--sort", choices=[m.value for m in SortMode], default=None)
    p.add_argument("--pages", type=int, default=1,
                   help="Pages to load in date order (default: 1)")
    p.add_argument("--turns", action="store_true", help="Show each game's turn table")
    p.add_argument("--no-boards", action="store_true", help="Hide final boards")
    p.set_defaults(func=_cmd_browse)

    p = sub.add_parser("export", help="Export every stored game to JSON")
    p.add_argument("--dir", type=Path, default=None, help="Output directory")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("replay", help="Show the board for a game file")
    p.add_argument("file", type=Path, help="JSON list of turns, or {\"turns\": [...]}")
    p.add_argument("--step", type=int, default=None, help="Board after this many turns")
    p.add_argument("--ascii", action="store_true", help="Plain ASCII board")
    p.set_defaults(func=_cmd_replay)

    p = sub.add_parser("play", help="Play a game file turn by turn and save it")
    p.add_argument("file", type=Path)
    p.add_argument("--no-save", action="store_true", help="Do not submit the completed game")
    p.set_defaults(func=_cmd_play)

    p = sub.add_parser("score", help="Score a turn with the hosted scorer")
    p.add_argument("turn", help="Turn notation sent to the scorer")
    p.add_argument("--blank", action="append", metavar="ROW,COL",
                   help="Board position of a blank tile (repeatable)")
    p.set_defaults(func=_cmd_score)

    p = sub.add_parser("issue-token", help="Issue a bearer token (needs PSG_TOKEN_SECRET)")
    p.add_argument("user_id", nargs="?", default=None)
    p.set_defaults(func=_cmd_issue_token)

    p = sub.add_parser("serve", help="Run the write endpoint")
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.config is not None and not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)
        return args.func(config, args)
    except (ScrabbleError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
