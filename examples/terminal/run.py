"""
Terminal Geocoin

Walk the grid with n/s/e/w, pick and drop coins at the cache under you, and
watch an ASCII map redraw after each command. Progress is saved to a JSON file
so quitting and restarting picks up where you left off.

Run: python examples/terminal/run.py [--save PATH] [--memory] [--radius N]

Commands:
  n | s | e | w          step one cell
  pick [I J]             take a coin from the cache here (or at cell I,J)
  drop [I J]             drop your most recent coin here (or at cell I,J)
  look                   describe the cache here
  inv                    list held coins
  gps                    toggle a scripted walk standing in for device location
  reset                  discard all progress (asks first)
  quit
"""

import argparse
import asyncio
from typing import List, Optional

from geocoin import (
    AsciiMapRenderer,
    GameController,
    GridCoordinate,
    InMemoryStorage,
    JsonFileStorage,
    LatLng,
    LocationWatcher,
    PersistenceAdapter,
    ScriptedLocationSource,
)
from geocoin.config import Config
from geocoin.render import format_cache, format_inventory

MOVES = {"n": "north", "s": "south", "e": "east", "w": "west"}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Geocoin in the terminal")
    parser.add_argument("--save", default=str(Config.STORAGE_PATH), help="Save file path")
    parser.add_argument("--memory", action="store_true", help="Do not write a save file")
    parser.add_argument("--radius", type=int, default=6, help="Map cells shown around the player")
    return parser.parse_args()


def scripted_walk(start: LatLng, tile: float) -> List[LatLng]:
    """A short loop around the start, one cell per second."""
    offsets = [(1, 0), (2, 0), (2, 1), (2, 2), (1, 2), (0, 2), (0, 1), (0, 0)]
    return [start.offset(di * tile, dj * tile) for di, dj in offsets]


def target_cell(game: GameController, args: List[str]) -> Optional[GridCoordinate]:
    if not args:
        return game.player_cell
    try:
        i, j = (int(value) for value in args[:2])
    except ValueError:
        return None
    return GridCoordinate(i=i, j=j)


async def main():
    args = parse_args()
    Config.validate()

    storage = InMemoryStorage() if args.memory else JsonFileStorage(
        args.save, retries=Config.STORAGE_RETRIES
    )
    game = GameController(persistence=PersistenceAdapter(storage))
    renderer = AsciiMapRenderer(game.board)
    game.add_observer(renderer)

    print(Config.display())
    game.start()

    watcher: Optional[LocationWatcher] = None
    follower: Optional[asyncio.Task] = None

    while True:
        print()
        print(renderer.render(radius=args.radius))
        print(format_inventory(game.state.inventory.coins))
        line = await asyncio.to_thread(input, "> ")
        words = line.strip().split()
        if not words:
            continue
        command, rest = words[0].lower(), words[1:]

        if command in MOVES:
            game.move(MOVES[command])
        elif command in ("pick", "drop"):
            cell = target_cell(game, rest)
            if cell is None:
                print("Usage: pick|drop [I J]")
                continue
            request = game.request_pick if command == "pick" else game.request_drop
            result = request(cell)
            if result.ok and result.coin is not None:
                print(f"{command} {result.coin.label}")
        elif command == "look":
            record = game.cache_at(game.player_cell)
            print(format_cache(record) if record else "No cache here.")
        elif command == "inv":
            print(format_inventory(game.state.inventory.coins))
        elif command == "gps":
            if watcher is None:
                source = ScriptedLocationSource(
                    scripted_walk(game.state.player_location, game.board.tile_degrees),
                    delay=1.0,
                )
                watcher = LocationWatcher(source)
            if await watcher.toggle():
                follower = asyncio.create_task(game.follow(watcher))
            elif follower is not None:
                await follower
                follower = None
                watcher = None
        elif command == "reset":
            answer = await asyncio.to_thread(input, "Discard all progress? [y/N] ")
            game.reset(confirm=lambda: answer.strip().lower() == "y")
        elif command in ("quit", "q", "exit"):
            break
        else:
            print(__doc__)

    if watcher is not None:
        await watcher.stop()
    if follower is not None:
        await follower


if __name__ == "__main__":
    asyncio.run(main())
