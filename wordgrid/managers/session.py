from __future__ import annotations
import logging
import random
import time
from typing import Callable, List, Optional, Tuple

from ..board import BLANK, Board, empty_board_state, in_bounds
from ..config import Config
from ..dictionary import Lexicon
from ..errors import (
    DuplicateKeyError,
    GameFullError,
    InsufficientTilesError,
    LexiconNotLoadedError,
    NameTakenError,
    NotYourTurnError,
    PersistenceError,
    RecordNotFoundError,
    StoreError,
    UserInputError,
)
from ..moves import PendingTile, extract_words, validate_words
from ..replica import FeedEvent, GameChanged, PlayersChanged, Replica, apply_event
from ..schemas import (
    BonusTile,
    ConnectionStatus,
    GameRecord,
    LivePlacementRecord,
    PlayerRecord,
    Position,
)
from ..scoring import TurnScore, score_turn
from ..store.base import Store
from ..tiles import LETTERS, draw, draw_exact, new_tile_bag, with_random_blank
from ..turns import generate_bonus_tile, next_player_id
from .connection import SessionConnection
from .placements import LivePlacementPublisher
from .timer import TurnCountdown

logger = logging.getLogger(__name__)

# (kind, message) for anything the player should see: 'your_turn', 'success', 'info', 'error'
Notice = Callable[[str, str], None]

class GameSession:
    """One player's view of one game.

    Local edits (pending tiles, rack) are provisional; whatever the store
    acknowledges and feeds back replaces them.
    """

    def __init__(self, store: Store, lexicon: Lexicon, config=Config,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.monotonic,
                 on_notice: Optional[Notice] = None):
        self.store = store
        self.lexicon = lexicon
        self.config = config
        self.rng = rng or random.Random()
        self.replica = Replica()
        self.player_name: Optional[str] = None
        self.rack: List[str] = []
        self.score = 0
        self.tile_bag: List[str] = []
        self.pending_tiles: List[PendingTile] = []
        self.bonus_tile: Optional[BonusTile] = None
        self.time_bonus = 0
        self.show_turn_notification = False
        self.selected_blank_index: Optional[int] = None
        self.bag_exhausted = False
        self.countdown = TurnCountdown(config.TURN_SECONDS, clock=clock)
        self.connection = SessionConnection(
            store, self.handle_event,
            poll_interval=config.RECONNECT_INTERVAL_SEC,
            on_status_change=self._on_connection_status,
        )
        self._on_notice = on_notice
        self._placements: Optional[LivePlacementPublisher] = None
        self._submitting = False

    # --- observable state ---
    @property
    def game_id(self) -> Optional[str]:
        return self.replica.game_id

    @property
    def player_id(self) -> Optional[str]:
        return self.replica.player_id

    @property
    def board(self) -> Board:
        """Committed board with this turn's pending tiles laid over it."""
        view = self.replica.board.copy()
        for tile in self.pending_tiles:
            view.set(tile.x, tile.y, tile.letter)
        return view

    @property
    def players(self) -> List[PlayerRecord]:
        return self.replica.players

    @property
    def current_turn(self) -> Optional[str]:
        return self.replica.current_turn

    @property
    def is_my_turn(self) -> bool:
        return self.replica.is_my_turn

    @property
    def live_placements(self) -> List[LivePlacementRecord]:
        """Other players' unsubmitted tiles."""
        return [p for p in self.replica.live_placements if p.player_id != self.player_id]

    @property
    def last_played_positions(self) -> List[Position]:
        return self.replica.last_played_positions

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.connection.status

    # --- joining ---
    async def create_game(self, player_name: str) -> str:
        name = self._require_name(player_name)
        logger.info('Creating new game for player %s', name)
        bag = new_tile_bag(self.rng)
        drawn, remaining = draw(self.config.RACK_SIZE, bag)
        rack = with_random_blank(drawn, self.config.INITIAL_BLANK_CHANCE, self.rng)

        game = await self.store.insert_game(GameRecord(board_state=empty_board_state(), status='waiting'))
        player = await self.store.insert_player(
            PlayerRecord(game_id=game.id, name=name, rack=rack, order_num=1)
        )
        game = await self.store.update_game(game.id, current_player_id=player.id)
        logger.info('Game %s created by %s', game.id, player.id)

        self._enter(game.id, player.id, name, rack, remaining)
        await self.handle_event(PlayersChanged([player], player.revision))
        await self.handle_event(GameChanged(game, game.revision))
        self.bonus_tile = generate_bonus_tile(self.rng)
        await self.connection.open(game.id)
        return game.id

    async def join_game(self, game_id: str, player_name: str):
        name = self._require_name(player_name)
        logger.info('Joining game %s as %s', game_id, name)
        game = await self.store.get_game(game_id)
        if game is None:
            raise RecordNotFoundError(f'Game {game_id} not found')
        players = await self.store.list_players(game_id)

        existing = next((p for p in players if p.name == name), None)
        if existing:
            if existing.id != self.player_id:
                raise NameTakenError(name)
            logger.info('Player already in game, reconnecting')
            self._enter(game_id, existing.id, name, list(existing.rack), self.tile_bag)
            await self._load_snapshot(game, players)
            await self.connection.open(game_id)
            return

        if len(players) >= self.config.MAX_PLAYERS:
            raise GameFullError()

        bag = new_tile_bag(self.rng)
        drawn, remaining = draw(self.config.RACK_SIZE, bag)
        rack = with_random_blank(drawn, self.config.INITIAL_BLANK_CHANCE, self.rng)
        try:
            player = await self.store.insert_player(
                PlayerRecord(game_id=game_id, name=name, rack=rack, order_num=len(players) + 1)
            )
        except DuplicateKeyError as exc:
            raise NameTakenError(name) from exc
        logger.info('Player %s joined game %s', player.id, game_id)

        players = players + [player]
        if len(players) == self.config.MAX_PLAYERS:
            game = await self.store.update_game(
                game_id, status='active',
                current_player_id=game.current_player_id or players[0].id,
            )
            logger.info('Game %s started with all players', game_id)

        self._enter(game_id, player.id, name, rack, remaining)
        await self._load_snapshot(game, players)
        self.bonus_tile = generate_bonus_tile(self.rng)
        await self.connection.open(game_id)

    async def leave(self):
        await self.connection.close()
        self.countdown.cancel()
        self.replica.reset()
        self.pending_tiles = []
        self.rack = []
        self.score = 0
        self.time_bonus = 0
        self._placements = None

    # --- turn actions ---
    async def place(self, letter: str, x: int, y: int):
        self._require_turn()
        letter = letter.upper()
        if not in_bounds(x, y):
            raise UserInputError(f'({x}, {y}) is off the board')
        if self.board.is_occupied(x, y):
            raise UserInputError('That square is already taken')
        if letter not in self.rack:
            raise UserInputError(f'{letter} is not on your rack')
        logger.debug('Playing tile %s at (%d, %d)', letter, x, y)

        self.rack.remove(letter)
        self.pending_tiles.append(PendingTile(x, y, letter))
        await self._placements.publish(self.pending_tiles)

    async def remove(self, x: int, y: int, letter: str):
        self._require_turn()
        tile = next((t for t in self.pending_tiles
                     if t.x == x and t.y == y and t.letter == letter.upper()), None)
        if tile is None:
            return
        logger.debug('Removing tile %s from (%d, %d)', tile.letter, x, y)
        self.pending_tiles.remove(tile)
        self.rack.append(tile.letter)
        await self._placements.publish(self.pending_tiles)

    async def clear(self):
        self._require_turn()
        logger.debug('Clearing %d pending tiles', len(self.pending_tiles))
        self._return_pending()
        self.replica.live_placements = self.live_placements
        await self._placements.retract()

    async def submit(self) -> TurnScore:
        self._require_turn()
        if not self.pending_tiles:
            raise UserInputError('Place at least one tile first')
        if not self.lexicon.loaded:
            raise LexiconNotLoadedError()

        board = self.board
        words = extract_words(self.pending_tiles, board)
        validate_words(words, self.lexicon.is_valid_word)
        logger.info('Submitting %s', ', '.join(w.word for w in words))

        bonus = self.bonus_tile
        # the clock keeps running until the writes land, so a failed submit can be retried
        self.time_bonus = self.countdown.remaining
        result = score_turn(words, bonus, self.time_bonus)
        next_id = next_player_id(self.replica.player_ids, self.current_turn)
        drawn, remaining_bag, exhausted = self._restock(len(self.pending_tiles))
        new_rack = self.rack + drawn
        new_score = self.score + result.total
        last_played = [Position(x=x, y=y) for x, y in words[0].positions]
        prior_game = dict(
            board_state=self.replica.board.to_state(),
            current_player_id=self.current_turn,
            last_played_positions=list(self.last_played_positions),
        )

        self._submitting = True
        try:
            await self._placements.retract()
            # board first: the score and rack are only written once the word is on it
            try:
                game = await self.store.update_game(
                    self.game_id, board_state=board.to_state(),
                    current_player_id=next_id, last_played_positions=last_played,
                )
            except StoreError as exc:
                logger.error('Failed to submit word: %s', exc)
                self._recover_failed_submit()
                raise PersistenceError('Failed to submit word') from exc
            try:
                me = await self.store.update_player(self.player_id, score=new_score, rack=new_rack)
            except StoreError as exc:
                logger.error('Failed to save score and rack: %s', exc)
                rolled_back = await self._roll_back_game(prior_game)
                self._recover_failed_submit(tiles_on_board=not rolled_back)
                raise PersistenceError('Failed to save score and rack') from exc
        finally:
            self._submitting = False

        self.countdown.cancel()
        self.pending_tiles = []
        self.rack = new_rack
        self.score = new_score
        self.tile_bag = remaining_bag
        self.bag_exhausted = self.bag_exhausted or exhausted
        self.time_bonus = 0
        self.replica.live_placements = self.live_placements
        await self.handle_event(GameChanged(game, game.revision))
        others = [p for p in self.players if p.id != me.id]
        await self.handle_event(PlayersChanged(others + [me], me.revision))
        if next_id == self.player_id:
            self.countdown.arm()
        self.bonus_tile = generate_bonus_tile(self.rng)

        if result.bonus_used:
            self._notify('success', f'Bonus tile {bonus.letter} used! Score multiplied by {bonus.multiplier}x')
        plural = 's' if len(words) > 1 else ''
        extra = f' (+{result.time_bonus} time bonus)' if result.time_bonus else ''
        self._notify('success', f'Word{plural} played for {result.total}{extra} points!')
        return result

    # --- blanks ---
    def select_blank(self, index: int):
        if not 0 <= index < len(self.rack) or self.rack[index] != BLANK:
            raise UserInputError('Pick a blank tile to assign a letter to')
        self.selected_blank_index = index

    async def assign_blank_letter(self, letter: str):
        self._require_turn()
        index = self.selected_blank_index
        if index is None:
            return
        letter = letter.upper()
        if letter not in LETTERS:
            raise UserInputError(f'{letter!r} is not a letter')
        self.rack[index] = letter
        self.selected_blank_index = None
        full_rack = self.rack + [t.letter for t in self.pending_tiles]
        try:
            await self.store.update_player(self.player_id, rack=full_rack)
        except StoreError as exc:
            logger.warning('Failed to save blank assignment: %s', exc)

    # --- game-wide actions ---
    async def restart(self):
        if not self.game_id:
            return
        logger.info('Restarting game %s', self.game_id)
        self._return_pending()
        bag = new_tile_bag(self.rng)
        try:
            players = await self.store.list_players(self.game_id)
            await self.store.update_game(
                self.game_id, board_state=empty_board_state(),
                current_player_id=players[0].id if players else None,
                status='active', last_played_positions=[],
            )
            for player in players:
                drawn, bag = draw(self.config.RACK_SIZE, bag)
                await self.store.update_player(player.id, score=0, rack=drawn)
                if player.id == self.player_id:
                    self.rack = drawn
            await self.store.delete_placements(self.game_id)
        except StoreError as exc:
            logger.error('Failed to restart game: %s', exc)
            raise PersistenceError('Failed to restart game') from exc

        self.score = 0
        self.tile_bag = bag
        self.bag_exhausted = False
        self.bonus_tile = generate_bonus_tile(self.rng)
        self._notify('success', 'Game restarted with new tiles!')

    async def manual_reconnect(self) -> bool:
        return await self.connection.reconnect()

    def dismiss_turn_notification(self):
        self.show_turn_notification = False

    # --- feed ---
    async def handle_event(self, event: FeedEvent):
        result = apply_event(self.replica, event)
        if not result.applied:
            return
        if isinstance(event, GameChanged):
            await self._drop_covered_pending()
        if isinstance(event, PlayersChanged):
            await self._sync_own_row()
        if result.turn_changed:
            await self._on_turn_changed(result.previous_turn)

    async def _on_turn_changed(self, previous: Optional[str]):
        # a submit in flight settles the countdown and pending tiles itself
        if self._submitting:
            return
        self.countdown.cancel()
        # a new assignment consumes whatever bonus was left over
        self.time_bonus = 0
        if previous is not None and previous == self.player_id and self.pending_tiles:
            self._return_pending()
            await self._placements.retract()
        if self.is_my_turn:
            self.show_turn_notification = True
            self.countdown.arm()
            self._notify('your_turn', "It's your turn!")

    async def _drop_covered_pending(self):
        """Hand back pending tiles whose cell the committed board now fills."""
        if self._submitting or not self.pending_tiles:
            return
        covered = [t for t in self.pending_tiles if self.replica.board.is_occupied(t.x, t.y)]
        if not covered:
            return
        logger.info('Returning %d pending tiles covered by a committed word', len(covered))
        self.pending_tiles = [t for t in self.pending_tiles if t not in covered]
        self.rack.extend(t.letter for t in covered)
        await self._placements.publish(self.pending_tiles)

    async def _sync_own_row(self):
        me = self.replica.me
        if me is None:
            return
        self.score = me.score
        if self._submitting:
            return
        if self.pending_tiles:
            held = sorted(self.rack + [t.letter for t in self.pending_tiles])
            if held == sorted(me.rack):
                return
            # dealt a new rack elsewhere (restart); the pending tiles belonged to the old one
            logger.info('Rack replaced in the store, dropping %d pending tiles', len(self.pending_tiles))
            self.pending_tiles = []
            await self._placements.retract()
        self.rack = list(me.rack)

    # --- helpers ---
    def _enter(self, game_id: str, player_id: str, name: str, rack: List[str], bag: List[str]):
        if self.game_id and self.game_id != game_id:
            self.replica.reset()
        self.replica.game_id = game_id
        self.replica.player_id = player_id
        self.player_name = name
        self.rack = list(rack)
        self.tile_bag = list(bag)
        self.pending_tiles = []
        self._placements = LivePlacementPublisher(self.store, game_id, player_id)

    async def _load_snapshot(self, game: GameRecord, players: List[PlayerRecord]):
        revision = max([p.revision for p in players], default=game.revision)
        await self.handle_event(PlayersChanged(players, revision))
        await self.handle_event(GameChanged(game, game.revision))

    def _restock(self, count: int) -> Tuple[List[str], List[str], bool]:
        """Draw replacements without touching the bag; the caller commits them."""
        exhausted = False
        try:
            drawn, remaining = draw_exact(count, self.tile_bag)
        except InsufficientTilesError as exc:
            # partial draw; the rack stays short from here on
            logger.warning('Tile bag exhausted: %s', exc)
            drawn, remaining, exhausted = exc.drawn, [], True
        return with_random_blank(drawn, self.config.RESTOCK_BLANK_CHANCE, self.rng), remaining, exhausted

    async def _roll_back_game(self, prior: dict) -> bool:
        """Undo a game write whose matching player write failed."""
        try:
            await self.store.update_game(self.game_id, **prior)
        except StoreError as exc:
            logger.error('Could not roll back board for game %s, word stays unscored: %s', self.game_id, exc)
            return False
        return True

    def _recover_failed_submit(self, tiles_on_board: bool = False):
        self.time_bonus = 0
        if tiles_on_board:
            # the store kept the word; the tiles are no longer ours to hand back
            self.pending_tiles = []
        elif self.config.RESTORE_TILES_ON_SUBMIT_FAILURE:
            self._return_pending()
        else:
            self.pending_tiles = []
        self.connection.mark_disconnected()

    def _return_pending(self):
        self.rack.extend(t.letter for t in self.pending_tiles)
        self.pending_tiles = []

    def _require_turn(self):
        if not self.game_id or not self.is_my_turn:
            raise NotYourTurnError()

    def _require_name(self, name: str) -> str:
        name = (name or '').strip()
        if not name:
            raise UserInputError('Please enter your name')
        return name

    def _notify(self, kind: str, message: str):
        logger.info('[%s] %s', kind, message)
        if self._on_notice:
            self._on_notice(kind, message)

    def _on_connection_status(self, status: ConnectionStatus):
        if status == 'disconnected':
            self._notify('error', 'Connection lost. Attempting to reconnect...')
        else:
            self._notify('success', 'Reconnected to game!')
