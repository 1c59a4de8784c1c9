from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card, build_deck, cards_to_dicts, deal_one
from .errors import InvalidAction, InvalidPlayer, OutOfTurn
from .evaluator import HandRank, evaluate
from .models import Action, ActionResult, Call, Pack, Phase, Player, Raise, TableConfig, Winner

# GameEngine keeps one hand of Teen Patti in memory. No networking lives
# here, only cards, chip accounting and turn order.

CARDS_PER_HAND = 3


class GameEngine:
    """Single-pass state machine for one hand: BETTING -> (SHOWDOWN) -> FINISHED."""

    def __init__(
        self,
        roster: Sequence[Tuple[str, str]],
        config: Optional[TableConfig] = None,
        seed: Optional[int] = None,
        hand_id: str = "",
    ) -> None:
        self.config = config or TableConfig()
        self.hand_id = hand_id
        self.players: List[Player] = [Player(id=pid, name=name) for pid, name in roster]
        self.deck: List[Card] = build_deck(seed)
        self.pot = 0
        self.current_bet = self.config.min_bet
        self.turn_index = 0
        self.round = 1
        self.phase = Phase.BETTING
        self.dealt = False
        self.settled = False

    # Hand lifecycle --------------------------------------------------

    def deal_hand(self) -> None:
        if self.dealt:
            raise RuntimeError("Hand already dealt")
        seated = [player for player in self.players if player.active]
        for _ in range(CARDS_PER_HAND):
            for player in seated:
                player.hand.append(deal_one(self.deck))

        for player in seated:
            self._commit_chips(player, self.config.ante)
            player.current_bet = self.config.ante
        self.dealt = True

    def _commit_chips(self, player: Player, amount: int) -> None:
        player.total_committed += amount
        self.pot += amount

    # Action handling -------------------------------------------------

    def current_player(self) -> Optional[Player]:
        if self.phase != Phase.BETTING:
            return None
        return self.players[self.turn_index]

    def apply_action(self, player_id: str, action: Action) -> ActionResult:
        if not self.dealt:
            raise RuntimeError("Hand not dealt")
        player = self._find_player(player_id)
        if player is None or not player.in_hand:
            raise InvalidPlayer("Invalid player or player not in game")
        if self.phase != Phase.BETTING:
            raise InvalidAction("Betting is closed")
        if self.players[self.turn_index] is not player:
            raise OutOfTurn("Not your turn")

        # Each branch records what happened so the room can broadcast it.
        if isinstance(action, Pack):
            player.folded = True
            player.active = False
            result = ActionResult(player.id, player.name, "packed", 0)
        elif isinstance(action, Call):
            self._commit_chips(player, self.current_bet - player.current_bet)
            player.current_bet = self.current_bet
            result = ActionResult(player.id, player.name, "call", self.current_bet)
        elif isinstance(action, Raise):
            new_bet = max(action.amount, self.current_bet * 2)
            self._commit_chips(player, new_bet - player.current_bet)
            player.current_bet = new_bet
            self.current_bet = new_bet
            result = ActionResult(player.id, player.name, "raise", new_bet)
        else:
            raise InvalidAction(f"Unsupported action {action!r}")

        self._advance_turn()
        return result

    def _advance_turn(self) -> None:
        remaining = self.active_players()
        if len(remaining) < 2:
            self.phase = Phase.FINISHED
            return

        # At least two seats are in the hand, so this terminates.
        idx = self.turn_index
        while True:
            idx = (idx + 1) % len(self.players)
            if self.players[idx].in_hand:
                break
        self.turn_index = idx

        if all(player.current_bet == self.current_bet for player in remaining):
            self.round += 1
            if self.round > self.config.max_rounds or len(remaining) == 2:
                self.phase = Phase.SHOWDOWN

    def remove_player(self, player_id: str) -> bool:
        """Drop a seat outside the turn flow. The caller follows up with resync_turn()."""
        player = self._find_player(player_id)
        if player is None:
            return False
        player.active = False
        player.folded = True
        return True

    def resync_turn(self) -> None:
        if self.phase != Phase.BETTING:
            return
        if len(self.active_players()) < 2:
            self.phase = Phase.FINISHED
            return
        if not self.players[self.turn_index].in_hand:
            self._advance_turn()

    # Settlement ------------------------------------------------------

    def is_over(self) -> bool:
        return self.phase != Phase.BETTING or len(self.active_players()) <= 1

    def settle(self) -> List[Winner]:
        if self.phase == Phase.BETTING:
            raise RuntimeError("Hand still in betting")
        if self.settled:
            raise RuntimeError("Hand already settled")
        self.settled = True
        self.phase = Phase.FINISHED

        remaining = self.active_players()
        if not remaining:
            return []
        if len(remaining) == 1:
            survivor = remaining[0]
            return [Winner(survivor.id, survivor.name, self.pot)]

        scores: Dict[str, HandRank] = {player.id: evaluate(player.hand) for player in remaining}
        best = max(scores.values())
        winners = [player for player in remaining if scores[player.id] == best]
        # Floor split; the remainder stays unawarded.
        share = self.pot // len(winners)
        return [Winner(player.id, player.name, share, scores[player.id], list(player.hand)) for player in winners]

    # Public/Snapshot helpers -----------------------------------------

    def active_players(self) -> List[Player]:
        return [player for player in self.players if player.in_hand]

    def _find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def public_state(self) -> Dict[str, object]:
        return {
            "hand_id": self.hand_id,
            "players": [player.public_view() for player in self.players],
            "pot": self.pot,
            "current_player_index": self.turn_index,
            "current_bet": self.current_bet,
            "round": self.round,
            "phase": self.phase.value,
        }

    def private_hand(self, player_id: str) -> List[Dict[str, object]]:
        player = self._find_player(player_id)
        if player is None:
            return []
        return cards_to_dicts(player.hand)

    def all_cards(self) -> Dict[str, List[Dict[str, object]]]:
        return {player.id: cards_to_dicts(player.hand) for player in self.players}
