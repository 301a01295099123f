"""Tests for the game engine."""

import json
import logging

import pytest

from crazy8s.config import Config, GameConfig, GameLogConfig
from crazy8s.game.engine import GameEngine
from crazy8s.game.results import ErrorKind
from crazy8s.logging import GameLogger
from crazy8s.models.card import Card, Suit
from crazy8s.models.game_state import GamePhase

C = Card.parse


def codes(*values: str) -> list[Card]:
    return [C(v) for v in values]


class TestSetup:
    """Tests for construction and dealing."""

    def test_too_few_players(self):
        """Test a single player cannot start a game."""
        with pytest.raises(ValueError):
            GameEngine(["p1"])

    def test_too_many_players(self):
        """Test the player limit."""
        with pytest.raises(ValueError):
            GameEngine(["p1", "p2", "p3", "p4", "p5"])

    def test_duplicate_ids(self):
        """Test player ids must be unique."""
        with pytest.raises(ValueError):
            GameEngine(["p1", "p1"])

    def test_not_enough_cards(self):
        """Test hands must fit in one deck."""
        config = Config(game=GameConfig(hand_size=20, max_players=4))
        with pytest.raises(ValueError):
            GameEngine(["p1", "p2", "p3"], config=config)

    def test_default_names(self):
        """Test players get numbered names."""
        engine = GameEngine(["a", "b"], ["Alice"])
        assert engine.players["a"].name == "Alice"
        assert engine.players["b"].name == "Player 2"

    def test_initial_phase(self, make_engine):
        """Test a new engine waits in setup."""
        engine = make_engine(start=False)
        assert engine.phase == GamePhase.SETUP
        assert engine.top_card is None
        assert engine.current_player is None

    def test_start_game_deals(self, engine):
        """Test dealing hands and turning the first card."""
        assert engine.phase == GamePhase.PLAYING
        for player in engine.players.values():
            assert player.hand_size() == 8
        assert len(engine.discard_pile) == 1
        assert len(engine.draw_pile) == 52 - 24 - 1
        assert engine.current_player.player_id == "p1"
        assert engine.current_player_index == 0
        assert engine.direction == 1
        assert engine.draw_stack == 0
        assert engine.declared_suit is None

    def test_start_twice(self, engine):
        """Test starting an active game fails."""
        result = engine.start_game()
        assert not result.success
        assert result.error == ErrorKind.INVALID_STATE_TRANSITION

    def test_seeded_deal_reproducible(self, make_engine):
        """Test the same seed deals the same hands."""
        first = make_engine(seed=5)
        second = make_engine(seed=5)
        assert first.players["p1"].hand == second.players["p1"].hand
        assert first.top_card == second.top_card


class TestPlayCards:
    """Tests for playing cards."""

    def test_play_single_card(self, engine, rig):
        """Test a matching card is played and the turn passes."""
        rig(engine, {"p1": ["H7", "C9"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", C("H7"))

        assert result.success
        assert result.message == "Played 7 of Hearts"
        assert result.cards_played == [C("H7")]
        assert engine.top_card == C("H7")
        assert engine.players["p1"].hand == [C("C9")]
        assert engine.current_player.player_id == "p2"
        assert engine.state.turn_number == 1
        assert result.state.current_player == "p2"

    def test_not_your_turn(self, engine, rig):
        """Test only the current player may play."""
        rig(engine, {"p1": ["H7"], "p2": ["H9"], "p3": ["D4"]}, top="H5")
        before = engine.get_game_state()
        result = engine.play_cards("p2", [C("H9")])

        assert result.error == ErrorKind.NOT_YOUR_TURN
        assert engine.get_game_state() == before

    def test_unknown_player(self, engine):
        """Test unknown players are reported."""
        result = engine.play_cards("zz", [C("H9")])
        assert result.error == ErrorKind.PLAYER_NOT_FOUND

    def test_card_not_in_hand(self, engine, rig):
        """Test playing a card not held."""
        rig(engine, {"p1": ["H7"], "p2": ["HK"], "p3": ["D4"]}, top="H5")
        before = engine.get_game_state("p1")
        result = engine.play_cards("p1", [C("HK")])

        assert result.error == ErrorKind.CARD_NOT_IN_HAND
        assert engine.get_game_state("p1") == before

    def test_illegal_first_card(self, engine, rig):
        """Test the first card must match the top card."""
        rig(engine, {"p1": ["C9"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", [C("C9")])
        assert result.error == ErrorKind.ILLEGAL_FIRST_CARD
        assert engine.players["p1"].hand == [C("C9")]

    def test_play_before_start(self, make_engine):
        """Test playing before the game starts."""
        engine = make_engine(start=False)
        result = engine.play_cards("p1", [C("H9")])
        assert result.error == ErrorKind.INVALID_STATE_TRANSITION

    def test_eight_requires_suit(self, engine, rig):
        """Test an 8 needs a declared suit."""
        rig(engine, {"p1": ["C8", "H3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", [C("C8")])
        assert result.error == ErrorKind.SUIT_DECLARATION_REQUIRED
        assert engine.top_card == C("H5")

    def test_eight_declares_suit(self, engine, rig):
        """Test the declared suit must be followed, then clears."""
        rig(engine, {"p1": ["C8", "H3"], "p2": ["H9", "SK"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", [C("C8")], Suit.SPADES)

        assert result.success
        assert result.message == "Played 8 of Clubs and declared Spades"
        assert engine.declared_suit == Suit.SPADES
        assert engine.get_valid_cards("p2") == [C("SK")]

        assert engine.play_cards("p2", [C("H9")]).error == ErrorKind.ILLEGAL_FIRST_CARD
        assert engine.play_cards("p2", [C("SK")]).success
        assert engine.declared_suit is None

    def test_declared_suit_as_text(self, engine, rig):
        """Test suits may be declared by name."""
        rig(engine, {"p1": ["C8", "H3"], "p2": ["H9"], "p3": ["D4"]}, top="H5")
        assert engine.play_cards("p1", [C("C8")], "diamonds").success
        assert engine.declared_suit == Suit.DIAMONDS

    def test_bad_declared_suit(self, engine, rig):
        """Test an unknown suit name is rejected."""
        rig(engine, {"p1": ["C8", "H3"], "p2": ["H9"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", [C("C8")], "Stars")
        assert result.error == ErrorKind.INVALID_REQUEST

    def test_jack_skips(self, engine, rig):
        """Test a Jack skips the next player."""
        rig(engine, {"p1": ["HJ", "C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        engine.play_cards("p1", [C("HJ")])
        assert engine.current_player.player_id == "p3"

    def test_queen_reverses(self, engine, rig):
        """Test a Queen reverses direction."""
        rig(engine, {"p1": ["HQ", "C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        engine.play_cards("p1", [C("HQ")])
        assert engine.direction == -1
        assert engine.current_player.player_id == "p3"

    def test_reversed_play_continues_backwards(self, engine, rig):
        """Test play moves against seat order after a reverse."""
        rig(
            engine,
            {"p1": ["H3"], "p2": ["S3"], "p3": ["H4", "D4"]},
            top="H5",
            current="p3",
            direction=-1,
        )
        engine.play_cards("p3", [C("H4")])
        assert engine.current_player.player_id == "p2"

    def test_stack_same_rank(self, engine, rig):
        """Test stacking cards of one rank."""
        rig(engine, {"p1": ["H7", "C7", "S7", "D3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", codes("H7", "C7", "S7"))

        assert result.success
        assert result.message == "Played 3 7s: Hearts, Clubs, Spades"
        assert engine.top_card == C("S7")
        assert engine.players["p1"].hand == [C("D3")]
        assert engine.current_player.player_id == "p2"

    def test_illegal_stack(self, engine, rig):
        """Test an Ace and a 2 of different suits cannot stack."""
        rig(engine, {"p1": ["HA", "S2", "D3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        before = engine.get_game_state("p1")
        result = engine.play_cards("p1", codes("HA", "S2"))

        assert result.error == ErrorKind.ILLEGAL_STACK
        assert result.message == (
            "Cannot stack 2 of Spades after Ace of Hearts. Cards must match suit or rank."
        )
        assert engine.get_game_state("p1") == before

    def test_stack_with_turn_control(self, engine, rig):
        """Test two Queens let the player add a card of the new suit."""
        rig(engine, {"p1": ["HQ", "CQ", "C7", "D3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", codes("HQ", "CQ", "C7"))

        assert result.success
        assert engine.direction == 1
        assert engine.current_player.player_id == "p2"

    def test_stack_without_turn_control(self, engine, rig):
        """Test a suit change needs turn control."""
        rig(engine, {"p1": ["HJ", "H7", "D3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", codes("HJ", "H7"))
        assert result.error == ErrorKind.ILLEGAL_STACK

    def test_four_player_jack_stack(self, make_engine, rig):
        """Test three Jacks at a four-player table come back around."""
        engine = make_engine(4)
        rig(
            engine,
            {"p1": ["HJ", "CJ", "SJ", "S4", "D3"], "p2": ["S3"], "p3": ["D4"], "p4": ["C4"]},
            top="H5",
        )
        result = engine.play_cards("p1", codes("HJ", "CJ", "SJ", "S4"))

        assert result.success
        assert engine.current_player.player_id == "p2"

    def test_two_player_jack(self, make_engine, rig):
        """Test a Jack gives the turn back with two players."""
        engine = make_engine(2)
        rig(engine, {"p1": ["HJ", "D3"], "p2": ["S3"]}, top="H5")
        engine.play_cards("p1", [C("HJ")])
        assert engine.current_player.player_id == "p1"


class TestDrawStack:
    """Tests for forced draws and counters."""

    def test_ace_sets_draw_stack(self, engine, rig):
        """Test an Ace makes the next player owe four."""
        rig(engine, {"p1": ["HA", "C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        engine.play_cards("p1", [C("HA")])
        assert engine.draw_stack == 4
        assert engine.current_player.player_id == "p2"
        assert engine.get_valid_cards("p2") == []

    def test_draw_pays_whole_stack(self, engine, rig):
        """Test drawing with a pending stack takes all of it."""
        rig(engine, {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]}, top="HA", current="p2", draw_stack=4)
        result = engine.draw_cards("p2", 1)

        assert result.success
        assert result.from_draw_stack
        assert len(result.drawn_cards) == 4
        assert result.requested == 4
        assert engine.players["p2"].hand_size() == 5
        assert engine.draw_stack == 0
        assert engine.current_player.player_id == "p3"

    def test_counter_with_ace(self, engine, rig):
        """Test any Ace answers an Ace and adds to the stack."""
        rig(engine, {"p1": ["C3"], "p2": ["SA", "S3"], "p3": ["D4"]}, top="HA", current="p2", draw_stack=4)
        result = engine.play_cards("p2", [C("SA")])

        assert result.success
        assert engine.draw_stack == 8
        assert engine.current_player.player_id == "p3"

    def test_counter_with_same_suit_two(self, engine, rig):
        """Test a 2 of the Ace's suit answers it."""
        rig(engine, {"p1": ["C3"], "p2": ["H2", "S3"], "p3": ["D4"]}, top="HA", current="p2", draw_stack=4)
        assert engine.play_cards("p2", [C("H2")]).success
        assert engine.draw_stack == 6

    def test_other_suit_two_cannot_counter(self, engine, rig):
        """Test a 2 of another suit does not answer an Ace."""
        rig(engine, {"p1": ["C3"], "p2": ["S2", "H8"], "p3": ["D4"]}, top="HA", current="p2", draw_stack=4)
        assert engine.play_cards("p2", [C("S2")]).error == ErrorKind.ILLEGAL_FIRST_CARD
        assert (
            engine.play_cards("p2", [C("H8")], Suit.CLUBS).error
            == ErrorKind.ILLEGAL_FIRST_CARD
        )

    def test_stacked_draw_cards(self, engine, rig):
        """Test an Ace and 2 of one suit add up."""
        rig(engine, {"p1": ["HA", "H2", "C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        engine.play_cards("p1", codes("HA", "H2"))
        assert engine.draw_stack == 6
        assert engine.current_player.player_id == "p3"

    @pytest.mark.parametrize("variant", ["enhanced", "classic"])
    def test_draw_stack_returning_to_player_passes(self, make_engine, rig, variant):
        """Test a two-player Ace/2 stack hands the pending draw to the opponent."""
        engine = make_engine(2, variant=variant)
        rig(engine, {"p1": ["HA", "H2", "C3"], "p2": ["S3"]}, top="H5")

        assert engine.play_cards("p1", codes("HA", "H2")).success
        assert engine.draw_stack == 6
        assert engine.current_player.player_id == "p2"
        assert engine.get_valid_cards("p2") == []

        assert engine.draw_cards("p2").success
        assert engine.players["p2"].hand_size() == 7
        assert engine.players["p1"].hand == [C("C3")]
        assert engine.current_player.player_id == "p1"

    def test_full_circle_of_aces_passes(self, make_engine, rig):
        """Test four Aces in a four-player game leave the next player owing all sixteen."""
        engine = make_engine(4)
        rig(
            engine,
            {"p1": ["HA", "SA", "CA", "DA", "C3"], "p2": ["S3"], "p3": ["D4"], "p4": ["H6"]},
            top="H5",
        )

        assert engine.play_cards("p1", codes("HA", "SA", "CA", "DA")).success
        assert engine.draw_stack == 16
        assert engine.current_player.player_id == "p2"

        result = engine.draw_cards("p2")
        assert len(result.drawn_cards) == 16
        assert engine.players["p2"].hand_size() == 17
        assert engine.players["p1"].hand == [C("C3")]
        assert engine.current_player.player_id == "p3"

    def test_draw_stack_cap(self, make_engine, rig):
        """Test the pending draw never exceeds the configured cap."""
        engine = make_engine(start=False)
        engine.config.game.max_draw_stack = 5
        engine.start_game()
        rig(engine, {"p1": ["C3"], "p2": ["SA", "S3"], "p3": ["D4"]}, top="HA", current="p2", draw_stack=4)
        engine.play_cards("p2", [C("SA")])
        assert engine.draw_stack == 5


class TestDrawCards:
    """Tests for drawing cards."""

    def test_voluntary_draw(self, engine, rig):
        """Test drawing one card ends the turn."""
        rig(engine, {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5", draw_top=["DK"])
        result = engine.draw_cards("p1")

        assert result.success
        assert result.drawn_cards == [C("DK")]
        assert not result.from_draw_stack
        assert engine.players["p1"].hand == [C("C3"), C("DK")]
        assert engine.current_player.player_id == "p2"
        assert engine.state.turn_number == 1

    def test_draw_several(self, engine, rig):
        """Test drawing more than one card on request."""
        rig(engine, {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5", draw_top=["DK", "D9"])
        result = engine.draw_cards("p1", 2)
        assert result.drawn_cards == [C("DK"), C("D9")]

    def test_invalid_count(self, engine):
        """Test draw count must be positive."""
        assert engine.draw_cards("p1", 0).error == ErrorKind.INVALID_REQUEST

    def test_draw_not_your_turn(self, engine):
        """Test only the current player may draw."""
        assert engine.draw_cards("p2").error == ErrorKind.NOT_YOUR_TURN

    def test_reshuffle(self, engine, rig):
        """Test the discard pile is reshuffled when the draw pile is empty."""
        rig(engine, {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5", leftover="discard")
        assert len(engine.draw_pile) == 0
        result = engine.draw_cards("p1")

        assert result.success
        assert result.reshuffled
        assert engine.discard_pile == [C("H5")]
        assert len(engine.draw_pile) == 52 - 3 - 1 - 1
        assert engine.card_count() == 52

    def test_degraded_draw(self, engine, rig, caplog):
        """Test owing more cards than exist draws what is left."""
        rig(
            engine,
            {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]},
            top="HA",
            draw_top=["DK"],
            leftover="p3",
            current="p2",
            draw_stack=4,
        )
        with caplog.at_level(logging.WARNING):
            result = engine.draw_cards("p2")

        assert result.success
        assert result.drawn_cards == [C("DK")]
        assert result.requested == 4
        assert engine.draw_stack == 0
        assert "only 1 were available" in caplog.text

    def test_deck_exhausted(self, engine, rig):
        """Test drawing with no cards anywhere fails without change."""
        rig(engine, {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5", leftover="p3")
        before = engine.get_game_state("p1")
        result = engine.draw_cards("p1")

        assert result.error == ErrorKind.DECK_EXHAUSTED
        assert engine.get_game_state("p1") == before


class TestSafeAndFinish:
    """Tests for players going safe and rounds finishing."""

    def test_player_goes_safe(self, engine, rig):
        """Test emptying the hand makes a player safe."""
        rig(engine, {"p1": ["H7"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        result = engine.play_cards("p1", [C("H7")])

        assert result.player_safe
        assert not result.game_won
        assert engine.players["p1"].is_safe
        assert engine.state.finish_order == ["p1"]
        assert engine.phase == GamePhase.PLAYING
        assert engine.active_player_ids == ["p2", "p3"]
        assert engine.current_player.player_id == "p2"
        assert engine.current_player_index == 0

    def test_safe_player_cannot_act(self, engine, rig):
        """Test safe players are out of the rotation."""
        rig(engine, {"p1": ["H7"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        engine.play_cards("p1", [C("H7")])
        result = engine.draw_cards("p1")
        assert result.error == ErrorKind.NOT_YOUR_TURN
        assert "safe" in result.message

    def test_safe_with_control_passes_on(self, make_engine, rig):
        """Test the turn moves on when a player keeps control with an empty hand."""
        engine = make_engine(4)
        rig(
            engine,
            {"p1": ["HJ", "CJ", "SJ"], "p2": ["S3"], "p3": ["D4"], "p4": ["C4"]},
            top="H5",
        )
        result = engine.play_cards("p1", codes("HJ", "CJ", "SJ"))

        assert result.player_safe
        assert engine.current_player.player_id == "p2"

    def test_skip_over_safe_player(self, engine, rig):
        """Test turn advancement skips safe players."""
        rig(engine, {"p1": ["C3"], "p2": ["H7"], "p3": ["D4", "D5"]}, top="H5", current="p2")
        engine.play_cards("p2", [C("H7")])
        assert engine.current_player.player_id == "p3"
        engine.draw_cards("p3")
        assert engine.current_player.player_id == "p1"
        engine.draw_cards("p1")
        assert engine.current_player.player_id == "p3"

    def test_last_player_eliminated(self, make_engine, rig):
        """Test the round ends and the last player is eliminated."""
        engine = make_engine(2)
        rig(engine, {"p1": ["H7"], "p2": ["S3", "D4"]}, top="H5")
        result = engine.play_cards("p1", [C("H7")])

        assert result.game_won
        assert result.winner == "p1"
        assert engine.phase == GamePhase.FINISHED
        assert engine.current_player is None
        assert engine.players["p2"].is_eliminated
        assert engine.players["p2"].hand == []
        assert engine.state.elimination_order == ["p2"]
        assert engine.get_winner().player_id == "p1"
        assert engine.get_standings() == ["p1", "p2"]
        assert engine.card_count() == 52

    def test_no_play_after_finish(self, make_engine, rig):
        """Test a finished round accepts no moves."""
        engine = make_engine(2)
        rig(engine, {"p1": ["H7"], "p2": ["S3"]}, top="H5")
        engine.play_cards("p1", [C("H7")])
        assert engine.draw_cards("p2").error == ErrorKind.INVALID_STATE_TRANSITION

    def test_winner_before_finish(self, engine):
        """Test there is no winner while playing."""
        assert engine.get_winner() is None


class TestEliminatePlayer:
    """Tests for removing players."""

    def test_eliminate_current_player(self, engine, rig):
        """Test the turn moves on and the hand returns to the draw pile."""
        rig(engine, {"p1": ["C3", "C4"], "p2": ["S3"], "p3": ["D4"]}, top="HA", draw_stack=4)
        draw_size = len(engine.draw_pile)
        result = engine.eliminate_player("p1")

        assert result.success
        assert engine.players["p1"].is_eliminated
        assert engine.players["p1"].hand == []
        assert len(engine.draw_pile) == draw_size + 2
        assert engine.current_player.player_id == "p2"
        assert engine.draw_stack == 0
        assert engine.active_player_ids == ["p2", "p3"]
        assert engine.card_count() == 52

    def test_eliminate_other_player(self, engine, rig):
        """Test the turn stays put when someone else leaves."""
        rig(engine, {"p1": ["C3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
        engine.eliminate_player("p2")
        assert engine.current_player.player_id == "p1"
        engine.draw_cards("p1")
        assert engine.current_player.player_id == "p3"

    def test_eliminate_to_last_player(self, engine):
        """Test the round finishes when one player is left."""
        engine.eliminate_player("p2")
        engine.eliminate_player("p3")

        assert engine.phase == GamePhase.FINISHED
        assert engine.get_winner().player_id == "p1"
        assert not engine.players["p1"].is_eliminated
        assert engine.get_standings() == ["p1", "p3", "p2"]
        assert engine.tournament_winner.player_id == "p1"

    def test_eliminate_twice(self, engine):
        """Test eliminating an eliminated player is rejected."""
        engine.eliminate_player("p2")
        assert engine.eliminate_player("p2").error == ErrorKind.INVALID_REQUEST

    def test_eliminate_unknown(self, engine):
        """Test unknown ids are reported."""
        assert engine.eliminate_player("zz").error == ErrorKind.PLAYER_NOT_FOUND

    def test_eliminated_player_cannot_act(self, engine):
        """Test eliminated players may not play."""
        engine.eliminate_player("p3")
        assert engine.draw_cards("p3").error == ErrorKind.NOT_YOUR_TURN


class TestRounds:
    """Tests for tournament rounds."""

    def finish_first_round(self, engine, rig):
        rig(engine, {"p1": ["H7"], "p2": ["H9"], "p3": ["D4", "D5"]}, top="H5")
        engine.play_cards("p1", [C("H7")])
        engine.play_cards("p2", [C("H9")])

    def test_round_standings(self, engine, rig):
        """Test standings after a full round."""
        self.finish_first_round(engine, rig)

        assert engine.phase == GamePhase.FINISHED
        assert engine.get_standings() == ["p1", "p2", "p3"]
        assert engine.players["p3"].is_eliminated
        assert engine.tournament_winner is None

    def test_next_round_while_playing(self, engine):
        """Test a new round cannot start mid-round."""
        result = engine.start_next_round()
        assert result.error == ErrorKind.INVALID_STATE_TRANSITION

    def test_start_next_round(self, engine, rig):
        """Test the next round re-deals the remaining players."""
        self.finish_first_round(engine, rig)
        result = engine.start_next_round()

        assert result.success
        assert engine.round_number == 2
        assert engine.phase == GamePhase.PLAYING
        assert engine.state.finish_order == []
        assert engine.state.turn_number == 0
        assert engine.players["p1"].hand_size() == 8
        assert engine.players["p2"].hand_size() == 8
        assert not engine.players["p1"].is_safe
        assert engine.players["p3"].hand == []
        assert engine.active_player_ids == ["p1", "p2"]
        assert len(engine.draw_pile) == 52 - 16 - 1
        assert engine.card_count() == 52

    def test_tournament_to_the_end(self, engine, rig):
        """Test rounds run until one player is left."""
        self.finish_first_round(engine, rig)
        engine.start_next_round()
        rig(engine, {"p1": ["H7"], "p2": ["D4"]}, top="H5")
        engine.play_cards("p1", [C("H7")])

        assert engine.tournament_winner.player_id == "p1"
        assert engine.get_standings() == ["p1", "p2", "p3"]
        result = engine.start_next_round()
        assert result.error == ErrorKind.INVALID_STATE_TRANSITION


class TestSnapshot:
    """Tests for read-only snapshots."""

    def test_snapshot_idempotent(self, engine):
        """Test taking snapshots changes nothing."""
        assert engine.get_game_state("p1") == engine.get_game_state("p1")

    def test_viewer_hand_only(self, engine):
        """Test only the viewer's hand is included."""
        state = engine.get_game_state("p2")
        assert state.player("p2").hand == tuple(engine.players["p2"].hand)
        assert state.player("p1").hand is None
        assert state.player("p1").hand_size == 8
        assert state.player("p1").is_current_player

    def test_snapshot_fields(self, engine):
        """Test snapshot mirrors the table."""
        state = engine.get_game_state()
        assert state.game_id == engine.game_id
        assert state.phase == GamePhase.PLAYING
        assert state.top_card == engine.top_card
        assert state.draw_pile_size == len(engine.draw_pile)
        assert state.discard_pile_size == 1
        assert state.winner is None

    def test_snapshot_frozen(self, engine):
        """Test snapshots cannot be modified."""
        state = engine.get_game_state()
        with pytest.raises(Exception):
            state.draw_stack = 3


class TestGameLog:
    """Tests for engine output to the JSONL game log."""

    def test_events_written(self, make_engine, rig, tmp_path):
        """Test plays and draws are logged with trace events."""
        path = tmp_path / "game.jsonl"
        with GameLogger(GameLogConfig(enabled=True, output_path=str(path), trace=True)) as game_logger:
            engine = make_engine(game_logger=game_logger)
            rig(engine, {"p1": ["H7", "C7", "D3"], "p2": ["S3"], "p3": ["D4"]}, top="H5")
            engine.play_cards("p1", codes("H7", "C7"))
            engine.draw_cards("p2")

        events = [json.loads(line) for line in path.read_text().splitlines()]
        types = [e["type"] for e in events]
        assert types[0] == "game_start"
        assert "trace" in types
        play = next(e for e in events if e["type"] == "play")
        assert play["cards"] == "H7,C7"
        assert play["state"]["next_player"] == "p2"
        draw = next(e for e in events if e["type"] == "draw")
        assert draw["player"] == "p2"
