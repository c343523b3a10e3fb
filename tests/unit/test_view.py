"""
Unit tests for the client view of a board.
"""
import pytest

from mines_server import engine
from mines_server.types import GameConfig


class TestRenderView:
    """Test what clients are shown while playing and after the game ends."""

    def test_unplayed_board_is_all_hidden(self) -> None:
        board = engine.create_board(GameConfig(4, 3, 2))
        view = engine.render_view(board)
        assert view['grid'] == ['?'] * 12
        assert view['width'] == 4
        assert view['height'] == 3
        assert view['mines'] == 2
        assert view['flags'] == 0
        assert 'ended_at' not in view
        assert 'won' not in view

    def test_in_progress_symbols(self, make_board) -> None:
        board = make_board(4, 3, mines=[(3, 0), (3, 2)])
        engine.apply_move(board, 0, 0, False)
        engine.apply_move(board, 3, 0, True)
        assert engine.render_view(board)['grid'] == [
            '', '', '1', '!',
            '', '', '2', '?',
            '', '', '1', '?',
        ]

    def test_hidden_number_stays_hidden(self, make_board) -> None:
        board = make_board(3, 1, mines=[(2, 0)])
        engine.apply_move(board, 1, 0, False)
        assert engine.render_view(board)['grid'] == ['?', '1', '?']

    def test_lost_view_exposes_mines_and_bad_flags(self, make_board) -> None:
        board = make_board(3, 3, mines=[(0, 0), (2, 2)])
        engine.apply_move(board, 2, 2, True)
        engine.apply_move(board, 1, 0, True)
        engine.apply_move(board, 0, 0, False)
        view = engine.render_view(board)
        assert view['grid'] == [
            '9', 'X', '?',
            '?', '?', '?',
            '?', '?', '!',
        ]
        assert 'ended_at' in view
        assert 'won' not in view
        assert view['flags'] == 2

    def test_won_view_marks_mines_and_reports_all_flags(self, make_board) -> None:
        board = make_board(3, 1, mines=[(0, 0)])
        engine.apply_move(board, 2, 0, False)
        view = engine.render_view(board)
        assert view['grid'] == ['!', '1', '']
        assert view['won'] is True
        assert view['flags'] == 1
        assert 'ended_at' in view

    def test_view_has_exactly_the_wire_fields(self, make_board) -> None:
        board = make_board(2, 1, mines=[(1, 0)])
        assert set(engine.render_view(board)) == {
            'started_at', 'mines', 'width', 'height', 'flags', 'grid',
        }
        engine.apply_move(board, 0, 0, False)
        assert set(engine.render_view(board)) == {
            'started_at', 'mines', 'width', 'height', 'flags', 'grid',
            'ended_at', 'won',
        }

    def test_render_is_pure(self, make_board) -> None:
        board = make_board(3, 3, mines=[(1, 1)])
        engine.apply_move(board, 0, 0, False)
        first = engine.render_view(board)
        assert engine.render_view(board) == first
        assert board.tile(1, 1).is_revealed is False

    @pytest.mark.parametrize("won,grid", [
        (True, ['!', '1', '?']),
        (False, ['9', '1', '?']),
    ])
    def test_forced_end(self, make_board, won, grid) -> None:
        board = make_board(3, 1, mines=[(0, 0)])
        engine.apply_move(board, 1, 0, False)
        engine.force_end(board, won)
        assert engine.render_view(board)['grid'] == grid
