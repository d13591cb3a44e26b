"""Property-based tests for the game engines."""

import random

from hypothesis import given, settings, strategies as st

from gamebox.core.cards import create_deck, create_multiple_decks, shuffle_deck
from gamebox.games import freecell, game2048, maze, minesweeper, reversi, sudoku, tictactoe
from gamebox.games.freecell import PileKind, PileRef

seeds = st.integers(min_value=0, max_value=100_000)


@given(seed=seeds, decks=st.integers(min_value=1, max_value=3))
def test_shuffle_preserves_cards(seed: int, decks: int) -> None:
    """Property: Shuffling permutes the deck without adding or losing cards."""
    deck = create_multiple_decks(decks)
    shuffled = shuffle_deck(deck, random.Random(seed))
    assert sorted(c.id for c in shuffled) == sorted(c.id for c in deck)
    assert len(set(c.id for c in shuffled)) == 52 * decks


@given(
    seed=seeds,
    difficulty=st.sampled_from(["easy", "medium", "hard"]),
    data=st.data(),
)
def test_first_click_is_always_safe(seed: int, difficulty: str, data: st.DataObject) -> None:
    """Property: The first click and its neighbours never hold a mine."""
    config = minesweeper.get_game_config(difficulty)
    row = data.draw(st.integers(min_value=0, max_value=config.rows - 1))
    col = data.draw(st.integers(min_value=0, max_value=config.cols - 1))
    board = minesweeper.create_board(difficulty, row, col, rng=random.Random(seed))
    assert minesweeper.mine_count(board) == config.mines
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            r, c = row + dr, col + dc
            if 0 <= r < config.rows and 0 <= c < config.cols:
                assert not board[r][c].is_mine
    revealed = minesweeper.reveal_cell(board, row, col)
    assert not minesweeper.check_loss(revealed)


@given(seed=seeds, clicks=st.lists(st.tuples(st.integers(0, 8), st.integers(0, 8)), max_size=40))
def test_win_and_loss_are_exclusive(seed: int, clicks: list) -> None:
    """Property: A board is never both won and lost."""
    board = minesweeper.create_board("easy", 4, 4, rng=random.Random(seed))
    for r, c in clicks:
        board = minesweeper.reveal_cell(board, r, c)
        assert not (minesweeper.check_win(board) and minesweeper.check_loss(board))
        if minesweeper.check_loss(board):
            break


@settings(max_examples=20, deadline=None)
@given(seed=seeds, difficulty=st.sampled_from(["easy", "medium", "hard"]))
def test_generated_sudoku_is_consistent(seed: int, difficulty: str) -> None:
    """Property: Clues match a valid solution and the clue count fits the difficulty."""
    puzzle = sudoku.generate_puzzle(difficulty, random.Random(seed))
    solution = puzzle.solution
    digits = set(range(1, 10))
    for i in range(9):
        assert set(solution[i]) == digits
        assert {solution[r][i] for r in range(9)} == digits
        box_r, box_c = 3 * (i // 3), 3 * (i % 3)
        assert {solution[box_r + r][box_c + c] for r in range(3) for c in range(3)} == digits
    clues = [cell for row in puzzle.board for cell in row if cell.is_fixed]
    assert len(clues) == sudoku.get_sudoku_config(difficulty)
    for r in range(9):
        for c in range(9):
            cell = puzzle.board[r][c]
            assert cell.value == (solution[r][c] if cell.is_fixed else 0)


@given(seed=seeds, rows=st.integers(1, 12), cols=st.integers(1, 12))
def test_maze_is_a_perfect_maze(seed: int, rows: int, cols: int) -> None:
    """Property: Carved mazes are spanning trees; the exit is always reachable."""
    grid = maze.carve_maze(rows, cols, random.Random(seed))
    openings = sum(
        (not cell.walls.right) + (not cell.walls.bottom)
        for row in grid
        for cell in row
    )
    assert openings == rows * cols - 1
    path = maze.shortest_path(grid, (0, 0), (rows - 1, cols - 1))
    assert path is not None
    assert path[0] == (0, 0) and path[-1] == (rows - 1, cols - 1)


@given(
    seed=seeds,
    directions=st.lists(st.sampled_from(list(game2048.Direction)), min_size=1, max_size=30),
)
def test_swipes_conserve_tile_sum(seed: int, directions: list) -> None:
    """Property: Sliding and merging never changes the sum of the tiles."""
    rng = random.Random(seed)
    board = game2048.init_board("medium", rng)
    for direction in directions:
        before = sum(sum(row) for row in board)
        result = game2048.swipe(board, direction)
        assert sum(sum(row) for row in result.board) == before
        assert result.score % 2 == 0
        board = game2048.add_random_tile(result.board, "medium", rng) if result.moved else board


@settings(max_examples=25, deadline=None)
@given(seed=seeds)
def test_perfect_tictactoe_never_loses(seed: int) -> None:
    """Property: Minimax play as the second player never loses to a random mover."""
    rng = random.Random(seed)
    board = tictactoe.create_board()
    mark = tictactoe.Mark.X
    while tictactoe.check_winner(board) is None and not tictactoe.is_draw(board):
        if mark is tictactoe.Mark.X:
            move = tictactoe.get_random_move(board, rng)
        else:
            move = tictactoe.get_ai_move(board, "easy", rng, optimal_chance=1.0, ai=mark)
        board = tictactoe.place_mark(board, move, mark)
        mark = mark.opponent
    assert tictactoe.check_winner(board) is not tictactoe.Mark.X


@settings(max_examples=30, deadline=None)
@given(seed=seeds)
def test_reversi_random_play(seed: int) -> None:
    """Property: Every move adds one disc, flips are real and the game ends."""
    rng = random.Random(seed)
    state = reversi.initialize_game()
    while not state.game_over:
        move = rng.choice(state.valid_moves)
        mover = state.current_player
        before = reversi.count_pieces(state.board)
        assert state.board[move.row][move.col] is None
        state = reversi.play_move(state, move.row, move.col)
        after = reversi.count_pieces(state.board)
        assert after.black + after.white == before.black + before.white + 1
        assert after.of(mover) == before.of(mover) + 1 + len(move.flips)
    assert state.winner is not None


@settings(max_examples=30, deadline=None)
@given(seed=seeds)
def test_freecell_conserves_cards(seed: int) -> None:
    """Property: Arbitrary move attempts never create or lose a card."""
    rng = random.Random(seed)
    state = freecell.initialize_freecell(rng)
    kinds = list(PileKind)
    for _ in range(200):
        source = PileRef(rng.choice(kinds), rng.randrange(8))
        target = PileRef(rng.choice(kinds), rng.randrange(8))
        state = freecell.try_move(state, source, rng.randrange(8), target)
        assert freecell.card_count(state) == 52
        placed = [c for col in state.tableau for c in col]
        placed += [c for f in state.foundations for c in f]
        placed += [c for c in state.free_cells if c is not None]
        assert {(c.rank, c.suit) for c in placed} == {(c.rank, c.suit) for c in create_deck()}
