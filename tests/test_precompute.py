"""Unit tests for board precomputation and the validity index."""

from unittest.mock import AsyncMock

import pytest

from boxtobox.board.precompute import (
    BoardPrecomputer,
    CellQuery,
    build_validity_index,
    find_player_cells,
    grid_keys,
    validate_against_precomputed,
)
from boxtobox.matching.local_index import LocalAchievementIndex
from boxtobox.matching.matcher import CriterionMatcher
from boxtobox.matching.resolver import EntityResolver
from boxtobox.models import AthleteRecord, AthleteRef, BoardPrecomputation, CellResult, IndexedAthlete

from tests.helpers import entity

ENTITIES = {
    "Argentina": entity("Q414", "Argentina", "country"),
    "Brazil": entity("Q155", "Brazil", "country"),
    "Spain": entity("Q29", "Spain", "country"),
    "Barcelona": entity("Q7156", "Barcelona", "club"),
    "Real Madrid": entity("Q8682", "Real Madrid", "club"),
    "PSG": entity("Q483020", "PSG", "club"),
}

MESSI = AthleteRef(id="Q615", label="Lionel Messi")
NEYMAR = AthleteRef(id="Q142794", label="Neymar")


def make_matcher(cells: dict):
    """cells maps (row_id, col_id) -> athletes or an exception to raise."""
    matcher = AsyncMock()

    async def resolve_best(label, primary, fallback):
        return ENTITIES.get(label)

    async def match_both(row_id, col_id, row_type="country", col_type="club"):
        outcome = cells.get((row_id, col_id), [])
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    matcher.resolve_best = AsyncMock(side_effect=resolve_best)
    matcher.match_both = AsyncMock(side_effect=match_both)
    return matcher


def make_precomputer(matcher, records=()):
    local_index = LocalAchievementIndex.from_records(records)
    return BoardPrecomputer(matcher, CellQuery(matcher, local_index))


class TestGridKeys:

    def test_row_major(self):
        assert [k for _, _, k in grid_keys()] == [
            "0-0", "0-1", "0-2", "1-0", "1-1", "1-2", "2-0", "2-1", "2-2",
        ]


class TestComputeCell:

    @pytest.mark.asyncio
    async def test_achievement_routes_to_local_index(self):
        matcher = make_matcher({})
        records = [
            AthleteRecord(name="Lionel Messi", id="MANUAL_lionel_messi", country="Argentina", ballon_dor=True),
            AthleteRecord(name="Kaká", id="MANUAL_kaká", country="Brazil", ballon_dor=True),
        ]
        precomputer = make_precomputer(matcher, records)

        cell = await precomputer.compute_cell("Argentina", "Ballon d'Or Winner")

        assert [a.label for a in cell.athletes] == ["Lionel Messi"]
        assert cell.col_entity.id == "BALLON_DOR"
        matcher.match_both.assert_not_called()
        matcher.resolve_best.assert_awaited_once_with("Argentina", "country", "club")

    @pytest.mark.asyncio
    async def test_live_cell_uses_entity_types(self):
        matcher = make_matcher({("Q414", "Q7156"): [MESSI]})
        cell = await make_precomputer(matcher).compute_cell("Argentina", "Barcelona")

        assert cell.athletes == [MESSI]
        assert cell.count == 1
        matcher.match_both.assert_awaited_once_with("Q414", "Q7156", row_type="country", col_type="club")

    @pytest.mark.asyncio
    async def test_unresolved_label(self):
        matcher = make_matcher({})
        cell = await make_precomputer(matcher).compute_cell("Atlantis", "Barcelona")

        assert cell.athletes == []
        assert cell.row_entity is None
        assert cell.message == "Could not resolve both labels"
        matcher.match_both.assert_not_called()


class TestPrecomputeBoard:

    ROWS = ["Argentina", "Brazil", "Spain"]
    COLS = ["Barcelona", "Real Madrid", "PSG"]

    @pytest.mark.asyncio
    async def test_rejects_wrong_size(self):
        with pytest.raises(ValueError):
            await make_precomputer(make_matcher({})).precompute_board(["Argentina"], self.COLS)

    @pytest.mark.asyncio
    async def test_failing_cell_degrades_to_empty(self):
        matcher = make_matcher({
            ("Q414", "Q7156"): [MESSI],
            ("Q155", "Q8682"): RuntimeError("boom"),
            ("Q155", "Q483020"): [NEYMAR],
        })

        board = await make_precomputer(matcher).precompute_board(self.ROWS, self.COLS)

        assert len(board.cells) == 9
        assert board.cells["1-1"].count == 0
        assert board.cells["0-0"].athletes == [MESSI]
        assert board.cells["1-2"].athletes == [NEYMAR]
        assert board.player_count == 2

    @pytest.mark.asyncio
    async def test_valid_cells_are_row_major(self):
        matcher = make_matcher({
            ("Q29", "Q8682"): [MESSI],
            ("Q155", "Q483020"): [MESSI],
            ("Q414", "Q7156"): [MESSI],
        })

        board = await make_precomputer(matcher).precompute_board(self.ROWS, self.COLS)

        assert len(board.all_athletes) == 1
        assert board.all_athletes[0].valid_cells == ["0-0", "1-2", "2-1"]


class TestValidityIndex:

    def test_names_are_case_folded(self):
        cells = {
            "0-0": CellResult(None, None, [AthleteRef("Q1", "Xavi")]),
            "2-2": CellResult(None, None, [AthleteRef("Q1", "XAVI")]),
        }
        index = build_validity_index(cells)
        assert len(index) == 1
        assert index[0].label == "Xavi"
        assert index[0].valid_cells == ["0-0", "2-2"]

    def test_find_player_exact_before_partial(self):
        board = BoardPrecomputation(
            cells={},
            all_athletes=[
                IndexedAthlete("Q1", "Lionel Messi Jr", ["0-0"]),
                IndexedAthlete("Q615", "Lionel Messi", ["1-1"]),
            ],
        )
        assert find_player_cells("lionel messi", board).id == "Q615"
        assert find_player_cells("Messi Jr", board).id == "Q1"
        assert find_player_cells("Pelé", board) is None
        assert find_player_cells("", board) is None

    def test_validate_against_precomputed(self):
        cell = CellResult(None, None, [MESSI, NEYMAR])
        assert validate_against_precomputed("neymar", cell) == NEYMAR
        assert validate_against_precomputed("Messi", cell) == MESSI
        assert validate_against_precomputed("Kaká", cell) is None
        assert validate_against_precomputed("Messi", None) is None


class TestClubAliasCells:
    """Achievement cells against clubs typed by nickname."""

    RECORDS = [
        AthleteRecord(name="Rodri", id="MANUAL_rodri", country="Spain", clubs=["Manchester City"], ballon_dor=True),
        AthleteRecord(name="Michael Owen", id="MANUAL_michael_owen", country="England",
                      clubs=["Liverpool", "Real Madrid", "Manchester United"], ballon_dor=True),
        AthleteRecord(name="Fabio Cannavaro", id="MANUAL_fabio_cannavaro", country="Italy",
                      clubs=["Inter Milan", "Juventus", "Real Madrid"], ballon_dor=True),
        AthleteRecord(name="Kaká", id="MANUAL_kaká", country="Brazil", clubs=["AC Milan", "Real Madrid"], ballon_dor=True),
    ]

    def make_precomputer(self):
        client = AsyncMock()
        client.language = "en"
        client.execute_sparql = AsyncMock(return_value=[])
        matcher = CriterionMatcher(client, EntityResolver(client))
        local_index = LocalAchievementIndex.from_records(self.RECORDS)
        return BoardPrecomputer(matcher, CellQuery(matcher, local_index)), client

    @pytest.mark.asyncio
    @pytest.mark.parametrize("label", ["Manchester City", "Man City"])
    async def test_nickname_finds_same_players(self, label):
        precomputer, client = self.make_precomputer()

        cell = await precomputer.compute_cell("Ballon d'Or Winner", label)

        assert cell.col_entity.id == "Q50602"
        assert [a.label for a in cell.athletes] == ["Rodri"]
        client.execute_sparql.assert_not_called()

    @pytest.mark.asyncio
    async def test_man_utd(self):
        precomputer, _ = self.make_precomputer()
        cell = await precomputer.compute_cell("Ballon d'Or Winner", "Man Utd")
        assert [a.label for a in cell.athletes] == ["Michael Owen"]

    @pytest.mark.asyncio
    async def test_milan_excludes_inter_players(self):
        precomputer, _ = self.make_precomputer()

        cell = await precomputer.compute_cell("Ballon d'Or Winner", "Milan")

        assert cell.col_entity.id == "Q1543"
        assert [a.label for a in cell.athletes] == ["Kaká"]
