"""Unit tests for label normalization, similarity and best-match selection."""

from boxtobox.matching.normalization import fold, normalize_label
from boxtobox.matching.similarity import get_best_match, rank_by_similarity, similarity
from boxtobox.matching.matcher import format_period
from boxtobox.models import PlayerCandidate

from tests.helpers import entity


# ---------------------------------------------------------------------------
# normalize_label / fold
# ---------------------------------------------------------------------------

class TestNormalizeLabel:

    def test_strips_org_tokens(self):
        assert normalize_label("FC Barcelona") == "barcelona"
        assert normalize_label("AC Milan") == "milan"
        assert normalize_label("Liverpool FC") == "liverpool"

    def test_keeps_org_tokens_when_asked(self):
        assert normalize_label("AC Milan", strip_org_tokens=False) == "ac milan"

    def test_diacritics_and_punctuation(self):
        assert normalize_label("Atlético Madrid") == "atletico madrid"
        assert normalize_label("Paris Saint-Germain") == "paris saint germain"
        assert normalize_label("Ballon d'Or Winner") == "ballon d or winner"

    def test_empty(self):
        assert normalize_label("") == ""
        assert normalize_label("   ") == ""

    def test_fold_keeps_diacritics(self):
        assert fold("  Ángel Di María ") == "ángel di maría"
        assert fold("") == ""


# ---------------------------------------------------------------------------
# similarity / get_best_match
# ---------------------------------------------------------------------------

class TestSimilarity:

    def test_identical_is_one(self):
        assert similarity("Barcelona", "barcelona") == 1.0

    def test_both_empty_is_one(self):
        assert similarity("", None) == 1.0

    def test_range(self):
        score = similarity("Barcelona", "Barcelona B")
        assert 0.0 < score < 1.0
        assert similarity("abc", "xyz") == 0.0

    def test_closer_label_scores_higher(self):
        assert similarity("Barcelona", "FC Barcelona") > similarity("Barcelona", "Espanyol de Barcelona")


class TestGetBestMatch:

    def test_empty_returns_none(self):
        assert get_best_match("Barcelona", []) is None

    def test_single_entity_returned_unconditionally(self):
        only = entity("Q1", "Something Completely Different")
        assert get_best_match("Barcelona", [only]) is only

    def test_picks_most_similar_label(self):
        candidates = [
            entity("Q1", "Barcelona Sporting Club", popularity=50),
            entity("Q7156", "FC Barcelona", popularity=40),
            entity("Q2", "Barcelona", popularity=10),
        ]
        assert get_best_match("Barcelona", candidates).id == "Q2"

    def test_tie_keeps_first_candidate(self):
        first = entity("Q1", "Inter", popularity=100)
        second = entity("Q2", "Inter", popularity=5)
        assert get_best_match("Inter", [first, second]) is first


class TestRankBySimilarity:

    def test_orders_by_descending_similarity(self):
        items = [
            PlayerCandidate(id="Q1", label="Lionel Scaloni"),
            PlayerCandidate(id="Q615", label="Lionel Messi"),
        ]
        ranked = rank_by_similarity("Lionel Messi", items)
        assert [p.id for p in ranked] == ["Q615", "Q1"]


# ---------------------------------------------------------------------------
# format_period
# ---------------------------------------------------------------------------

class TestFormatPeriod:

    def test_closed_spell(self):
        assert format_period(2014, 2021) == "2014–2021"

    def test_open_spell(self):
        assert format_period(2022, None) == "2022–present"

    def test_unknown_start(self):
        assert format_period(None, 2020) == "unknown–2020"

    def test_unknown_period(self):
        assert format_period(None, None) == "unknown period"
