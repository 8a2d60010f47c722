"""Unit tests for the shared name normalization and alias index."""

import pytest

from matchlab.etl.name_normalization import (
    normalize_person_name,
    normalize_team_name,
    significant_tokens,
    strip_org_tokens,
    tokenize_name,
)
from matchlab.etl.team_aliases import TEAM_ALIASES, build_alias_index


# ---------------------------------------------------------------------------
# normalize_team_name
# ---------------------------------------------------------------------------

class TestNormalizeTeamName:
    """Join keys are lowercase ASCII alphanumerics only."""

    def test_hyphen_and_accent_equivalence(self):
        assert normalize_team_name("Saint-Étienne") == "saintetienne"
        assert normalize_team_name("Saint Etienne") == "saintetienne"

    def test_diacritics(self):
        assert normalize_team_name("Atlético Madrid") == "atleticomadrid"
        assert normalize_team_name("Beşiktaş") == "besiktas"
        assert normalize_team_name("FC Bayern München") == "fcbayernmunchen"

    def test_nordic_and_eszett(self):
        assert normalize_team_name("Bodø/Glimt") == "bodoglimt"
        assert normalize_team_name("Fußball") == "fussball"

    def test_preserves_semantic_words(self):
        n = normalize_team_name
        assert n("Manchester City") != n("Manchester United")
        assert n("Real Madrid") != n("Real Sociedad")

    def test_empty_and_whitespace(self):
        assert normalize_team_name("") == ""
        assert normalize_team_name("   ") == ""


class TestTokens:
    def test_punctuation_splits_words(self):
        assert tokenize_name("Paris Saint-Germain") == ["paris", "saint", "germain"]
        assert tokenize_name("Brighton & Hove Albion") == ["brighton", "hove", "albion"]

    def test_strip_org_tokens(self):
        assert strip_org_tokens("Arsenal FC") == "arsenal"
        assert strip_org_tokens("VfB Stuttgart") == "stuttgart"
        assert strip_org_tokens("AC Milan") == "milan"

    def test_strip_org_tokens_keeps_org_only_names(self):
        """A name made only of org tokens falls back to the plain key."""
        assert strip_org_tokens("AS") == "as"

    def test_significant_tokens_drop_noise(self):
        assert significant_tokens("Olympique de Marseille") == ["marseille"]
        assert significant_tokens("Club Atlético de Madrid") == ["atletico", "madrid"]


class TestNormalizePersonName:
    def test_keeps_word_boundaries(self):
        assert normalize_person_name("Kylian Mbappé") == "kylian mbappe"

    def test_initial_dots_removed(self):
        assert normalize_person_name("N. Jackson") == "n jackson"

    def test_hyphenated_surname(self):
        assert normalize_person_name("Trent Alexander-Arnold") == "trent alexander arnold"

    def test_empty(self):
        assert normalize_person_name("") == ""


# ---------------------------------------------------------------------------
# Alias index
# ---------------------------------------------------------------------------

class TestAliasIndex:
    """Alias groups are normalized and indexed deterministically."""

    @pytest.fixture(scope="class")
    def index(self):
        return build_alias_index()

    @staticmethod
    def _canonical(index, name):
        return index.get(normalize_team_name(name), index.get(strip_org_tokens(name)))

    def test_sponsor_and_native_names(self, index):
        assert self._canonical(index, "FC Bayern München") == self._canonical(index, "Bayern Munich") == "bayernmunich"
        assert self._canonical(index, "Club Atlético de Madrid") == "atleticomadrid"
        assert self._canonical(index, "FC Internazionale Milano") == "inter"

    def test_org_suffix_is_not_needed_in_table(self, index):
        assert self._canonical(index, "Man City FC") == "manchestercity"

    def test_rivals_are_not_aliases(self, index):
        assert self._canonical(index, "Manchester United") != self._canonical(index, "Manchester City")
        assert self._canonical(index, "Inter") != self._canonical(index, "AC Milan")
        assert self._canonical(index, "Real Madrid") != self._canonical(index, "Real Sociedad")

    def test_every_variant_maps_to_its_canonical(self, index):
        for canonical, variants in TEAM_ALIASES.items():
            canonical_key = normalize_team_name(canonical)
            for variant in variants:
                assert index[normalize_team_name(variant)] == canonical_key, variant

    def test_build_is_deterministic(self):
        assert build_alias_index() == build_alias_index()

    def test_conflicting_variant_keeps_first_group(self, caplog):
        aliases = {"Alpha": ["Shared Name"], "Beta": ["Shared Name"]}
        index = build_alias_index(aliases)
        assert index["sharedname"] == "alpha"
        assert "claimed by" in caplog.text
