"""
Cross-provider alias index for team name resolution.

TEAM_ALIASES maps a canonical display name to the spellings other providers
use for the same club (football-data.org, ClubElo, Understat, bookmakers),
across the five supported leagues.

Usage:
    from matchlab.etl.team_aliases import build_alias_index

    index = build_alias_index()
    assert index["bayernmunchen"] == index["bayernmunich"]
"""

import logging
from typing import Mapping, Optional

from matchlab.etl.name_normalization import normalize_team_name, strip_org_tokens

logger = logging.getLogger(__name__)


TEAM_ALIASES: dict[str, list[str]] = {
    # England
    "Manchester United": ["Manchester United FC", "Man United", "Man Utd", "Manchester Utd"],
    "Manchester City": ["Manchester City FC", "Man City"],
    "Tottenham": ["Tottenham Hotspur", "Tottenham Hotspur FC", "Spurs"],
    "West Ham": ["West Ham United", "West Ham United FC"],
    "Newcastle": ["Newcastle United", "Newcastle United FC", "Newcastle Utd"],
    "Nottingham Forest": ["Nottingham Forest FC", "Nott'm Forest", "Nottm Forest"],
    "Wolverhampton": ["Wolverhampton Wanderers", "Wolverhampton Wanderers FC", "Wolves"],
    "Brighton": ["Brighton & Hove Albion", "Brighton & Hove Albion FC", "Brighton and Hove Albion"],
    "Leicester": ["Leicester City", "Leicester City FC"],
    "Bournemouth": ["AFC Bournemouth"],
    "Ipswich": ["Ipswich Town", "Ipswich Town FC"],
    "Sheffield United": ["Sheffield Utd", "Sheffield United FC"],
    "Leeds": ["Leeds United", "Leeds United FC"],
    # Spain
    "Atletico Madrid": ["Club Atlético de Madrid", "Atlético de Madrid", "Atlético Madrid", "Atletico", "Atl. Madrid"],
    "Real Madrid": ["Real Madrid CF"],
    "Barcelona": ["FC Barcelona", "Barça"],
    "Athletic Club": ["Athletic Bilbao", "Athletic Club de Bilbao"],
    "Real Sociedad": ["Real Sociedad de Fútbol"],
    "Espanyol": ["RCD Espanyol de Barcelona", "RCD Espanyol"],
    "Real Betis": ["Real Betis Balompié", "Betis"],
    "Celta Vigo": ["RC Celta de Vigo", "Celta"],
    "Osasuna": ["CA Osasuna"],
    "Mallorca": ["RCD Mallorca"],
    "Las Palmas": ["UD Las Palmas"],
    "Alaves": ["Deportivo Alavés"],
    "Rayo Vallecano": ["Rayo Vallecano de Madrid"],
    # Italy
    "Inter": ["Inter Milan", "FC Internazionale Milano", "Internazionale"],
    "Milan": ["AC Milan", "A.C. Milan"],
    "Napoli": ["SSC Napoli"],
    "Roma": ["AS Roma"],
    "Lazio": ["SS Lazio"],
    "Atalanta": ["Atalanta BC"],
    "Fiorentina": ["ACF Fiorentina"],
    "Torino": ["Torino FC"],
    "Bologna": ["Bologna FC 1909"],
    "Verona": ["Hellas Verona FC", "Hellas Verona"],
    "Juventus": ["Juventus FC"],
    "Parma": ["Parma Calcio 1913"],
    # Germany
    "Bayern Munich": ["FC Bayern München", "Bayern München", "Bayern"],
    "Bayer Leverkusen": ["Bayer 04 Leverkusen", "Leverkusen"],
    "RB Leipzig": ["RasenBallsport Leipzig", "Leipzig"],
    "Borussia Dortmund": ["BV Borussia 09 Dortmund", "Dortmund"],
    "Borussia Monchengladbach": ["Borussia Mönchengladbach", "Borussia M.Gladbach", "Gladbach"],
    "Union Berlin": ["1. FC Union Berlin"],
    "Koln": ["1. FC Köln", "FC Köln", "Cologne"],
    "Mainz": ["1. FSV Mainz 05", "Mainz 05"],
    "Hoffenheim": ["TSG 1899 Hoffenheim", "TSG Hoffenheim", "1899 Hoffenheim"],
    "Werder Bremen": ["SV Werder Bremen"],
    "Stuttgart": ["VfB Stuttgart"],
    "Wolfsburg": ["VfL Wolfsburg"],
    "Heidenheim": ["1. FC Heidenheim 1846"],
    "Eintracht Frankfurt": ["Frankfurt"],
    "Schalke": ["FC Schalke 04", "Schalke 04"],
    # France
    "Paris Saint-Germain": ["Paris Saint-Germain FC", "Paris SG", "PSG"],
    "Marseille": ["Olympique de Marseille", "Olympique Marseille"],
    "Lyon": ["Olympique Lyonnais"],
    "Monaco": ["AS Monaco FC", "AS Monaco"],
    "Lille": ["Lille OSC", "LOSC Lille"],
    "Rennes": ["Stade Rennais FC 1901", "Stade Rennais FC", "Stade Rennais"],
    "Strasbourg": ["RC Strasbourg Alsace", "RC Strasbourg"],
    "Saint-Etienne": ["AS Saint-Étienne", "St Etienne"],
    "Brest": ["Stade Brestois 29"],
    "Montpellier": ["Montpellier HSC"],
    "Le Havre": ["Le Havre AC"],
    "Angers": ["Angers SCO"],
    "Nice": ["OGC Nice"],
    "Lens": ["RC Lens", "Racing Club de Lens"],
    "Nantes": ["FC Nantes"],
    "Toulouse": ["Toulouse FC"],
    "Auxerre": ["AJ Auxerre"],
}


def build_alias_index(
    aliases: Optional[Mapping[str, list[str]]] = None,
) -> dict[str, str]:
    """
    Build a normalized alias index: variant key -> canonical key.

    Every variant (and the canonical name itself) is indexed both as its
    plain normalized key and with organizational tokens stripped. When two
    canonical groups claim the same variant, the first group keeps it.

    Args:
        aliases: canonical name -> variants. Defaults to TEAM_ALIASES.

    Returns:
        Mapping from normalized variant to normalized canonical key.
    """
    if aliases is None:
        aliases = TEAM_ALIASES

    index: dict[str, str] = {}
    conflicts = 0
    for canonical, variants in aliases.items():
        canonical_key = normalize_team_name(canonical)
        if not canonical_key:
            continue
        for name in [canonical, *variants]:
            for key in (normalize_team_name(name), strip_org_tokens(name)):
                if not key:
                    continue
                owner = index.setdefault(key, canonical_key)
                if owner != canonical_key:
                    conflicts += 1
                    logger.warning(
                        "[RESOLVER] Alias %r claimed by %r and %r; keeping %r",
                        key, owner, canonical_key, owner,
                    )

    logger.debug(
        "[RESOLVER] Built alias index: %d teams, %d entries, %d conflicts",
        len(aliases),
        len(index),
        conflicts,
    )
    return index

