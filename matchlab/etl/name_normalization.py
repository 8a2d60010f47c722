"""
Shared name normalization for cross-provider matching.

Single source of truth: the team resolver, the alias index and the
person-name matcher all import from here.
"""

import re
import unicodedata


# Characters NFKD leaves intact.
_MANUAL_FOLDS = {
    "ø": "o",
    "æ": "ae",
    "ð": "d",
    "ß": "ss",
    "ł": "l",
    "đ": "d",
    "þ": "th",
}

# Juridical/organizational tokens, safe to drop for a join key.
# NOT semantic ones like 'real', 'united', 'city' which distinguish teams.
ORG_TOKENS = frozenset({
    "fc", "cf", "sc", "afc", "ssc", "ac", "as", "cd", "ud", "rc",
    "sv", "vfb", "vfl", "tsv", "fk", "sk", "club",
})

# Dropped before significant-word matching.
NOISE_TOKENS = frozenset({
    "fc", "rc", "sc", "ac", "cf", "de", "du", "le", "la", "les", "of",
    "the", "club", "racing", "sporting", "olympique", "stade",
    "association", "aj", "as", "og", "ogc", "us", "sco", "osc",
    "afc", "ssc", "cd", "ud", "sv", "vfb", "vfl", "tsv", "bv", "fsv",
})

# Football words shared by many clubs; never enough on their own.
GENERIC_TOKENS = frozenset({
    "united", "city", "real", "athletic", "atletico", "inter", "milan",
    "borussia", "sporting", "olympique", "saint", "town", "rovers",
    "wanderers", "hotspur", "albion",
})


def strip_diacritics(text: str) -> str:
    """Lowercase and fold accented characters to ASCII."""
    text = text.lower()
    for src, dst in _MANUAL_FOLDS.items():
        text = text.replace(src, dst)
    text = unicodedata.normalize("NFKD", text)
    return "".join(c for c in text if not unicodedata.combining(c))


def tokenize_name(name: str) -> list[str]:
    """
    Split a name into lowercase ASCII words.

    Punctuation, hyphens and slashes become word boundaries:
        "Paris Saint-Germain" -> ["paris", "saint", "germain"]
        "Bodo/Glimt"          -> ["bodo", "glimt"]
    """
    if not name:
        return []
    folded = strip_diacritics(name.strip())
    folded = re.sub(r"[^a-z0-9\s]", " ", folded)
    return folded.split()


def normalize_team_name(name: str) -> str:
    """
    Normalize a team name into a compact join key.

    Steps:
    1. Lowercase + trim
    2. Strip diacritics (NFKD plus manual folds for ø/æ/ð/ß)
    3. Drop every non-alphanumeric character

    Examples:
        "Saint-Étienne"      -> "saintetienne"
        "FC Bayern München"  -> "fcbayernmunchen"
        "Bodø/Glimt"         -> "bodoglimt"
    """
    return "".join(tokenize_name(name))


def strip_org_tokens(name: str) -> str:
    """
    Normalize a team name and drop organizational tokens.

    Falls back to the plain key when only org tokens are present.

    Examples:
        "Arsenal FC"     -> "arsenal"
        "VfB Stuttgart"  -> "stuttgart"
        "AC Milan"       -> "milan"
    """
    tokens = tokenize_name(name)
    kept = [t for t in tokens if t not in ORG_TOKENS]
    return "".join(kept or tokens)


def significant_tokens(name: str) -> list[str]:
    """Tokens that survive the noise filter (length >= 2, not noise)."""
    return [
        t for t in tokenize_name(name)
        if len(t) >= 2 and t not in NOISE_TOKENS
    ]


def normalize_person_name(name: str) -> str:
    """
    Normalize a person name, keeping word boundaries.

    Apostrophes and dots are deleted, hyphens become spaces:
        "Kylian Mbappé"   -> "kylian mbappe"
        "N. Jackson"      -> "n jackson"
        "Trent Alexander-Arnold" -> "trent alexander arnold"
    """
    if not name:
        return ""
    folded = strip_diacritics(name.strip())
    folded = re.sub(r"['’.`]", "", folded)
    folded = re.sub(r"[^a-z0-9\s]", " ", folded)
    return " ".join(folded.split())
