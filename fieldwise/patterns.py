"""Keyword groups for rule-based field classification (English and Italian).

Kept in a standalone module so tests and alternative classifiers can share
the same vocabulary.
"""

SIGNATURE_KEYWORDS: tuple[str, ...] = ("firma", "signature", "sign")

DATE_KEYWORDS: tuple[str, ...] = ("data", "date", "nascita", "birth")

COLOR_KEYWORDS: tuple[str, ...] = ("colore", "color", "aura")

EMBEDDED_KEYWORDS: tuple[str, ...] = ("web", "html", "custom", "map", "location", "indirizzo")

# Subset of embedded triggers that describe a place rather than a widget
GEO_KEYWORDS: tuple[str, ...] = ("map", "location", "indirizzo")

SELECTION_KEYWORDS: tuple[str, ...] = (
    "select", "country", "paese", "city", "città", "choose",
    "region", "province", "stato",
)

RATING_KEYWORDS: tuple[str, ...] = ("rating", "valut", "stars", "stelle", "score", "level")

STAR_KEYWORDS: tuple[str, ...] = ("star", "stell")

TOGGLE_KEYWORDS: tuple[str, ...] = ("[ ]", "[x]", "accept", "agree", "consent", "terms")

EMAIL_KEYWORDS: tuple[str, ...] = ("email", "e-mail", "mail")

PHONE_KEYWORDS: tuple[str, ...] = ("phone", "telefono", "cell", "mobile")

NUMBER_KEYWORDS: tuple[str, ...] = ("number", "quantity", "amount", "età", "age", "numero")

PASSWORD_KEYWORDS: tuple[str, ...] = ("password", "pwd", "secret")

NAME_KEYWORDS: tuple[str, ...] = ("name", "nome", "cognome", "surname")

COUNTRY_KEYWORDS: tuple[str, ...] = ("country", "paese")
CITY_KEYWORDS: tuple[str, ...] = ("city", "città")

COUNTRY_OPTIONS: tuple[str, ...] = ("Italy", "USA", "UK", "France", "Germany", "Spain")
CITY_OPTIONS: tuple[str, ...] = ("Milan", "Rome", "Turin", "Naples", "Florence")
GENERIC_OPTIONS: tuple[str, ...] = ("Option 1", "Option 2", "Option 3")

STAR_RANGE: tuple[float, float, float] = (1, 5, 1)
PERCENT_RANGE: tuple[float, float, float] = (0, 100, 1)


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    """True if any keyword is a substring of the (already lower-cased) text."""
    return any(kw in text for kw in keywords)
