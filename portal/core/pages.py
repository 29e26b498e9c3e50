"""
Expected pages: the fixed list every attendance view reports on.

Keys are normalized tags, so ``"Bri Free / OFTV"`` clock-ins tagged
``#bri_free/oftv`` and ``#brifreeoftv`` land on the same row.
"""

from __future__ import annotations

import re

_STRIP_RE = re.compile(r"[\s_/&x]")

RAW_PAGES: dict[str, str] = {
    "alannafreeoftv": "Alanna Free / OFTV",
    "alannapaid": "Alanna Paid",
    "alannawelcome": "Alanna Welcome",
    "alexalana": "Alexa Lana",
    "alexis": "Alexis",
    "allyfree": "Ally Free",
    "allypaid": "Ally Paid",
    "aprilb": "April B",
    "ashley": "Ashley",
    "asiadollpaidfree": "Asia Doll Paid / Free",
    "brifreeoftv": "Bri Free / OFTV",
    "bripaid": "Bri Paid",
    "briwelcome": "Bri Welcome",
    "brittanyamain": "Brittanya Main",
    "brittanyapaidfree": "Brittanya Paid / Free",
    "bronwinfree": "Bronwin Free",
    "bronwinoftvmcarteroftv": "Bronwin OFTV & MCarter OFTV",
    "bronwinpaid": "Bronwin Paid",
    "bronwinwelcome": "Bronwin Welcome",
    "camifree": "Cami Free",
    "camipaid": "Cami Paid",
    "carterpaidfree": "Carter Paid / Free",
    "christipaidfree": "Christi Paid and Free",
    "claire": "Claire",
    "dandfreeoftv": "Dan D Free / OFTV",
    "dandpaid": "Dan D Paid",
    "essiepaidfree": "Essie Paid / Free",
    "fanslyteam1": "Fansly Team1",
    "fanslyteam2": "Fansly Team2",
    "fanslyteam3": "Fansly Team3",
    "francescapaid": "Francesca Paid",
    "hazeyfree": "Hazey Free",
    "hazeypaid": "Hazey Paid",
    "hazeywelcome": "Hazey Welcome",
    "honeyvip": "Honey VIP",
    "kissingcousinsxvalerievip": "Kissing Cousins X Valerie VIP",
    "lilahfree": "Lilah Free",
    "lilahpaid": "Lilah Paid",
    "livv": "Livv",
    "mommycarter": "Mommy Carter",
    "natalialfree": "Natalia L Free",
    "natalialpaid": "Natalia L Paid",
    "natalierfree": "Natalie R Free",
    "natalierpaid": "Natalie R Paid",
    "sarahc": "Sarah C",
    "skypaidfree": "Sky Paid / Free",
}


def normalize_tag(tag: str | None) -> str:
    """Lowercase and drop ``#``, whitespace, ``_``, ``/``, ``&`` and ``x``."""
    s = str(tag or "").strip().lower()
    if s.startswith("#"):
        s = s[1:]
    return _STRIP_RE.sub("", s)


EXPECTED_PAGES: dict[str, str] = {normalize_tag(k): v for k, v in RAW_PAGES.items()}
