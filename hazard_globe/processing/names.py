"""
PAGASA local names

PAGASA assigns its own name to every tropical cyclone that enters the
Philippine Area of Responsibility. This module maps international (RSMC Tokyo)
names to those local names and back.
"""

import re
from typing import Optional

from .geo import is_in_region

# (international, local) pairs, oldest first. International names are reused
# across seasons (and local names every four years), so later pairs win.
NAME_PAIRS = [
    ("Durian", "Reming"),
    ("Fengshen", "Frank"),
    ("Ketsana", "Ondoy"),
    ("Parma", "Pepeng"),
    ("Washi", "Sendong"),
    ("Bopha", "Pablo"),
    ("Utor", "Labuyo"),
    ("Nari", "Santi"),
    ("Haiyan", "Yolanda"),
    ("Rammasun", "Glenda"),
    ("Hagupit", "Ruby"),
    ("Mujigae", "Kabayan"),
    ("Koppu", "Lando"),
    ("Melor", "Nona"),
    ("Nepartak", "Butchoy"),
    ("Meranti", "Ferdie"),
    ("Sarika", "Karen"),
    ("Haima", "Lawin"),
    ("Nock-ten", "Nina"),
    ("Nesat", "Gorio"),
    ("Hato", "Isang"),
    ("Damrey", "Ramil"),
    ("Kai-tak", "Urduja"),
    ("Tembin", "Vinta"),
    ("Maliksi", "Domeng"),
    ("Prapiroon", "Florita"),
    ("Maria", "Gardo"),
    ("Ampil", "Inday"),
    ("Mangkhut", "Ompong"),
    ("Yutu", "Rosita"),
    ("Wutip", "Betty"),
    ("Danas", "Falcon"),
    ("Lekima", "Hanna"),
    ("Lingling", "Liwayway"),
    ("Tapah", "Nimfa"),
    ("Mitag", "Onyok"),
    ("Nakri", "Quiel"),
    ("Kalmaegi", "Ramon"),
    ("Fung-wong", "Sarah"),
    ("Kammuri", "Tisoy"),
    ("Phanfone", "Ursula"),
    ("Vongfong", "Ambo"),
    ("Nuri", "Butchoy"),
    ("Jangmi", "Dindo"),
    ("Maysak", "Julian"),
    ("Haishen", "Kristine"),
    ("Noul", "Leon"),
    ("Nangka", "Nika"),
    ("Saudel", "Pepito"),
    ("Molave", "Quinta"),
    ("Goni", "Rolly"),
    ("Atsani", "Siony"),
    ("Etau", "Tonyo"),
    ("Vamco", "Ulysses"),
    ("Krovanh", "Vicky"),
    ("Dujuan", "Auring"),
    ("Surigae", "Bising"),
    ("Choi-wan", "Dante"),
    ("In-fa", "Fabian"),
    ("Conson", "Jolina"),
    ("Chanthu", "Kiko"),
    ("Kompasu", "Maring"),
    ("Rai", "Odette"),
    ("Megi", "Agaton"),
    ("Malakas", "Basyang"),
    ("Chaba", "Caloy"),
    ("Aere", "Domeng"),
    ("Ma-on", "Florita"),
    ("Hinnamnor", "Henry"),
    ("Muifa", "Inday"),
    ("Nanmadol", "Josie"),
    ("Noru", "Karding"),
    ("Nalgae", "Paeng"),
    ("Mawar", "Betty"),
    ("Guchol", "Chedeng"),
    ("Doksuri", "Egay"),
    ("Khanun", "Falcon"),
    ("Saola", "Goring"),
    ("Haikui", "Hanna"),
    ("Koinu", "Jenny"),
    ("Jelawat", "Kabayan"),
    ("Ewiniar", "Aghon"),
    ("Gaemi", "Carina"),
    ("Yagi", "Enteng"),
    ("Bebinca", "Ferdie"),
    ("Krathon", "Julian"),
    ("Trami", "Kristine"),
    ("Kong-rey", "Leon"),
    ("Yinxing", "Marce"),
    ("Toraji", "Nika"),
    ("Usagi", "Ofel"),
    ("Man-yi", "Pepito"),
]

INTERNATIONAL_TO_LOCAL = {intl: local for intl, local in NAME_PAIRS}
LOCAL_TO_INTERNATIONAL = {local: intl for intl, local in NAME_PAIRS}

_DESIGNATION_PREFIX = re.compile(
    r"^\s*(?:super\s+typhoon|typhoon|severe\s+tropical\s+storm|tropical\s+storm|"
    r"tropical\s+depression|sty|ty|sts|ts|td)\s+",
    re.IGNORECASE,
)


def clean_name(name: str) -> str:
    """Drop a leading designation such as "Typhoon" or "STS" and surrounding whitespace"""
    return _DESIGNATION_PREFIX.sub("", name).strip()


def local_name(international_name) -> Optional[str]:
    """
    Look up the PAGASA name for an international storm name.

    Args:
        international_name: e.g. "Typhoon Mawar" or "Mawar"

    Returns:
        Local name ("Betty"), or None when the name is unknown
    """
    if not isinstance(international_name, str):
        return None
    return INTERNATIONAL_TO_LOCAL.get(clean_name(international_name))


def international_name(local) -> Optional[str]:
    """Reverse lookup: the most recent international name for a local name"""
    if not isinstance(local, str):
        return None
    return LOCAL_TO_INTERNATIONAL.get(local.strip())


def format_display_name(international: str, local: Optional[str], in_region: bool) -> str:
    if in_region and local:
        return f"{local} ({international})"
    return international


def display_name(storm) -> str:
    """Label for a storm: "Betty (Mawar)" inside PAR, the international name elsewhere"""
    position = storm.current_position
    return format_display_name(
        storm.international_name,
        storm.local_name,
        is_in_region(position.lat, position.lon),
    )
