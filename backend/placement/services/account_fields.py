"""
Règles de validation et de normalisation des champs d'un compte.
Partagées entre l'import CSV et la création manuelle par un administrateur.
"""

import re
from datetime import date
from typing import Optional, Tuple

EMAIL_REGEX = re.compile(r"^[\w.%+\-]+@([\w\-]+\.)+[\w\-]{2,}$")
TITLE_REGEX = re.compile(r"^(Dr|Prof|Mr|Mrs|Ms|Miss)\.?\s+", re.IGNORECASE)
ISO_DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
NUMERIC_DATE_REGEX = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
MIN_PHONE_DIGITS = 7


def normalize_email(raw: str) -> str:
    return raw.strip().lower()


def is_valid_email(email: str, required_domain: str = "") -> bool:
    """Format général ; si required_domain est fourni, l'email doit s'y terminer."""
    if not EMAIL_REGEX.match(email):
        return False
    if required_domain:
        return email.lower().endswith("@" + required_domain.lower())
    return True


def is_valid_phone(phone: str) -> bool:
    digits = re.sub(r"\D", "", phone)
    return len(digits) >= MIN_PHONE_DIGITS


def split_full_name(full_name: str) -> Tuple[str, str]:
    """
    Sépare un nom complet en (prénom, nom de famille).
    Le titre éventuel (Dr, Prof, Mr…) est retiré ; le premier mot est le prénom,
    le reste (joint par un espace) le nom de famille, éventuellement vide.

    >>> split_full_name("Ana Maria Silva")
    ('Ana', 'Maria Silva')
    >>> split_full_name("Madonna")
    ('Madonna', '')
    """
    cleaned = TITLE_REGEX.sub("", full_name.strip())
    parts = cleaned.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def normalize_date_of_birth(raw: str) -> str:
    """
    Convertit une date de naissance au format YYYY-MM-DD.

    Formats acceptés (séparateur - ou /) : YYYY-MM-DD, MM-DD-YYYY,
    et DD-MM-YYYY lorsque le premier nombre dépasse 12.
    Lève ValueError si la date est illisible ou n'existe pas au calendrier.
    """
    value = raw.strip().strip('"').replace("/", "-")

    if ISO_DATE_REGEX.match(value):
        year, month, day = (int(p) for p in value.split("-"))
    else:
        match = NUMERIC_DATE_REGEX.match(value)
        if match is None:
            raise ValueError(f"Invalid date of birth format (expected YYYY-MM-DD, got {raw.strip()})")
        first, second, year = (int(p) for p in match.groups())
        if first > 12:
            day, month = first, second
        else:
            month, day = first, second

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        raise ValueError(f"Invalid date value ({raw.strip()})")


def optional_date_of_birth(raw: Optional[str]) -> Optional[str]:
    """Variante tolérante au vide : None ou "" → None."""
    if raw is None or not raw.strip():
        return None
    return normalize_date_of_birth(raw)
