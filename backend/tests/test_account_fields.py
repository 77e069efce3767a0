"""
Tests unitaires des règles de validation / normalisation des champs de compte.
"""

import pytest

from placement.security import default_password
from placement.services.account_fields import (
    is_valid_email,
    is_valid_phone,
    normalize_date_of_birth,
    normalize_email,
    optional_date_of_birth,
    split_full_name,
)


# --- Découpage du nom ---

def test_nom_trois_mots():
    assert split_full_name("Ana Maria Silva") == ("Ana", "Maria Silva")


def test_nom_un_seul_mot():
    assert split_full_name("Madonna") == ("Madonna", "")


def test_nom_espaces_multiples():
    assert split_full_name("  Ravi   Kumar  Singh ") == ("Ravi", "Kumar Singh")


def test_titre_retire():
    assert split_full_name("Dr. Priya Sharma") == ("Priya", "Sharma")
    assert split_full_name("prof Anil Gupta") == ("Anil", "Gupta")


def test_prenom_commencant_comme_un_titre_conserve():
    """« Mrinal » ne doit pas perdre son « Mr »."""
    assert split_full_name("Mrinal Sen") == ("Mrinal", "Sen")


def test_nom_vide():
    assert split_full_name("   ") == ("", "")


# --- Date de naissance ---

@pytest.mark.parametrize("raw,expected", [
    ("2003-05-14", "2003-05-14"),
    ("05/14/2003", "2003-05-14"),
    ("5-4-2003", "2003-05-04"),
    ("25/12/2002", "2002-12-25"),
    ('"2001-01-31"', "2001-01-31"),
])
def test_date_normalisee(raw, expected):
    assert normalize_date_of_birth(raw) == expected


def test_date_format_inconnu_rejete():
    with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
        normalize_date_of_birth("14 May 2003")


def test_date_inexistante_rejetee():
    with pytest.raises(ValueError, match="Invalid date value"):
        normalize_date_of_birth("2003-02-30")


def test_date_optionnelle_vide():
    assert optional_date_of_birth(None) is None
    assert optional_date_of_birth("  ") is None


# --- Email / téléphone ---

def test_email_normalise():
    assert normalize_email("  Ana.Silva@College.EDU ") == "ana.silva@college.edu"


def test_email_format():
    assert is_valid_email("ana@college.edu")
    assert not is_valid_email("pas-un-email")
    assert not is_valid_email("ana@college")


def test_email_domaine_impose():
    assert is_valid_email("ana@gcekbpatna.ac.in", "gcekbpatna.ac.in")
    assert not is_valid_email("ana@gmail.com", "gcekbpatna.ac.in")


def test_telephone_sept_chiffres_minimum():
    assert is_valid_phone("+91 98765-43210")
    assert not is_valid_phone("12-34-56")


# --- Mot de passe par défaut ---

def test_mot_de_passe_par_defaut():
    assert default_password("Priyanka", "2003-05-14") == "PRIY2003"


def test_mot_de_passe_prenom_court_sans_date():
    assert default_password("Al", None) == "AL  0000"
