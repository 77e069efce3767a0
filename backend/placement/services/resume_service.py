"""
Analyse « ATS » d'un CV en texte brut.

Heuristique déterministe de substitution : seule la forme des entrées/sorties est
stable, le calcul du score n'est pas un moteur ATS et n'a pas vocation à l'être.
"""

import re
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from placement.models.student import Student
from placement.schemas.resume import ResumeAnalysis

KEYWORDS = (
    "python", "java", "c++", "javascript", "sql", "git", "html", "css", "react",
    "node", "docker", "aws", "linux", "rest", "api", "data structures",
    "algorithms", "machine learning", "oop", "dbms", "operating systems",
    "networking", "agile", "testing",
)
SECTIONS = ("education", "experience", "projects", "skills", "certifications", "achievements")
TARGET_KEYWORDS = 10
IDEAL_WORDS = (300, 900)
IDEAL_SENTENCE_WORDS = 15

WORD_REGEX = re.compile(r"[A-Za-z0-9+#]+")
SENTENCE_SPLIT = re.compile(r"[.!?\n]+")
METRIC_REGEX = re.compile(r"\d+\s*(%|percent|x\b|users|students|ms\b)", re.IGNORECASE)


def _contains(text: str, term: str) -> bool:
    return re.search(r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9+])", text) is not None


def _readability(text: str) -> int:
    """100 autour de ~15 mots par phrase, décroît de 4 points par mot d'écart."""
    sentences = [s for s in SENTENCE_SPLIT.split(text) if WORD_REGEX.search(s)]
    if not sentences:
        return 0
    words = sum(len(WORD_REGEX.findall(s)) for s in sentences)
    average = words / len(sentences)
    return max(0, min(100, round(100 - abs(average - IDEAL_SENTENCE_WORDS) * 4)))


def score_resume(text: str) -> ResumeAnalysis:
    """
    Score sur 100 : 40 pts pour les sections attendues, 40 pts pour les mots-clés
    techniques (plafonnés à TARGET_KEYWORDS), 20 pts pour la longueur.
    """
    lowered = text.lower()
    word_count = len(WORD_REGEX.findall(text))

    found = [k for k in KEYWORDS if _contains(lowered, k)]
    missing = [k for k in KEYWORDS if k not in found]
    sections = [s for s in SECTIONS if _contains(lowered, s)]

    section_points = 40 * len(sections) / len(SECTIONS)
    keyword_points = 40 * min(len(found), TARGET_KEYWORDS) / TARGET_KEYWORDS
    low, high = IDEAL_WORDS
    if low <= word_count <= high:
        length_points = 20.0
    elif word_count < low:
        length_points = 20 * word_count / low
    else:
        length_points = max(0.0, 20 - (word_count - high) / 50)

    suggestions: List[str] = []
    for section in SECTIONS:
        if section not in sections:
            suggestions.append(f"Add a clearly titled '{section.title()}' section.")
    if len(found) < TARGET_KEYWORDS:
        suggestions.append("Mention more of the technical skills you have actually used.")
    if word_count < low:
        suggestions.append("Your resume is short: describe your projects and responsibilities in more detail.")
    elif word_count > high:
        suggestions.append("Your resume is long: keep it to the most relevant one or two pages.")
    if not METRIC_REGEX.search(text):
        suggestions.append("Quantify your achievements (percentages, users, performance gains).")

    return ResumeAnalysis(
        ats_score=round(section_points + keyword_points + length_points),
        readability_score=_readability(text),
        keywords=found,
        missing_keywords=missing[:10],
        suggestions=suggestions,
    )


def analyze_resume(db: Session, student: Student, text: str) -> ResumeAnalysis:
    """Calcule le score et le mémorise sur la fiche étudiant."""
    analysis = score_resume(text)
    student.resume_ats_score = analysis.ats_score
    student.resume_analyzed_at = datetime.now(timezone.utc).replace(tzinfo=None)
    db.commit()
    return analysis
