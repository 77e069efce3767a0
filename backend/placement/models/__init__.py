# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.

from placement.models.user import User  # noqa: F401  — doit précéder students
from placement.models.student import Student  # noqa: F401
from placement.models.department import Department  # noqa: F401
from placement.models.practice import (  # noqa: F401
    AptitudeAttempt,
    AptitudeQuestion,
    AptitudeTest,
    DsaProblem,
    DsaSubmission,
    PracticeStat,
)
