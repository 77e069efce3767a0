"""
Schémas Pydantic pour l'import CSV des comptes.
La réponse est sérialisée en camelCase (contrat du client web).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AccountImportRow(BaseModel):
    """Ligne du CSV validée et normalisée, prête à être réconciliée."""
    row: int
    email: str
    first_name: str
    last_name: str
    phone: str
    department: Optional[str] = None
    date_of_birth: Optional[str] = None
    guardian_name: Optional[str] = None


class AccountImportReport(BaseModel):
    """Rapport retourné après un import CSV."""
    success: bool = True
    message: str
    created_count: int
    updated_count: int
    total_processed: int
    errors: List[str]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
