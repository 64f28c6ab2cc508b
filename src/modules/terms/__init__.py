from src.modules.terms.models import AcademicTerm, parse_term_number
from src.modules.terms.service import TermService

__all__ = [
    "AcademicTerm",
    "parse_term_number",
    "TermService",
]
