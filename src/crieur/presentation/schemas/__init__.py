"""
Request/Response schemas for Crieur API.
"""

from crieur.presentation.schemas.emit import EmitResponse
from crieur.presentation.schemas.history import HistoryResponse

__all__ = ["EmitResponse", "HistoryResponse"]
