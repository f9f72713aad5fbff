"""
API routes for Crieur.
"""

from crieur.presentation.api.routes.emit import router as emit_router
from crieur.presentation.api.routes.history import router as history_router
from crieur.presentation.api.routes.listen import router as listen_router

__all__ = ["emit_router", "history_router", "listen_router"]
