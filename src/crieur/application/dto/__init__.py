"""
Data Transfer Objects for Crieur application layer.
"""

from crieur.application.dto.emit_dto import EmitResult

__all__ = ["EmitResult"]
