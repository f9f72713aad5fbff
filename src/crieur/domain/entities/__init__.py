"""
Domain entities for Crieur.
"""

from crieur.domain.entities.client import Client

__all__ = ["Client"]
