"""
Dependency Injection for Crieur.
"""

from crieur.di.container import Container

__all__ = ["Container"]
