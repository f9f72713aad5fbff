"""
Presentation layer for Crieur.
"""
