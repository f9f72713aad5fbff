"""
Domain layer for Crieur.
"""
