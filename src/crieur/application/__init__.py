"""
Application layer for Crieur.
"""
