"""
Crieur - real-time channel broker.
"""

__version__ = "0.1.0"
