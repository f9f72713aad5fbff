"""Infrastructure layer for Crieur."""
