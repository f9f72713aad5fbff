"""
Short random identifiers for clients and events.
"""

import uuid


def generate_id(prefix: str, length: int = 8) -> str:
    """
    Generate a short opaque identifier.

    Args:
        prefix: Kind marker ("client", "evt", ...)
        length: Number of random hex characters (max 32)

    Returns:
        Identifier such as ``client_3f9a1c2e``
    """
    return f"{prefix}_{uuid.uuid4().hex[:length]}"
