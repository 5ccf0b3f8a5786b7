from __future__ import annotations

def short_address(address: str | None) -> str:
    """Truncate a bot address for log readability."""
    return address[:16] if address else "none"
