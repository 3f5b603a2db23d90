"""
Data models for Dice Casino wallet custody.
"""
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Wallet:
    """Custodial wallet owned by one chat user.

    Created once per user and never modified. The private key is only ever
    held encrypted here; the store decrypts it for the duration of a signing
    operation.
    """
    user_id: str
    address: str  # Checksummed, derived from the key at creation
    encrypted_secret: str = field(repr=False)  # Fernet ciphertext of the hex private key
    created_at: datetime = field(default_factory=datetime.utcnow)
