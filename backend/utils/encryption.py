"""
Wallet encryption utilities.
"""
from cryptography.fernet import Fernet, InvalidToken


def generate_encryption_key() -> str:
    """Generate a new encryption key."""
    return Fernet.generate_key().decode('utf-8')


def encrypt_secret(secret: str, encryption_key: str) -> str:
    """Encrypt a wallet private key."""
    f = Fernet(encryption_key.encode())
    encrypted = f.encrypt(secret.encode())
    return encrypted.decode('utf-8')


def decrypt_secret(encrypted_secret: str, encryption_key: str) -> str:
    """Decrypt a wallet private key.

    Raises:
        cryptography.fernet.InvalidToken: wrong key or tampered ciphertext
    """
    f = Fernet(encryption_key.encode())
    decrypted = f.decrypt(encrypted_secret.encode())
    return decrypted.decode('utf-8')


__all__ = ["generate_encryption_key", "encrypt_secret", "decrypt_secret", "InvalidToken"]
