import os
import base64
import re
import secrets
from typing import List, Optional
from cryptography.fernet import Fernet, InvalidToken
from dotenv import load_dotenv
from eth_account import Account


def _normalize_private_key(private_key: str) -> str:
    """Нормализация формата приватного ключа (64 hex символа без 0x)"""
    # Убираем пробелы и переводы строк
    private_key = private_key.strip()

    # Убираем префикс 0x если есть
    if private_key.startswith('0x'):
        private_key = private_key[2:]

    if not re.match(r'^[0-9a-fA-F]{64}$', private_key):
        raise ValueError("Private key must be 64 hexadecimal characters")

    return private_key


def _fernet_for(key: str) -> Fernet:
    # Дополняем/обрезаем ключ до 32 байт и кодируем в base64 для Fernet
    normalized = key.ljust(32, '0')[:32]
    return Fernet(base64.urlsafe_b64encode(normalized.encode()))


class SecurityManager:
    def __init__(self, encryption_key: str = None, fallback_keys: Optional[List[str]] = None):
        # Используем ключ из переменных окружения
        self.encryption_key = encryption_key or os.getenv('ENCRYPTION_KEY')
        if not self.encryption_key:
            raise ValueError("ENCRYPTION_KEY is not set")

        self.cipher_suite = _fernet_for(self.encryption_key)

        legacy_keys = list(fallback_keys or [])
        legacy_env = os.getenv('LEGACY_ENCRYPTION_KEYS')
        if legacy_env:
            legacy_keys.extend([key.strip() for key in legacy_env.split(',') if key.strip()])
        self.legacy_ciphers = [_fernet_for(key) for key in legacy_keys]

    def encrypt_private_key(self, private_key: str) -> str:
        """Шифрование приватного ключа"""
        normalized = _normalize_private_key(private_key)
        encrypted = self.cipher_suite.encrypt(normalized.encode())
        return base64.urlsafe_b64encode(encrypted).decode()

    def decrypt_private_key(self, encrypted_key: str) -> str:
        """Дешифрование приватного ключа (основной ключ, затем legacy)"""
        try:
            encrypted_bytes = base64.urlsafe_b64decode(encrypted_key.strip().encode())
        except (ValueError, TypeError) as e:
            raise ValueError(f"Decryption failed: {e}") from e

        for cipher in [self.cipher_suite, *self.legacy_ciphers]:
            try:
                return '0x' + cipher.decrypt(encrypted_bytes).decode()
            except InvalidToken:
                continue
        raise ValueError("Decryption failed: invalid encryption key")


def validate_private_key(private_key: str) -> bool:
    """Валидация приватного ключа"""
    try:
        account = Account.from_key('0x' + _normalize_private_key(private_key))
        return bool(account.address)
    except Exception:
        return False


def encrypt_private_key(private_key: str, encryption_key: str = None) -> str:
    return SecurityManager(encryption_key).encrypt_private_key(private_key)


def decrypt_private_key(encrypted_key: str, encryption_key: str = None) -> str:
    return SecurityManager(encryption_key).decrypt_private_key(encrypted_key)


def load_signing_key() -> str:
    """Ключ подписи из окружения: PRIVATE_KEY в hex или зашифрованный (ENCRYPTION_KEY)"""
    load_dotenv()

    raw_key = os.getenv('PRIVATE_KEY', '').strip()
    if not raw_key:
        raise ValueError("PRIVATE_KEY is not set")

    if validate_private_key(raw_key):
        return '0x' + _normalize_private_key(raw_key)

    if not os.getenv('ENCRYPTION_KEY'):
        raise ValueError("PRIVATE_KEY is not a valid hex key and ENCRYPTION_KEY is not set")

    decrypted = decrypt_private_key(raw_key)
    if not validate_private_key(decrypted):
        raise ValueError("Decrypted PRIVATE_KEY is invalid")
    return decrypted


def generate_secure_key() -> str:
    """Генерация безопасного ключа шифрования"""
    return secrets.token_hex(32)


if __name__ == "__main__":
    from utils.input_utils import prompt_secret

    load_dotenv()
    encryption_key = os.getenv('ENCRYPTION_KEY')
    if not encryption_key:
        encryption_key = generate_secure_key()
        print("⚠️  ENCRYPTION_KEY not found, generated a new one. Add it to your .env:")
        print(f"ENCRYPTION_KEY={encryption_key}")

    try:
        key = prompt_secret("Private key", validate_private_key)
        print(f"PRIVATE_KEY={encrypt_private_key(key, encryption_key)}")
    except ValueError as e:
        print(f"❌ {e}")
