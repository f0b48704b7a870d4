# univote/encryption/password_hashing.py

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from univote.errors import ValidationError

# Password hashing and verification using Argon2id. Hashing is always an
# explicit call made by the account service, never a model side effect.


class PasswordHashingService:
    def __init__(self, min_length=6, time_cost=3, memory_cost=65536, parallelism=4):
        self.min_length = min_length
        self.ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
        )

    @classmethod
    def from_config(cls, config):
        return cls(
            min_length=config['PASSWORD_MIN_LENGTH'],
            time_cost=config['ARGON2_TIME_COST'],
            memory_cost=config['ARGON2_MEMORY_COST'],
            parallelism=config['ARGON2_PARALLELISM'],
        )

    def check_policy(self, password, label="Password"):
        if not isinstance(password, str) or len(password) < self.min_length:
            raise ValidationError(f"{label} must be at least {self.min_length} characters long")

    def hash_password(self, password: str) -> str:
        try:
            return self.ph.hash(password)
        except HashingError as e:
            raise ValueError(f"Password hashing failed: {str(e)}")

    def verify_password(self, password: str, hash_value: str) -> bool:
        # argon2 compares digests in constant time
        if not isinstance(password, str):
            return False
        try:
            return self.ph.verify(hash_value, password)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hash_value: str) -> bool:
        return self.ph.check_needs_rehash(hash_value)
