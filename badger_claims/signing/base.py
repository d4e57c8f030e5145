"""Chain-neutral signing interfaces"""
from abc import ABC, abstractmethod

from badger_claims.models.achievement import Achievement


class MessageEncoder(ABC):
    """Builds the exact byte string a chain verifier recomputes"""

    @abstractmethod
    def normalize_subject(self, subject: str) -> str:
        """
        Validate a claimant address and return its canonical form

        Raises:
            ValidationError: If the address is malformed
        """

    @abstractmethod
    def encode(self, subject: str, achievement: Achievement, nonce: bytes, deadline: int) -> bytes:
        ...


class Signer(ABC):
    """Holds the backend private key"""

    @property
    @abstractmethod
    def public_identity(self) -> str:
        """Address or public key the verifier trusts"""

    @abstractmethod
    def sign(self, message: bytes) -> bytes:
        ...
