"""Event codes handed out by organizers, mapped to the achievement they unlock"""
import logging
from typing import Dict, Iterable, Optional, Set

from badger_claims.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_EVENT_CODES: Dict[str, str] = {
    "MORGRIDGE2025": "MORGRIDGE_HACKER_2025",
}


def normalize_code(code: str) -> str:
    return code.strip().upper()


def parse_event_codes(raw: str) -> Dict[str, str]:
    """
    Parse "CODE:ACHIEVEMENT_ID,CODE2:ACHIEVEMENT_ID" into a mapping

    Raises:
        ConfigurationError: On a malformed pair
    """
    codes: Dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        code, sep, achievement_id = pair.partition(":")
        if not sep or not code.strip() or not achievement_id.strip():
            raise ConfigurationError(
                f"Malformed EVENT_CODES entry: '{pair}'",
                config_key="EVENT_CODES"
            )
        codes[normalize_code(code)] = achievement_id.strip()
    return codes


class EventCodeRegistry:
    """Lookup of valid event codes per achievement"""

    def __init__(self, codes: Optional[Dict[str, str]] = None):
        self._codes: Dict[str, str] = {}
        for code, achievement_id in (codes if codes is not None else DEFAULT_EVENT_CODES).items():
            self.register(code, achievement_id)

    def register(self, code: str, achievement_id: str) -> None:
        self._codes[normalize_code(code)] = achievement_id
        logger.debug(f"Registered event code for {achievement_id}")

    def is_valid(self, code: Optional[str], achievement_id: str) -> bool:
        if not code:
            return False
        return self._codes.get(normalize_code(code)) == achievement_id

    def codes_for(self, achievement_id: str) -> Set[str]:
        return {code for code, target in self._codes.items() if target == achievement_id}

    @classmethod
    def from_config(cls, raw: str, base: Optional[Iterable[tuple[str, str]]] = None) -> "EventCodeRegistry":
        """Built-in codes plus those configured in EVENT_CODES"""
        registry = cls(dict(base) if base is not None else None)
        for code, achievement_id in parse_event_codes(raw).items():
            registry.register(code, achievement_id)
        return registry
