"""Creditor and bureau address resolution.

Lookup order is the static table (exact key, alias, partial key, partial
alias) followed by an OpenAI lookup whose answers, including misses, are kept
in an in-process cache for 24 hours.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

from credit800.core.addresses.database import ALIASES, CREDITOR_DATABASE, CreditorAddress
from credit800.core.services.ai_client import AIClient, AIConfig, build_ai_client

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 24 * 60 * 60


class AddressLookupError(RuntimeError):
    """The AI address lookup call failed."""


_PUNCTUATION_RE = re.compile(r"[.,'\"!@#$%^&*()_+=\[\]{}|\\/<>?]")
_SUFFIX_RE = re.compile(
    r"\b(llc|inc|corp|corporation|company|co|ltd|lp|group|associates|services|solutions|systems)\b"
)
_WHITESPACE_RE = re.compile(r"\s+")

ADDRESS_LOOKUP_PROMPT = """You are a factual database lookup tool. Given a creditor or debt collection company name, provide their official mailing address for consumer disputes or correspondence.

RULES:
- Only provide addresses you are highly confident are correct
- Prefer P.O. Box or designated dispute/consumer relations department addresses
- If you are not confident about the address, set confidence to "low"
- Never fabricate an address

Respond with JSON: { "name": string, "address": string, "city": string, "state": string, "zip": string, "department": string | null, "confidence": "high" | "medium" | "low" }"""


def normalize_name(name: str) -> str:
    lowered = (name or "").lower()
    stripped = _PUNCTUATION_RE.sub("", lowered)
    stripped = _SUFFIX_RE.sub("", stripped)
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def lookup_static(creditor_name: str) -> Optional[CreditorAddress]:
    normalized = normalize_name(creditor_name)
    if not normalized:
        return None

    if normalized in CREDITOR_DATABASE:
        return CREDITOR_DATABASE[normalized]

    target = ALIASES.get(normalized)
    if target and target in CREDITOR_DATABASE:
        return CREDITOR_DATABASE[target]

    for key, address in CREDITOR_DATABASE.items():
        if key in normalized or normalized in key:
            return address

    for alias, target in ALIASES.items():
        if alias in normalized or normalized in alias:
            return CREDITOR_DATABASE.get(target)

    return None


def get_bureau_address(bureau: str) -> Optional[CreditorAddress]:
    key = normalize_name(bureau).replace(" ", "")
    return CREDITOR_DATABASE.get(key)


def format_address(addr: CreditorAddress) -> str:
    return "\n".join(format_address_lines(addr))


def format_address_lines(addr: CreditorAddress) -> List[str]:
    lines: List[str] = []
    if addr.department:
        lines.append(addr.department)
    lines.append(addr.address)
    lines.append(f"{addr.city}, {addr.state} {addr.zip}")
    return lines


K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Small thread-safe mapping whose entries expire after ``ttl`` seconds."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[K, Tuple[float, V]] = {}

    def get(self, key: K) -> Tuple[bool, Optional[V]]:
        """Return ``(hit, value)``; ``value`` may legitimately be ``None``."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            stored_at, value = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[key]
                return False, None
            return True, value

    def set(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AddressResolver:
    """Resolve dispute mailing addresses: static table first, then OpenAI."""

    def __init__(
        self,
        ai_config: AIConfig | None,
        *,
        client_factory: Callable[[AIConfig], AIClient] = build_ai_client,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        model: str = "gpt-4o-mini",
    ) -> None:
        self._ai_config = ai_config
        self._client_factory = client_factory
        self._client: AIClient | None = None
        self._model = model
        self.cache: TTLCache[str, Optional[CreditorAddress]] = TTLCache(ttl, clock)

    @property
    def ai_enabled(self) -> bool:
        return self._ai_config is not None and self._ai_config.usable

    def resolve(self, creditor_name: str) -> Optional[CreditorAddress]:
        found = lookup_static(creditor_name)
        if found is not None:
            return found
        try:
            return self.lookup_ai(creditor_name)
        except AddressLookupError as exc:
            logger.error("ADDRESS_AI_LOOKUP_FAILED creditor=%s error=%s", creditor_name, exc)
            return None

    def lookup_ai(self, creditor_name: str) -> Optional[CreditorAddress]:
        if not self.ai_enabled:
            return None

        normalized = normalize_name(creditor_name)
        hit, cached = self.cache.get(normalized)
        if hit:
            logger.debug("ADDRESS_AI_CACHE_HIT creditor=%s", normalized)
            return cached

        if self._client is None:
            self._client = self._client_factory(self._ai_config)

        try:
            response = self._client.chat_completion(
                model=self._model,
                messages=[
                    {"role": "system", "content": ADDRESS_LOOKUP_PROMPT},
                    {
                        "role": "user",
                        "content": f"What is the official mailing address for disputes with: {creditor_name}",
                    },
                ],
                temperature=0,
            )
        except Exception as exc:
            raise AddressLookupError(str(exc)) from exc
        result = self._address_from_payload(creditor_name, response.get("json"))
        self.cache.set(normalized, result)
        logger.info(
            "ADDRESS_AI_LOOKUP creditor=%s found=%s",
            normalized,
            "yes" if result is not None else "no",
        )
        return result

    @staticmethod
    def _address_from_payload(creditor_name: str, payload: Optional[dict]) -> Optional[CreditorAddress]:
        if not payload or payload.get("confidence") == "low":
            return None
        if not payload.get("address") or not payload.get("city"):
            return None
        return CreditorAddress(
            name=payload.get("name") or creditor_name,
            address=str(payload["address"]),
            city=str(payload["city"]),
            state=str(payload.get("state") or ""),
            zip=str(payload.get("zip") or ""),
            department=payload.get("department") or None,
            source="ai",
            confidence=payload.get("confidence"),
        )
