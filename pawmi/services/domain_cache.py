"""
Cache em memória das decisões de CORS para domínios customizados.

Implementacao local (in-memory), por processo. Resultados positivos e
negativos são guardados do mesmo jeito: isso limita a taxa de queries
mesmo para hostnames nunca registrados. Para múltiplos workers, cada
processo mantém o seu cache (staleness limitada pelo TTL).
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(slots=True)
class DomainCacheEntry:
    allowed: bool
    expires_at: float


class DomainCache:
    """Cache hostname → bool com TTL, expiração preguiçosa e limite LRU."""

    def __init__(
        self,
        ttl_seconds: int = 300,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = max(0, int(ttl_seconds))
        self.max_entries = max(0, int(max_entries))
        self._clock = clock
        self._entries: OrderedDict[str, DomainCacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def read(self, hostname: str) -> Optional[bool]:
        """
        Retorna a decisão em cache ou None.

        Entradas vencidas são removidas aqui mesmo (expiração preguiçosa).
        """
        if not hostname:
            return None
        now = self._clock()
        with self._lock:
            entry = self._entries.get(hostname)
            if entry is None:
                return None
            if now >= entry.expires_at:
                del self._entries[hostname]
                return None
            self._entries.move_to_end(hostname)
            return entry.allowed

    def write(self, hostname: str, allowed: bool) -> None:
        """Insere/sobrescreve; com TTL 0 a entrada já nasce vencida."""
        if not hostname:
            return
        now = self._clock()
        expires_at = now + self.ttl_seconds if self.ttl_seconds > 0 else now
        with self._lock:
            self._entries[hostname] = DomainCacheEntry(bool(allowed), expires_at)
            self._entries.move_to_end(hostname)
            if self.max_entries:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def invalidate(self, hostname: str) -> bool:
        """Descarta a decisão de um hostname (chamado quando o status muda)."""
        with self._lock:
            return self._entries.pop(hostname, None) is not None

    def clear(self) -> None:
        """Limpa estado interno."""
        with self._lock:
            self._entries.clear()
