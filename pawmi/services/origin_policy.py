"""
Allow-list estática de origens CORS.

Decide, só com a configuração carregada no startup e sem I/O, se o
header Origin de uma requisição está liberado. Entradas aceitas:

    https://app.example.com   origem exata
    app.example.com           hostname exato
    *.example.com             qualquer subdomínio de example.com
    *                         tudo (dev/túneis)
"""

from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import urlsplit

from pawmi.config.constants import CorsPolicy


def parse_allowed_origins(raw: Optional[str]) -> tuple[str, ...]:
    """Converte ALLOWED_ORIGINS (separado por vírgula) em entradas limpas."""
    if not raw:
        return ()
    return tuple(entry.strip() for entry in raw.split(",") if entry.strip())


def extract_hostname(origin: str) -> str:
    """
    Hostname da origem; se não der para interpretar como URL, a string crua.

    Nunca levanta exceção: origem malformada degrada para comparação literal.
    """
    try:
        hostname = urlsplit(origin).hostname
    except ValueError:
        return origin
    if not hostname:
        return origin
    # urlsplit tira os colchetes do IPv6; a allow-list usa a forma "[::1]"
    if ":" in hostname:
        return f"[{hostname}]"
    return hostname


def _entry_matches(entry: str, origin: str, hostname: str) -> bool:
    if not entry:
        return False
    if entry.startswith(CorsPolicy.WILDCARD_PREFIX):
        # "*.example.com" → sufixo ".example.com"; o domínio nu não casa
        return hostname.endswith(entry[1:])
    return entry == origin or entry == hostname


def matches_allowed_list(origin: Optional[str], entries: Iterable[str]) -> bool:
    entries = tuple(entries)
    if CorsPolicy.ALLOW_ALL in entries:
        return True
    # Sem Origin: same-origin, server-to-server, curl
    if not origin:
        return True

    hostname = extract_hostname(origin)
    return any(_entry_matches(entry, origin, hostname) for entry in entries)


class StaticOriginPolicy:
    """Allow-list imutável durante a vida do processo."""

    def __init__(self, entries: Iterable[str]):
        self.entries: tuple[str, ...] = tuple(entries)

    @classmethod
    def from_setting(cls, raw: Optional[str]) -> "StaticOriginPolicy":
        return cls(parse_allowed_origins(raw))

    def is_allowed(self, origin: Optional[str]) -> bool:
        return matches_allowed_list(origin, self.entries)
