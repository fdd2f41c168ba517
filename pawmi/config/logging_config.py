"""
Configuração de logging estruturado da API.
Fornece loggers configurados para cada módulo.
"""

import hashlib
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configura o logging global da aplicação.

    Args:
        level: Nível de logging (default: INFO)
        log_file: Caminho opcional para arquivo de log
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger("pawmi")
    root_logger.setLevel(level)

    # Evita handlers duplicados quando create_app() roda mais de uma vez (testes)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_pawmi_handler", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._pawmi_handler = True
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._pawmi_handler = True
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Retorna logger para um módulo específico.

    Args:
        name: Nome do módulo (ex: 'cors', 'tenant')

    Returns:
        Logger configurado com prefixo 'pawmi.'

    Example:
        >>> logger = get_logger('cors')
        >>> logger.warning("Origem negada")
        # Output: 2026-01-09 17:30:00 | WARNING  | pawmi.cors | Origem negada
    """
    return logging.getLogger(f"pawmi.{name}")


def token_fingerprint(token: str) -> str:
    """Identificador curto e estável para logar tokens sem expô-los."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]
