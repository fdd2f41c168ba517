#!/usr/bin/env python3
"""
Pawmi - API multi-tenant
========================

Entry point da aplicação.
Execute com: python Pawmi.py

Arquitetura:
    pawmi/
    ├── config/         # Settings, constantes, exceções, logging
    ├── domain/         # Tabelas SQLModel
    ├── infrastructure/ # Engine async, repositórios, verificação de tokens
    ├── services/       # CORS allow-list, cache de domínios, tenant
    ├── presentation/   # Rotas HTTP
    └── server/         # App FastAPI e middlewares
"""

import os
import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def main():
    """
    Função principal que configura e inicia o servidor Uvicorn.

    Host/porta vêm do settings (server.host / server.port, default 4000).
    """
    # Adiciona diretório atual ao path para garantir imports corretos
    sys.path.append(os.path.dirname(os.path.abspath(__file__)))

    from pawmi.config.settings import settings

    project_root = os.path.dirname(os.path.abspath(__file__))
    package_dir = os.path.join(project_root, "pawmi")

    # Pode ser desabilitado com PAWMI_RELOAD=0
    reload_enabled = os.getenv("PAWMI_RELOAD", "1").lower() not in {"0", "false", "no"}
    if settings.is_production:
        reload_enabled = False

    print(f"Starting Pawmi API on http://{settings.server.host}:{settings.server.port}")

    uvicorn.run(
        "pawmi.server.app:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=reload_enabled,
        reload_dirs=[package_dir],
        reload_excludes=[".venv/*", ".git/*", "__pycache__/*"],
    )


if __name__ == "__main__":
    main()
