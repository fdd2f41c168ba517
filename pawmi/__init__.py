# Pawmi Source Package
"""
Gate de tenant e origem da API Pawmi.

Módulos:
- config: Settings, constantes, exceções e logging
- domain: Tabelas SQLModel (contas, membros, domínios, API keys)
- infrastructure: Engine/sessão, repositórios e verificação de tokens
- services: Allow-list CORS, cache de domínios, autorizador, resolução de tenant
- presentation: Rotas HTTP
- server: App FastAPI, middlewares e entrypoint
"""
