"""Connectors — adapters de borda para APIs externas.

Estrutura:
- matrix/: Client-Server API do Matrix (versões, who-am-i, login, /sync, /keys/query)
"""

__all__: list[str] = []
