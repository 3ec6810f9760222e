"""API — camada de borda com o homeserver.

Responsabilidades:
- Falar a Client-Server API do Matrix via HTTP
- Converter respostas e erros do servidor em modelos internos
- Rodar o sync loop e a verificação de dispositivos

Subpastas:
- connectors/: adapters HTTP por protocolo

NÃO PODE conter: FSM, regras de sessão, orquestração do ciclo de vida.
"""
