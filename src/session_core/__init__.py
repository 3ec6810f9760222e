"""Session core — ciclo de vida da conexão com um homeserver Matrix.

Subpastas:
- bootstrap/: composition root (factories de stores, cliente e façade)
- domain/: modelos puros (Homeserver)
- identity/: Identity Store (homeservers, credencial, device id)
- infra/: implementações concretas de persistência
- protocols/: contratos do cliente do protocolo e dos stores
- services/: validação, registro, login flows, verificação, resume, bootstrap
- sessions/: estado compartilhado e façade (MatrixSessionManager)
- observability/: correlation id por tentativa

Padrão: session_core orquestra; api/connectors fala o protocolo; fsm governa.
"""
