"""Services — componentes do ciclo de vida sobre o estado compartilhado.

Módulos:
    - homeserver_validator: compatibilidade do homeserver (nunca levanta)
    - homeserver_registry: lista de conhecidos e seleção (find-or-insert)
    - login_flows: descoberta dos métodos de login
    - device_verification: dispositivo atual verificado por cross-signing?
    - session_resume: retomada com credencial persistida
    - session_bootstrapper: construção da Client Session com rollback
    - client_teardown: encerramento de clientes e identidade descartados
"""

from session_core.services.client_teardown import forget_identity, release_client
from session_core.services.device_verification import DeviceVerificationCheck
from session_core.services.homeserver_registry import HomeserverRegistry
from session_core.services.homeserver_validator import HomeserverValidator
from session_core.services.login_flows import LoginFlowDiscovery
from session_core.services.session_bootstrapper import SessionBootstrapper
from session_core.services.session_resume import SessionResumer

__all__ = [
    "DeviceVerificationCheck",
    "HomeserverRegistry",
    "HomeserverValidator",
    "LoginFlowDiscovery",
    "SessionBootstrapper",
    "SessionResumer",
    "forget_identity",
    "release_client",
]
