from shared.clients.ClientManager import ClientManager
from shared.clients.backend.BackendClientInterface import BackendClientInterface


class BackendClientManager(ClientManager):
    """
    Selects the processing backend engine from BACKEND_ENGINE (default "django").
    """

    def _get_client_type(self) -> str:
        return "backend"

    def _get_default_engine(self) -> str:
        return "django"

    def get_client(self) -> BackendClientInterface:
        return self.client
