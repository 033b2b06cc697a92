from shared.clients.ClientManager import ClientManager
from shared.clients.store.StoreClientInterface import StoreClientInterface


class StoreClientManager(ClientManager):
    """
    Selects the record store engine from STORE_ENGINE (default "supabase").
    """

    def _get_client_type(self) -> str:
        return "store"

    def _get_default_engine(self) -> str:
        return "supabase"

    def get_client(self) -> StoreClientInterface:
        return self.client
