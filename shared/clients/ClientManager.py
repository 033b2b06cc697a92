from abc import ABC, abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class ClientManager(ABC):
    """
    Picks the engine of one client type from ``<TYPE>_ENGINE`` and instantiates
    ``shared.clients.<type>.<engine>.<Type>Client<Engine>``.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    @abstractmethod
    def _get_client_type(self) -> str:
        """Client type as used in module paths and env keys, e.g. "store"."""
        pass

    @abstractmethod
    def _get_default_engine(self) -> str:
        pass

    def _get_engine_from_env(self) -> str:
        """
        Reads the engine for this client type.

        Returns:
            str: The capitalised engine name (e.g. "Supabase").

        Raises:
            ValueError: If the configured engine is blank.
        """
        client_type = self._get_client_type()
        engine = self.helper_config.get_string_val(f"{client_type.upper()}_ENGINE", default=self._get_default_engine())
        if not engine.strip():
            raise ValueError(f"No {client_type} engine specified in configuration.")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> ClientInterface:
        """
        Raises:
            ValueError: If no client class exists for the configured engine.
        """
        client_type = self._get_client_type()
        engine = self._get_engine_from_env()
        className = f"{client_type.capitalize()}Client{engine}"
        try:
            module = __import__(
                f"shared.clients.{client_type}.{engine.lower()}.{className}",
                fromlist=[className],
            )
            client_class = getattr(module, className)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {client_type} engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client for engine: %s", client_type, engine)
        return client

    def get_client(self) -> ClientInterface:
        return self.client
