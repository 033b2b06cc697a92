from abc import ABC, abstractmethod
from typing import Any

import httpx
from httpx._types import QueryParamTypes

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientInterface(ABC):
    """
    Async HTTP base for every external system the bridge talks to (record store, processing backend).

    Subclasses describe their engine (name, config keys, auth, endpoints); the request
    plumbing, JSON decoding and lifecycle live here. One httpx.AsyncClient is opened by
    boot() and released by close(), or by leaving an ``async with`` block.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)
        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    async def __aenter__(self) -> "ClientInterface":
        await self.boot()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Reads every declared config key once so a missing required value fails at construction.

        Raises:
            ValueError: If any required configuration value is missing or invalid.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def is_booted(self) -> bool:
        return self._client is not None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """Lowercase client type, e.g. "store" or "backend"."""
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        pass

    def get_engine_name(self) -> str:
        """Lowercase engine name, e.g. "supabase" or "django"."""
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """Display name of the engine, e.g. "Supabase"."""
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns the env settings this engine reads.

        Returns:
            list[EnvConfig]: One entry per key; a None default marks the key as required.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The env key for a raw engine key, e.g. "BASE_URL" -> "STORE_SUPABASE_BASE_URL".
        """
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads one engine setting through the HelperConfig.

        Args:
            raw_key (str): Key without the client type and engine prefix.
            default (Any): Fallback value; None makes the key required.
            val_type (str): "string", "number", "bool" or "list".
        """
        key = self._get_config_key_name(raw_key)
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in readers:
            raise ValueError(f"Unsupported config value type '{val_type}' for env key '{key}' in {self.get_client_type()} client '{self.get_engine_name()}'.")
        return readers[val_type](key, default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Headers sent with every request (API key, request id, ...). Empty when the engine needs none.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns:
            str: Scheme and host of the engine, e.g. "http://localhost:8000".
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        pass

    def _build_url(self, endpoint: str) -> str:
        endpoint = endpoint.strip()
        path = "/" + endpoint.lstrip("/") if endpoint else ""
        return f"{self._get_base_url().rstrip('/')}{path}"

    def _build_headers(self, additional_headers: dict | None) -> dict:
        # Content-Type is left to httpx, which derives it from the json body
        headers = dict(self._get_auth_header())
        headers.update(additional_headers or {})
        return headers

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """
        Sends a GET to the engine's healthcheck endpoint.

        Raises:
            httpx.HTTPError: If the engine is unreachable or answers with a non-2xx status.
        """
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck(), raise_on_error=True)

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self) -> None:
        """Open the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        endpoint: str = "",
        json: dict | list | None = None,
        params: QueryParamTypes | None = None,
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """
        Sends one request to the engine.

        Args:
            method (str): HTTP method.
            endpoint (str): Path appended to the base URL (leading slash optional).
            json (dict | list | None): JSON body.
            params (QueryParamTypes | None): URL query parameters.
            additional_headers (dict | None): Headers merged over the auth headers.
            raise_on_error (bool): Raise on any status outside 2xx.

        Returns:
            httpx.Response: The raw response.

        Raises:
            RuntimeError: If boot() was not called.
            httpx.HTTPError: On transport failures, or on a non-2xx status when raise_on_error is set.
        """
        if self._client is None:
            raise RuntimeError(f"{self._get_engine_name()} client not booted. Call boot() before making requests.")

        url = self._build_url(endpoint)
        response = await self._client.request(
            method,
            url,
            json=json,
            params=params,
            headers=self._build_headers(additional_headers),
            timeout=self.timeout,
        )

        if raise_on_error and not response.is_success:
            self.logging.error("%s %s failed with status %d: %s", method, url, response.status_code, response.text[:200])
            raise httpx.HTTPStatusError(
                f"{method} {url} failed with status {response.status_code}",
                request=response.request,
                response=response,
            )

        return response

    async def do_request_json(self, method: str = "GET", endpoint: str = "", **kwargs) -> Any:
        """do_request() with raise_on_error set, returning the decoded JSON body (None for an empty body)."""
        response = await self.do_request(method=method, endpoint=endpoint, raise_on_error=True, **kwargs)
        if not response.content:
            return None
        return self.parse_json(response)

    def parse_json(self, response: httpx.Response) -> Any:
        """Decode a response body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        try:
            return response.json()
        except ValueError as e:
            raise ValueError(f"Invalid JSON from {self.get_engine_name()} ({response.status_code}): {e}")
