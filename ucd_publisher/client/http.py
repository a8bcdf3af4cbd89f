# ucd_publisher/client/http.py
"""Authenticated HTTP layer shared by all REST resource clients."""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import requests
import urllib3
from pydantic import BaseModel, ValidationError
from requests.auth import HTTPBasicAuth

from ucd_publisher.core.errors import (
    ConnectivityError,
    CredentialsError,
    ResponseFormatError,
    ServerResponseError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class UCDHttpClient:
    """
    Thin wrapper around a requests Session for one deployment server.

    Basic credentials are attached to every request. 401 responses raise
    CredentialsError, any other non-2xx raises ServerResponseError.
    """

    def __init__(
        self,
        base_url: str,
        user: str,
        password: str,
        *,
        trust_all_certs: bool = False,
        timeout: Optional[float] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Server URL (e.g., "https://ucd.example.com:8443")
            user: User name for basic authentication
            password: Plaintext password, resolved by the caller
            trust_all_certs: Skip TLS certificate verification
            timeout: Per-request timeout in seconds, None to wait indefinitely
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._session = requests.Session()
        self._session.auth = HTTPBasicAuth(user, password)
        self._session.headers.update({"Accept": "application/json"})
        self._session.verify = not trust_all_certs

        if trust_all_certs:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def close(self) -> None:
        self._session.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"

        logger.debug(f"[http] {method} {url}")

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ConnectivityError(f"Request to {url} timed out after {self.timeout}s", url=url) from e
        except requests.exceptions.RequestException as e:
            raise ConnectivityError(f"Cannot connect to deployment server at {url}: {e}", url=url) from e

        if response.status_code == 401:
            raise CredentialsError(
                "Error connecting to the deployment server: Invalid user and/or password",
                status_code=401,
                url=response.url or url,
            )

        if not 200 <= response.status_code < 300:
            detail = response.text.strip() if response.text else ""
            message = f"Error connecting to the deployment server: {response.status_code} using URI: {response.url or url}"
            if detail:
                message = f"{message}: {detail}"
            raise ServerResponseError(message, status_code=response.status_code, url=response.url or url)

        return response

    # -------------------------
    # JSON helpers
    # -------------------------

    def get_json(self, path: str, *, params: Optional[Dict[str, Any]] = None, operation: str = "") -> Any:
        return self.parse_json(self.request("GET", path, params=params), operation or f"GET {path}")

    def put_json(
        self,
        path: str,
        body: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        operation: str = "",
    ) -> Any:
        response = self.request("PUT", path, params=params, json=body, headers=headers)
        return self.parse_json(response, operation or f"PUT {path}", allow_empty=True)

    def post_json(
        self,
        path: str,
        body: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        operation: str = "",
    ) -> Any:
        response = self.request("POST", path, params=params, json=body)
        return self.parse_json(response, operation or f"POST {path}", allow_empty=True)

    def delete(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> None:
        self.request("DELETE", path, params=params)

    @staticmethod
    def parse_json(response: requests.Response, operation: str, *, allow_empty: bool = False) -> Any:
        if allow_empty and not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(
                f"{operation}: server returned invalid JSON payload"
            ) from e

    @staticmethod
    def parse_model(payload: Any, model: Type[ModelT], operation: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise ResponseFormatError(
                f"{operation}: unexpected response shape: {e}"
            ) from e
