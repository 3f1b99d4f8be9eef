import logging
import time

import httpx

from .config import settings
from .domain import RECORD_CLASSES, RECORD_SINGULAR, Pet, RecordType, User
from .errors import ERRORS_BY_STATUS, NetworkError, PetRecordsError

logger = logging.getLogger(__name__)


def raise_for_error(response: httpx.Response) -> dict:
    """Return the JSON body of a 2xx response, or raise the matching PetRecordsError."""
    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.is_success:
        return body

    message = ""
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or ""
    message = message or f"HTTP error! status: {response.status_code}"

    error_cls = ERRORS_BY_STATUS.get(response.status_code, PetRecordsError)
    error = error_cls(message)
    if error_cls is PetRecordsError:
        error.code = response.status_code
    raise error


class ApiClient:
    """
    HTTP collaborator of the client view-state store.

    Tries each candidate base URL (probing GET /health) and pins the first
    that answers.  Transport errors are retried ``max_retries`` times before
    a NetworkError; HTTP error statuses are mapped back onto the same error
    classes the backend raised.
    """

    def __init__(self, base_urls=None, *, timeout=None, max_retries=None, retry_delay=None,
                 transport: httpx.BaseTransport | None = None):
        if isinstance(base_urls, str):
            base_urls = [base_urls]
        self.base_urls = [u.rstrip("/") for u in (base_urls or settings.base_urls)]
        self.timeout = settings.request_timeout if timeout is None else timeout
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self.base_url: str | None = None

        # verify=False: development servers on the LAN use self-signed certs
        self.client = httpx.Client(verify=False, timeout=self.timeout, transport=transport)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ----------------------------
    # Transport
    # ----------------------------
    def resolve_base_url(self) -> str:
        if self.base_url:
            return self.base_url

        for candidate in self.base_urls:
            try:
                response = self.client.get(f"{candidate}/health")
            except httpx.RequestError as e:
                logger.info("Base URL %s unreachable: %s", candidate, e)
                continue
            if response.status_code == 200:
                logger.info("Using API base URL %s", candidate)
                self.base_url = candidate
                return candidate

        raise NetworkError(
            "Unable to connect to API server. Please ensure the server is running. "
            f"Tried: {', '.join(self.base_urls)}"
        )

    def make_request(self, method, url, params=None, json=None) -> httpx.Response:
        error_message = ""
        base_url = self.resolve_base_url()

        for attempt in range(1, self.max_retries + 1):
            try:
                # Do NOT raise here: callers map status codes themselves
                return self.client.request(method, f"{base_url}{url}", params=params, json=json)
            except httpx.RequestError as e:
                logger.warning("Attempt %s: Request error with %s %s: %s", attempt, method.upper(), url, e)
                error_message = f"Attempt {attempt}: Request error: {e}"

            # wait before retrying (only on request errors)
            if attempt < self.max_retries:
                time.sleep(self.retry_delay)

        # Forget the pinned URL so the next call probes the candidates again
        self.base_url = None
        raise NetworkError(
            f"Failed to make the request after {self.max_retries} attempts. {error_message}"
        )

    def _call(self, method, url, params=None, json=None) -> dict:
        return raise_for_error(self.make_request(method, url, params=params, json=json))

    # ----------------------------
    # Operations
    # ----------------------------
    def health(self) -> dict:
        return self._call("GET", "/health")

    def register(self, email: str, password: str) -> User:
        data = self._call("POST", "/auth/register", json={"email": email, "password": password})
        return User.from_dict(data["user"])

    def login(self, email: str, password: str) -> User:
        data = self._call("POST", "/auth/login", json={"email": email, "password": password})
        return User.from_dict(data["user"])

    def get_pets(self, user_id: str) -> list[Pet]:
        data = self._call("GET", "/pets", params={"userId": user_id})
        return [Pet.from_dict(p) for p in data.get("pets") or []]

    def add_pet(self, payload: dict) -> Pet:
        data = self._call("POST", "/pets", json=payload)
        return Pet.from_dict(data["pet"])

    def delete_pet(self, pet_id: str) -> dict:
        return self._call("DELETE", f"/pets/{pet_id}")

    def get_records(self, pet_id: str, record_type) -> list:
        kind = RecordType.parse(record_type)
        data = self._call("GET", f"/records/{pet_id}/{kind.value}")
        return [RECORD_CLASSES[kind].from_dict(r) for r in data.get(kind.value) or []]

    def add_record(self, record_type, payload: dict):
        kind = RecordType.parse(record_type)
        data = self._call("POST", f"/{kind.value}", json=payload)
        return RECORD_CLASSES[kind].from_dict(data[RECORD_SINGULAR[kind.value]])

    def delete_record(self, record_type, record_id: str) -> dict:
        kind = RecordType.parse(record_type)
        return self._call("DELETE", f"/{kind.value}/{record_id}")
