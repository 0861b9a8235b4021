"""
CustomCat catalog client.

The provider's API surface is inconsistently documented, so the same
"list products" call is tried against an ordered list of candidate
endpoints. Candidates are tried one at a time; the first success wins and
no later candidate is contacted.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests

from storefront.config import settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    name: str
    url: str
    extra_params: Dict[str, str] = field(default_factory=dict)


CUSTOMCAT_ENDPOINTS: Tuple[Endpoint, ...] = (
    Endpoint(
        name="CustomCat Digisoft Category",
        url="https://customcat-beta.mylocker.net/api/v1/catalog",
        extra_params={"category": "Digisoft", "limit": "25"},
    ),
    Endpoint(
        name="CustomCat Catalog Page 1",
        url="https://customcat-beta.mylocker.net/api/v1/catalog",
        extra_params={"limit": "25", "page": "1"},
    ),
    Endpoint(
        name="CustomCat Production API",
        url="https://customcat.com/api/v1/catalog",
        extra_params={"limit": "25"},
    ),
    Endpoint(
        name="CustomCat Partner API",
        url="https://api.customcat.com/v1/catalog",
        extra_params={"limit": "50"},
    ),
)


class EndpointError(Exception):
    """One candidate failed; the probe moves on to the next."""
    pass


class UnrecognizedPayload(ValueError):
    pass


@dataclass
class ProbeResult:
    success: bool
    message: str
    products: List[Dict[str, Any]] = field(default_factory=list)
    endpoint: Optional[Endpoint] = None
    errors: Dict[str, str] = field(default_factory=dict)


def normalize_catalog_payload(payload: Any) -> Tuple[str, List[Any]]:
    """
    Reduce the provider's response shapes to one list of records.
    Returns (kind, records) with kind one of "array", "products", "data".
    """
    if isinstance(payload, list):
        return "array", payload
    if isinstance(payload, dict):
        for kind in ("products", "data"):
            if isinstance(payload.get(kind), list):
                return kind, payload[kind]
    raise UnrecognizedPayload(f"Unrecognized catalog response ({type(payload).__name__})")


def try_in_order(
    endpoints: Sequence[Endpoint], attempt: Callable[[Endpoint], List[Any]]
) -> ProbeResult:
    """
    Call `attempt` for each endpoint until one returns without raising
    EndpointError. Errors are keyed by endpoint name.
    """
    errors: Dict[str, str] = {}
    for endpoint in endpoints:
        try:
            products = attempt(endpoint)
        except EndpointError as e:
            errors[endpoint.name] = str(e)
            log.warning("CustomCat endpoint %r failed: %s", endpoint.name, e)
            continue
        log.info("CustomCat endpoint %r returned %d products", endpoint.name, len(products))
        return ProbeResult(
            success=True,
            message=f"Retrieved {len(products)} products from {endpoint.name}",
            products=products,
            endpoint=endpoint,
            errors=errors,
        )
    return ProbeResult(
        success=False,
        message="Failed to fetch products from CustomCat",
        errors=errors,
    )


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return f"API Error ({response.status_code})"


class CustomCatClient:
    def __init__(
        self,
        api_key: str,
        endpoints: Sequence[Endpoint] = CUSTOMCAT_ENDPOINTS,
        session=None,
        timeout: Optional[float] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.endpoints = tuple(endpoints)
        self.session = session or requests.Session()
        self.timeout = settings.CUSTOMCAT_TIMEOUT_SECONDS if timeout is None else timeout

    def _fetch(self, endpoint: Endpoint) -> List[Any]:
        params = {"api_key": self.api_key, **endpoint.extra_params}
        log.debug("Trying CustomCat endpoint %s (%s)", endpoint.name, endpoint.url)
        try:
            r = self.session.get(
                endpoint.url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            # exception text can echo the full URL, key included
            raise EndpointError(str(e).replace(self.api_key, "***"))
        if not 200 <= r.status_code < 300:
            raise EndpointError(_error_message(r))
        try:
            _, products = normalize_catalog_payload(r.json())
        except ValueError as e:
            raise EndpointError(str(e) or "Invalid JSON in response")
        return products

    def fetch_products(self) -> ProbeResult:
        if not self.api_key:
            return ProbeResult(
                success=False,
                message="API key is required",
                errors={"general": "Missing API key"},
            )
        return try_in_order(self.endpoints, self._fetch)
