"""HTTP proxy in front of the weather provider: one query-string driven endpoint."""

import hmac
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from .config import settings
from .exceptions import InputValidationError, WeatherDashboardError
from .models import ApiEnvelope
from .providers import WeatherProvider, default_provider
from .providers.openweather_client import MIN_SEARCH_LENGTH
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_dashboard/api")

AVAILABLE_ACTIONS = ("current", "forecast", "search")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header when a key is configured; open otherwise."""
    if not settings.api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
PROVIDER: WeatherProvider = default_provider()


def _failure(error: str, http_code: Optional[int] = None) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"success": False, "error": error}
    if http_code is not None:
        envelope["http_code"] = http_code
    return envelope


def _current(provider: WeatherProvider, city: Optional[str]) -> Dict[str, Any]:
    if not city:
        return _failure("City parameter is required")
    snapshot = provider.fetch_current_weather(city)
    return {"success": True, "data": snapshot.model_dump()}


def _forecast(provider: WeatherProvider, city: Optional[str]) -> Dict[str, Any]:
    if not city:
        return _failure("City parameter is required")
    return {"success": True, "data": provider.fetch_forecast(city)}


def _search(provider: WeatherProvider, query: Optional[str]) -> Dict[str, Any]:
    if not query:
        return _failure("Query parameter is required")
    if len(query) < MIN_SEARCH_LENGTH:
        return _failure("Query too short")
    result = provider.search_city(query)
    return {"success": True, "data": result.model_dump()}


def handle_action(
    action: Optional[str],
    *,
    city: Optional[str] = None,
    q: Optional[str] = None,
    provider: Optional[WeatherProvider] = None,
) -> Dict[str, Any]:
    """
    Dispatch one proxy request and always return an envelope.

    Provider errors become `{success: false, error, http_code}`; input errors are
    answered locally without contacting the provider.
    """
    provider = provider or PROVIDER
    try:
        if action == "current":
            return _current(provider, city)
        if action == "forecast":
            return _forecast(provider, city)
        if action == "search":
            return _search(provider, q)
        return _failure(f"Invalid action. Available actions: {', '.join(AVAILABLE_ACTIONS)}")
    except InputValidationError as exc:
        logger.debug(f"Rejected {action} request: {exc.message}")
        return _failure(exc.message)
    except WeatherDashboardError as exc:
        logger.warning(
            "Provider call failed",
            extra={"action": action, "error": exc.message, "http_code": exc.status_code},
        )
        return _failure(exc.message, exc.status_code)
    except Exception as exc:
        logger.exception("Unhandled error while serving %s", action)
        return _failure(f"Server error: {exc}")


@router.get("/api", response_model=ApiEnvelope, response_model_exclude_none=True)
@router.get("/api.php", response_model=ApiEnvelope, response_model_exclude_none=True, include_in_schema=False)
def proxy(action: str = "", city: str | None = None, q: str | None = None):
    """Single proxy endpoint: `?action=current|forecast&city=...` or `?action=search&q=...`."""
    logger.info(f"Proxy request action={action!r} city={city!r} q={q!r}")
    return handle_action(action, city=city, q=q)
