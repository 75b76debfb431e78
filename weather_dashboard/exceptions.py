"""Error kinds shared by the provider client, the proxy and the dashboard."""


class WeatherDashboardError(Exception):
    """Base error; `message` is what ends up in front of the user."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InputValidationError(WeatherDashboardError):
    """Raised for empty or too-short input, before any network call."""


class TransportFailureError(WeatherDashboardError):
    """Raised when the remote side could not be reached (DNS, refused, timeout)."""


class UpstreamFailureError(WeatherDashboardError):
    """Raised when the provider (or proxy) answered with a failure."""


class MalformedResponseError(WeatherDashboardError):
    """Raised when a response is missing fields we depend on."""
