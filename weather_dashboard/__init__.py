"""Weather dashboard: an OpenWeatherMap proxy and the dashboard controller that consumes it."""
