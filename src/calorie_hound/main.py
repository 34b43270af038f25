"""Command-line entrypoint that serves the app on localhost."""

import uvicorn

from calorie_hound.api.app import create_app
from calorie_hound.app_logging import configure_logging
from calorie_hound.config import Settings
from calorie_hound.containers import build_container


def main() -> None:
    """Build the container and serve the API with uvicorn."""
    settings = Settings()
    configure_logging(settings.log_level)
    container = build_container(settings)
    app = create_app(container)
    uvicorn.run(app, host=container.settings.host, port=container.settings.port)


if __name__ == "__main__":
    main()
