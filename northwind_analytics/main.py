"""
Northwind Analytics API entry point.

    uvicorn northwind_analytics.main:app
"""

from northwind_analytics.config.logging import configure_logging
from northwind_analytics.serving.api import create_api_app

configure_logging()

app = create_api_app()


if __name__ == "__main__":
    import uvicorn
    from northwind_analytics.config import get_settings

    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
