"""Main entry point for the authentication service.

The lifespan in `api.app` owns resource setup and teardown; keep `app` at
module level for `uvicorn auth_service.main:app`.
"""

from auth_service.api.app import create_app

app = create_app()


def run() -> None:
    import uvicorn

    from auth_service.config import get_settings

    settings = get_settings()
    # Reload only in development
    reload = settings.environment == "development"
    uvicorn.run("auth_service.main:app", host=settings.host, port=settings.port, reload=reload)


if __name__ == "__main__":
    run()
