import uvicorn

from app.settings import ProxySettings
from app.vars import HOST


def main() -> None:
    settings = ProxySettings.from_env()
    uvicorn.run(
        "app.server:app",
        host=HOST,
        port=settings.port,
        reload=settings.is_development(),
    )


if __name__ == "__main__":
    main()
