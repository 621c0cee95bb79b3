import uvicorn

from mediarelay.config.settings import config


def main() -> None:
    uvicorn.run(
        "mediarelay.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
