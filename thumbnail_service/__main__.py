import uvicorn

from thumbnail_service.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("thumbnail_service.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
