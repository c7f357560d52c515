import uvicorn

from gallery.core.config import settings


def main():
    """Run the gallery server on the configured host and port."""
    uvicorn.run("gallery.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
