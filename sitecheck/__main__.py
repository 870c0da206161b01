"""
Run the API server: python -m sitecheck
"""
import uvicorn

from sitecheck.config import settings


def main():
    uvicorn.run(
        "sitecheck.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
