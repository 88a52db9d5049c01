"""
Application Entry Point
"""
import uvicorn

from wealth_oven.core.config import get_settings

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "wealth_oven.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
