import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.v1.health import router as health_router
from api.v1.index import router as index_router
from api.v1.scrape import router as scrape_router
from core.errors import ScrapeError
from core.logging_setup import setup_logging
from core.settings import settings

setup_logging(settings)
log = logging.getLogger(__name__)


app = FastAPI(
    title="OLX Scraper API",
    version=settings.app_version,
    debug=settings.DEBUG,
)

app.include_router(index_router)
app.include_router(health_router)
app.include_router(scrape_router)


@app.exception_handler(ScrapeError)
async def scrape_error_handler(request: Request, exc: ScrapeError):
    log.warning(f"[API] {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
