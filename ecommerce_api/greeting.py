"""Standalone greeting server: a greeting, the current time and the requested URL."""

from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

GREETINGS = {
    "/": "Hello, World!",
    "/2": "Hello again, this is page two.",
    "/3": "Page three says hi.",
    "/4": "Greetings from page four.",
    "/5": "Page five, last stop.",
}

app = FastAPI(title="Greeting Server")


def request_target(request: Request) -> str:
    """Path plus query string, as the client sent it."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def greeting_payload(path: str, url: str | None = None, now: datetime | None = None) -> dict[str, str]:
    now = now or datetime.now()
    return {"message": GREETINGS[path], "time": now.strftime(TIME_FORMAT), "url": url or path}


def _register(path: str) -> None:
    @app.api_route(path, methods=ANY_METHOD, name=f"greeting{path.replace('/', '_')}")
    def greet(request: Request):
        return greeting_payload(path, request_target(request))


for _path in GREETINGS:
    _register(_path)


@app.exception_handler(StarletteHTTPException)
async def unknown_endpoint(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "message": "You are accessing an endpoint that was not found",
            "url": request_target(request),
        },
    )


def run() -> None:
    import uvicorn

    from .config import get_settings

    uvicorn.run("ecommerce_api.greeting:app", host="0.0.0.0", port=get_settings().port)
