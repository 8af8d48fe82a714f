"""CORS proxy in front of the Lens GraphQL API.

Browsers can't call the Lens API directly (CORS, and the firewall wants a
User-Agent). These endpoints forward `{query, variables}` and relay the
upstream JSON:

  POST /api/proxy/accounts  account by username (defaults from settings)
  POST /api/proxy/stats     account stats; the query is fixed server-side
  POST /api/proxy/posts     posts; query and variables forwarded as-is

Run with `python -m lens_profile.proxy.app` or `uvicorn lens_profile.proxy.app:app`.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from lens_profile.config import DEFAULT_API_URL, DEFAULT_USER_AGENT
from lens_profile.lens import queries

logger = logging.getLogger(__name__)

UPSTREAM_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


@dataclass(frozen=True)
class ProxySettings:
    api_url: str = DEFAULT_API_URL
    default_local_name: Optional[str] = None
    default_namespace: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    site_dir: Optional[str] = None
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "ProxySettings":
        load_dotenv()
        return cls(
            api_url=os.environ.get("LENS_API_URL") or DEFAULT_API_URL,
            default_local_name=os.environ.get("DEFAULT_LOCALNAME") or None,
            default_namespace=os.environ.get("DEFAULT_NAMESPACE") or None,
            user_agent=os.environ.get("LENS_USER_AGENT") or DEFAULT_USER_AGENT,
            site_dir=os.environ.get("LENS_SITE_DIR") or None,
            timeout=float(os.environ.get("LENS_PROXY_TIMEOUT") or 30.0),
        )


class GraphQLRequest(BaseModel):
    query: str = ""
    variables: Optional[dict[str, Any]] = None


def _error(status: int, error: str, details: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": error, "details": details})


def create_app(settings: Optional[ProxySettings] = None,
               session: Optional[requests.Session] = None) -> FastAPI:
    settings = settings or ProxySettings.from_env()
    session = session or requests.Session()

    app = FastAPI(title="Lens profile proxy")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    def forward(operation: str, query: str, variables: dict, expect: Optional[str] = None):
        headers = dict(UPSTREAM_HEADERS, **{"User-Agent": settings.user_agent})
        try:
            r = session.post(
                settings.api_url,
                json={"query": query, "variables": variables},
                headers=headers,
                timeout=settings.timeout,
            )
        except requests.RequestException as e:
            logger.error("Lens API request failed (%s): %s", operation, e)
            return _error(502, "Failed to connect to Lens API", str(e))

        try:
            payload = r.json()
        except ValueError:
            return _error(502, "Invalid response from Lens API", r.text[:500])

        if not r.ok:
            errors = payload.get("errors") if isinstance(payload, dict) else None
            message = (errors[0].get("message") if errors and isinstance(errors[0], dict) else None)
            return _error(r.status_code, message or "API request failed", payload)

        if isinstance(payload, dict) and payload.get("errors"):
            logger.error("Lens API errors (%s): %s", operation, payload["errors"])
            first = payload["errors"][0]
            message = first.get("message") if isinstance(first, dict) else str(first)
            return _error(502, f"Lens API returned errors: {message}", payload["errors"])

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or (expect and not data.get(expect)):
            return _error(502, f"Invalid {operation} response from Lens API", payload)
        return payload

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/api/proxy/accounts")
    def proxy_accounts(body: GraphQLRequest):
        variables = body.variables
        if not variables:
            if not (settings.default_local_name and settings.default_namespace):
                return _error(400, "No account requested and no default account configured")
            variables = queries.account_variables(settings.default_local_name, settings.default_namespace)
        return forward("accounts", queries.ACCOUNT_QUERY, variables, expect="account")

    @app.post("/api/proxy/stats")
    def proxy_stats(body: GraphQLRequest):
        address = (body.variables or {}).get("address")
        if not address:
            return _error(400, "variables.address is required")
        return forward("stats", queries.STATS_QUERY, queries.stats_variables(address), expect="accountStats")

    @app.post("/api/proxy/posts")
    def proxy_posts(body: GraphQLRequest):
        if not body.query.strip():
            return _error(400, "query is required")
        return forward("posts", body.query, body.variables or {}, expect="posts")

    if settings.site_dir and Path(settings.site_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.site_dir, html=True), name="site")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "3000")))
