"""Start page — a single link that kicks off the authorization flow.

Inline HTML, same approach as the rest of the service: no template engine
and no static files.  A rendering failure answers 500; it must never take
the process down.
"""

from __future__ import annotations

import html
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from app.api.dependencies import get_settings
from app.core.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["index"])

_INDEX_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>OAuth 2.0 client sample</title>
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: system-ui, -apple-system, sans-serif;
      display: flex; justify-content: center; align-items: center;
      min-height: 100vh; background: #f5f5f5;
    }}
    .card {{
      background: #fff; padding: 2rem; border-radius: 8px;
      box-shadow: 0 2px 8px rgba(0,0,0,.1); width: 360px; text-align: center;
    }}
    h1 {{ font-size: 1.25rem; margin-bottom: 1rem; }}
    p {{ font-size: .85rem; color: #555; margin-bottom: 1.5rem; word-break: break-all; }}
    a.button {{
      display: block; padding: .6rem; background: #111; color: #fff;
      border-radius: 4px; font-size: .95rem; text-decoration: none;
    }}
    a.button:hover {{ background: #333; }}
  </style>
</head>
<body>
  <div class="card">
    <h1>OAuth 2.0 client sample</h1>
    <p>Requested scopes: {scopes}</p>
    <a class="button" href="{authorize_path}">Sign in</a>
  </div>
</body>
</html>
"""

_ERROR_HTML = (
    "<!DOCTYPE html><html><head><meta charset='utf-8'><title>Error</title>"
    "</head><body><h1>Internal Server Error</h1></body></html>"
)


def render_index(scopes: tuple[str, ...]) -> str:
    return _INDEX_HTML.format(
        scopes=html.escape(" ".join(scopes)) or "(none)",
        authorize_path="/oauth2/authorize",
    )


@router.get("/", response_class=HTMLResponse)
def index(settings: Annotated[Settings, Depends(get_settings)]) -> HTMLResponse:
    try:
        page = render_index(settings.scopes)
    except (KeyError, IndexError, ValueError):
        logger.exception("Failed to render index page")
        return HTMLResponse(_ERROR_HTML, status_code=500)
    return HTMLResponse(page)
