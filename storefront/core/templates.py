import os
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urlsplit

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from storefront.enums.product_category import ProductCategory
from storefront.helpers.formatters import format_currency, format_date

PACKAGE_DIR = os.path.dirname(os.path.dirname(__file__))
TEMPLATES_DIR = os.path.join(PACKAGE_DIR, "templates")
STATIC_DIR = os.path.join(PACKAGE_DIR, "static")

templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["currency"] = format_currency
templates.env.filters["datetime"] = format_date
templates.env.globals["categories"] = list(ProductCategory)


def render(request: Request, template_name: str, context: Optional[Dict[str, Any]] = None, status_code: int = 200):
    """Renders a page with the flash messages carried in the query string."""
    page_context = {
        "current_user": getattr(request.state, "user", None),
        "cart_count": getattr(request.state, "cart_count", 0),
        "success": request.query_params.get("success"),
        "error": request.query_params.get("error"),
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, template_name, page_context, status_code=status_code)


def redirect(url: str, success: Optional[str] = None, error: Optional[str] = None) -> RedirectResponse:
    params = {key: value for key, value in (("success", success), ("error", error)) if value}
    if params:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode(params)}"
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def safe_next(url: Optional[str], default: str = "/products") -> str:
    # Only same-site relative paths
    if not url:
        return default
    parts = urlsplit(url)
    if parts.scheme or parts.netloc or not url.startswith("/") or url.startswith("//"):
        return default
    return url
