"""Announcements route: latest announcement(s) by category and language."""

import logging
from typing import Optional

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from levante_catalog.announcements.client import AnnouncementService
from levante_catalog.announcements.models import VALID_CATEGORIES, VALID_LANGUAGES
from levante_catalog.constants import ANNOUNCEMENTS_CACHE_CONTROL
from levante_catalog.errors import AnnouncementError, ConfigurationError
from levante_catalog.server.schemas import (
    AnnouncementItem,
    AnnouncementResponse,
    AnnouncementsResponse,
)

logger = logging.getLogger(__name__)


def _get_announcement_service(request: Request) -> AnnouncementService:
    service: Optional[AnnouncementService] = getattr(
        request.app.state, "announcement_service", None
    )
    if service is None:
        raise RuntimeError("AnnouncementService not found on app.state")
    return service


async def handle_announcements(request: Request) -> JSONResponse:
    """``?category=a[,b...]&language=es|en``.

    One category returns ``{announcement}``; several return
    ``{announcements, total}``.
    """
    category_param = request.query_params.get("category")
    language = request.query_params.get("language")

    if not category_param:
        return JSONResponse({"error": "Category parameter is required"}, status_code=400)
    if not language:
        return JSONResponse({"error": "Language parameter is required"}, status_code=400)

    if language not in VALID_LANGUAGES:
        return JSONResponse(
            {
                "error": "Invalid language",
                "invalidLanguage": language,
                "validLanguages": list(VALID_LANGUAGES),
            },
            status_code=400,
        )

    categories = [c.strip() for c in category_param.split(",") if c.strip()]
    if not categories:
        return JSONResponse({"error": "At least one category is required"}, status_code=400)

    invalid = [c for c in categories if c not in VALID_CATEGORIES]
    if invalid:
        return JSONResponse(
            {
                "error": "Invalid categories",
                "invalidCategories": invalid,
                "validCategories": list(VALID_CATEGORIES),
            },
            status_code=400,
        )

    service = _get_announcement_service(request)
    headers = {"Cache-Control": ANNOUNCEMENTS_CACHE_CONTROL}
    try:
        if len(categories) == 1:
            found = await service.get_latest(categories[0], language)
            single = AnnouncementResponse(
                announcement=AnnouncementItem(**found.to_dict()) if found else None
            )
            return JSONResponse(single.model_dump(), headers=headers)

        items = await service.get_latest_many(categories, language)
        many = AnnouncementsResponse(
            announcements=[AnnouncementItem(**a.to_dict()) for a in items],
            total=len(items),
        )
        return JSONResponse(many.model_dump(), headers=headers)
    except (AnnouncementError, ConfigurationError) as exc:
        logger.error("Announcements lookup failed: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)


announcement_routes = [
    Route("/announcements", endpoint=handle_announcements, methods=["GET"]),
]
