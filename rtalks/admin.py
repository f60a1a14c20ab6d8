"""
Admin API, mounted under ``/api/admin``.

``router`` holds the unauthenticated session endpoints (login, logout);
everything on ``protected`` requires a valid admin token.
"""
from typing import Type

from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import clear_session, issue_token, require_admin, set_session
from .deps import get_db
from .errors import ApiError, not_found
from .helpers import normalize_email, utcnow
from .model import admins, catalog, contact, content, orders
from .model.catalog import CatalogModel
from .model.db import Package, Speaker
from .schemas import (
    ContactInfoIn, DisplayOrderIn, EventIn, LoginIn, PackageIn,
    SiteContentIn, SpeakerIn,
)


router = APIRouter(prefix="/api/admin")
protected = APIRouter(prefix="/api/admin",
                      dependencies=[Depends(require_admin)])


# ----------------------------
# Session
# ----------------------------
@router.post("/login")
async def login(body: LoginIn, request: Request,
                db: AsyncSession = Depends(get_db)):
    admin = await admins.authenticate(
        db, normalize_email(body.email), body.password
    )
    if admin is None:
        logger.warning(f"Failed admin login for {body.email!r}")
        raise ApiError(401, "Invalid credentials")

    token = issue_token(admin.id, request.app.state.settings.jwt_secret)
    logger.info(f"Admin {admin.id} logged in")
    response = ORJSONResponse({"success": True, "token": token})
    set_session(response, token)
    return response


@router.post("/logout")
async def logout():
    response = ORJSONResponse({"success": True})
    clear_session(response)
    return response


@protected.get("/check-auth")
async def check_auth():
    return {"authenticated": True}


# ----------------------------
# Dashboard
# ----------------------------
@protected.get("/stats")
async def admin_stats(db: AsyncSession = Depends(get_db)):
    return await orders.sales_stats(db, utcnow())


@protected.get("/orders")
async def admin_orders(db: AsyncSession = Depends(get_db)):
    return await orders.list_recent_orders(db, limit=50)


@protected.put("/event")
async def update_event(body: EventIn, db: AsyncSession = Depends(get_db)):
    async with db.begin():
        await content.save_event(db, **body.model_dump())
    return {"success": True}


# ----------------------------
# Site content
# ----------------------------
@protected.get("/content")
async def admin_content(db: AsyncSession = Depends(get_db)):
    return await content.all_sections(db)


@protected.put("/content/{section}")
async def update_content(section: str, body: SiteContentIn,
                         db: AsyncSession = Depends(get_db)):
    async with db.begin():
        created = await content.upsert_section(
            db, section, **body.model_dump()
        )
    if created:
        logger.info(f"Site content section {section!r} created")
    return {"success": True}


@protected.get("/contact-info")
async def admin_contact_info(db: AsyncSession = Depends(get_db)):
    return await content.get_contact_info(db)


@protected.put("/contact-info")
async def update_contact_info(body: ContactInfoIn,
                              db: AsyncSession = Depends(get_db)):
    async with db.begin():
        await content.upsert_contact_info(db, **body.model_dump())
    return {"success": True}


# ----------------------------
# Packages & speakers
# ----------------------------
def _catalog_routes(path: str, model: CatalogModel,
                    schema: Type[BaseModel], label: str) -> None:

    async def list_rows(db: AsyncSession = Depends(get_db)):
        return await catalog.list_active(db, model)

    async def create_row(body: schema, db: AsyncSession = Depends(get_db)):
        async with db.begin():
            row = await catalog.create(db, model, body.model_dump())
        logger.info(f"{label} {row['id']} created")
        return row

    async def update_row(row_id: int, body: schema,
                         db: AsyncSession = Depends(get_db)):
        async with db.begin():
            found = await catalog.replace(db, model, row_id,
                                          body.model_dump())
        if not found:
            raise not_found(f"{label} not found")
        return {"success": True}

    async def delete_row(row_id: int, db: AsyncSession = Depends(get_db)):
        async with db.begin():
            found = await catalog.soft_delete(db, model, row_id)
        if not found:
            raise not_found(f"{label} not found")
        logger.info(f"{label} {row_id} deactivated")
        return {"success": True}

    async def reorder_row(row_id: int, body: DisplayOrderIn,
                          db: AsyncSession = Depends(get_db)):
        async with db.begin():
            found = await catalog.set_display_order(
                db, model, row_id, body.display_order
            )
        if not found:
            raise not_found(f"{label} not found")
        return {"success": True}

    protected.add_api_route(path, list_rows, methods=["GET"])
    protected.add_api_route(path, create_row, methods=["POST"])
    protected.add_api_route(f"{path}/{{row_id}}", update_row,
                            methods=["PUT"])
    protected.add_api_route(f"{path}/{{row_id}}", delete_row,
                            methods=["DELETE"])
    protected.add_api_route(f"{path}/{{row_id}}/order", reorder_row,
                            methods=["PUT"])


_catalog_routes("/packages", Package, PackageIn, "Package")
_catalog_routes("/speakers", Speaker, SpeakerIn, "Speaker")


# ----------------------------
# Contact submissions
# ----------------------------
@protected.get("/contact-forms")
async def admin_contact_forms(db: AsyncSession = Depends(get_db)):
    return await contact.list_submissions(db)


@protected.get("/contact-forms/export")
async def export_contact_forms(db: AsyncSession = Depends(get_db)):
    rows = await contact.export_submissions(db)
    return ORJSONResponse(
        rows,
        headers={
            "Content-Disposition":
                "attachment; filename=contact_forms_export.json",
        },
    )


@protected.delete("/contact-forms/{form_id}")
async def delete_contact_form(form_id: int,
                              db: AsyncSession = Depends(get_db)):
    async with db.begin():
        found = await contact.delete_submission(db, form_id)
    if not found:
        raise not_found("Contact form not found")
    return {"success": True}
