from fastapi import APIRouter, Query
from fastapi_pagination import Page
from fastapi_pagination.customization import CustomizedPage, UseParamsFields
from fastapi_pagination.ext.sqlalchemy import paginate

from sendlater import crud
from sendlater.api.deps import RequireEmail, SessionDep
from sendlater.models import EmailCreate, EmailRead, EmailStatus, EmailUpdate, SuccessResponse
from sendlater.services import emails

EmailPage = CustomizedPage[
    Page[EmailRead],
    UseParamsFields(size=Query(10, ge=1, le=100, description="Page size")),
]

emails_router = APIRouter(prefix="/emails")


@emails_router.post("/", status_code=201)
async def emails_create(email: EmailCreate, session: SessionDep) -> EmailRead:
    return await emails.create_email(session=session, email_create=email)


@emails_router.get("/")
async def emails_list(session: SessionDep) -> EmailPage:
    return paginate(session, crud.emails_stmt())


@emails_router.get("/failed")
async def emails_failed(session: SessionDep) -> EmailPage:
    return paginate(session, crud.emails_stmt(status=EmailStatus.FAILED))


@emails_router.get("/{email_id}")
async def email_show(email: RequireEmail) -> EmailRead:
    return email


@emails_router.put("/{email_id}")
async def email_update(email_id: str, email: EmailUpdate, session: SessionDep) -> EmailRead:
    return await emails.update_email(session=session, email_id=email_id, email_update=email)


@emails_router.delete("/{email_id}")
async def email_delete(email_id: str, session: SessionDep) -> SuccessResponse:
    await emails.delete_email(session=session, email_id=email_id)
    return SuccessResponse(success=True, extra={"email_id": email_id})
