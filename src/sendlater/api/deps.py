from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from sendlater.db import iter_session
from sendlater.models import Email
from sendlater.services.emails import get_email_or_raise


def raw_session():
    """
    Get a session - put this in a wrapper function so it's invoked once per
    resolution of the dependency graph, rather than multiple times
    if one was just using `get_session` on its own
    """
    yield from iter_session()


SessionDep = Annotated[Session, Depends(raw_session)]


def require_email(email_id: str, session: SessionDep) -> Email:
    return get_email_or_raise(session=session, email_id=email_id)


RequireEmail = Annotated[Email, Depends(require_email)]
