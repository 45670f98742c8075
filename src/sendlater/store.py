"""
Session-per-call access to emails, for code that runs outside of a request
(the delivery pipeline and the queue worker).
"""

from typing import Optional

from sqlalchemy.orm import sessionmaker

from sendlater import crud
from sendlater.models import Email


class EmailStore:
    """
    Thin wrapper around :mod:`sendlater.crud` that opens a fresh session for each call.

    Returned objects are detached from their session, so read whatever you need
    before handing them elsewhere.
    """

    def __init__(self, maker: sessionmaker):
        self.maker = maker

    def get(self, email_id: str) -> Optional[Email]:
        with self.maker() as session:
            email = crud.get_email(session=session, email_id=email_id)
            if email is not None:
                session.expunge(email)
            return email

    def update(self, email_id: str, **fields) -> Optional[Email]:
        with self.maker() as session:
            email = crud.get_email(session=session, email_id=email_id)
            if email is None:
                return None
            email = crud.update_email(session=session, email=email, **fields)
            session.expunge(email)
            return email

    def delete(self, email_id: str) -> bool:
        with self.maker() as session:
            email = crud.get_email(session=session, email_id=email_id)
            if email is None:
                return False
            crud.delete_email(session=session, email=email)
            return True
