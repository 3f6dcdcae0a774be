"""Database session dependency."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from catalog_api.db.session import get_db


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a managed SQLAlchemy session.

    Tests override this to point requests at a throwaway database.
    """
    yield from get_db()


SessionDep = Annotated[Session, Depends(get_session)]
