from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session


# Session per request, taken from the Database opened in the app lifespan
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
