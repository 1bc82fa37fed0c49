from typing import List

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import get_current_hotel_id
from common.rate_limit import READ_LIMIT, limiter
from common.schemas import SearchResult
from common.search import search_hotel

app = create_service_app("Search Service", "search")


@app.get("/search", response_model=List[SearchResult])
@limiter.limit(READ_LIMIT)
def global_search(
    request: Request,
    q: str = "",
    hotel_id: int = Depends(get_current_hotel_id),
    db: Session = Depends(get_db),
) -> List[dict]:
    """Search rooms, guests and bookings of the caller's hotel."""

    return search_hotel(db, hotel_id, q)
