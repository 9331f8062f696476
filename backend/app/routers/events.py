from fastapi import APIRouter, Depends, Query

from medvault.api import InMemoryEventSink

from ..models.v1.metadata_models import EventsResponse
from ..services.vault_service import get_event_log

router = APIRouter()


@router.get("/events", response_model=EventsResponse, summary="Events emitted after sequence number `after`")
def list_events(after: int = Query(0, ge=0), log: InMemoryEventSink = Depends(get_event_log)):
    return EventsResponse(last_seq=log.last_seq, events=[env.to_dict() for env in log.since(after)])
