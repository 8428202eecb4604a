# billdesk/services/client_service.py
import logging
from fastapi import status, HTTPException
from sqlalchemy.orm import Session
from billdesk.models.clients import Client
from billdesk.schemas.clients import ClientCreate
from billdesk.schemas.common import PaginationParams
from billdesk.core.access import RequestContext
from billdesk.core.audit import audit_log

logger = logging.getLogger(__name__)


class ClientService:

    @staticmethod
    def create(db: Session, data: ClientCreate, context: RequestContext) -> Client:
        client = Client(**data.model_dump())
        try:
            db.add(client)
            db.commit()
            db.refresh(client)
        except Exception:
            db.rollback()
            logger.exception("Failed to create client %s", data.name)
            raise

        audit_log("CREATE", "Client", client.id, context.actor_id, ip_address=context.ip_address)
        return client

    @staticmethod
    def get(db: Session, client_id: int) -> Client:
        client = db.query(Client).filter_by(id=client_id).first()
        if not client:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Client not found")
        return client

    @staticmethod
    def list(db: Session, pagination: PaginationParams):
        query = db.query(Client)
        total = query.count()
        items = (
            query
            .order_by(Client.id.desc())
            .offset(pagination.offset)
            .limit(pagination.page_size)
            .all()
        )

        return total, items
