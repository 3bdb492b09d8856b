# crm/routes/contacts.py
from fastapi import APIRouter, Depends

from crm.gateway import RecordGateway, get_gateway

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


@router.get("")
def list_contacts(gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_contacts()
