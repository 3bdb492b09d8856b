# crm/routes/properties.py
"""
Property endpoints
------------------
GET  /api/properties              → records as Airtable returns them
POST /api/properties/create       → find-or-create contact, then create property
POST /api/properties/bulk-create  → one property per CSV row
"""

from fastapi import APIRouter, Depends

from crm.forms import BulkCreateRequest, PropertyForm
from crm.gateway import RecordGateway, get_gateway

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.get("")
def list_properties(gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_properties()


@router.post("/create")
def create_property(form: PropertyForm, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.create_property(form)


@router.post("/bulk-create")
def bulk_create_properties(body: BulkCreateRequest, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.bulk_create_properties(body.data)
