# crm/routes/activities.py
"""
Activity endpoints
------------------
GET  /api/activities           → records as Airtable returns them
POST /api/activities/create    → new activity (Status "Pending")
POST /api/activities/complete  → {activityId} → Status "Completed", follow-up cleared
"""

from fastapi import APIRouter, Depends

from crm.forms import ActivityForm, CompleteActivityRequest
from crm.gateway import RecordGateway, get_gateway

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.get("")
def list_activities(gateway: RecordGateway = Depends(get_gateway)):
    return gateway.list_activities()


@router.post("/create")
def create_activity(form: ActivityForm, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.create_activity(form)


@router.post("/complete")
def complete_activity(body: CompleteActivityRequest, gateway: RecordGateway = Depends(get_gateway)):
    return gateway.complete_activity(body)
