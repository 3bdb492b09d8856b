from crm.routes.activities import router as activities_router
from crm.routes.contacts import router as contacts_router
from crm.routes.properties import router as properties_router

__all__ = ["activities_router", "contacts_router", "properties_router"]
