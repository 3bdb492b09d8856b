"""
Dashboard Aggregator
--------------------
Derives the dashboard statistics from the three fetched collections.
Pure: the same snapshot always yields the same numbers, nothing is stored,
and inputs are never mutated. Display rounding happens only in the
``*_display`` strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from crm.airtable_schema import INACTIVE_DEAL_STAGES, DealStage, Temperature
from crm.models import Activity, Contact, Property
from crm.runtime import parse_timestamp, start_of_local_day

RECENT_PROPERTIES_LIMIT = 10
HOT_CONTACTS_LIMIT = 5
OVERDUE_ACTIVITIES_LIMIT = 5

_STAGE_CATEGORIES: Dict[str, str] = {
    DealStage.NEW_LEAD.value: "new",
    DealStage.CONTACTED.value: "contacted",
    DealStage.ANALYZING.value: "analyzing",
    DealStage.NEGOTIATING.value: "negotiating",
    DealStage.UNDER_CONTRACT.value: "under_contract",
    DealStage.CLOSED.value: "closed",
    DealStage.DEAD.value: "dead",
}

_CATEGORY_COLORS: Dict[str, str] = {
    "new": "gray",
    "contacted": "blue",
    "analyzing": "yellow",
    "negotiating": "orange",
    "under_contract": "purple",
    "closed": "green",
    "dead": "red",
    "unrecognized": "gray",
}


# ---------------------
# Per-record helpers
# ---------------------
def _n(value: Optional[float]) -> float:
    return value or 0


def property_profit(p: Property) -> float:
    """max(0, ARV − asking − repair), absent terms read as 0 before subtracting."""
    return max(0, _n(p.arv_estimate) - _n(p.asking_price) - _n(p.repair_estimate))


def is_active_deal(p: Property) -> bool:
    return bool(p.deal_stage) and p.deal_stage not in INACTIVE_DEAL_STAGES


def is_hot(c: Contact) -> bool:
    return c.temperature == Temperature.HOT.value


def is_overdue(a: Activity, today_start: datetime) -> bool:
    if not a.date or a.is_completed:
        return False
    when = parse_timestamp(a.date)
    return when is not None and when < today_start


def deal_stage_category(stage: Optional[str]) -> str:
    return _STAGE_CATEGORIES.get(stage or "", "unrecognized")


def deal_stage_color(stage: Optional[str]) -> str:
    return _CATEGORY_COLORS[deal_stage_category(stage)]


def thousands_display(value: float) -> str:
    """$150K style label; rounds half up on the thousands."""
    k = (Decimal(str(value)) / Decimal(1000)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"${k}K"


def contact_action(contact: Contact, kind: str) -> Optional[str]:
    """mailto:/tel: link for the contact card, None when the value is missing."""
    if kind == "email":
        return f"mailto:{contact.email}" if contact.email else None
    if kind == "phone":
        return f"tel:{contact.phone}" if contact.phone else None
    raise ValueError(f"Unknown contact action '{kind}'")


# ---------------------
# Aggregation
# ---------------------
@dataclass(frozen=True)
class DashboardStats:
    total_properties: int
    active_deals: int
    total_portfolio_value: float
    potential_profit: float
    hot_contacts: int
    overdue_activities: int

    @property
    def portfolio_value_display(self) -> str:
        return thousands_display(self.total_portfolio_value)

    @property
    def potential_profit_display(self) -> str:
        return thousands_display(self.potential_profit)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["portfolio_value_display"] = self.portfolio_value_display
        out["potential_profit_display"] = self.potential_profit_display
        return out


def aggregate(
    properties: Sequence[Property],
    contacts: Sequence[Contact],
    activities: Sequence[Activity],
    now: Optional[datetime] = None,
) -> DashboardStats:
    today_start = start_of_local_day(now)
    return DashboardStats(
        total_properties=len(properties),
        active_deals=sum(1 for p in properties if is_active_deal(p)),
        total_portfolio_value=sum(_n(p.asking_price) for p in properties),
        potential_profit=sum(property_profit(p) for p in properties),
        hot_contacts=sum(1 for c in contacts if is_hot(c)),
        overdue_activities=sum(1 for a in activities if is_overdue(a, today_start)),
    )


RecordLike = Union[Dict[str, Any], Property, Contact, Activity]


def _typed(records: Iterable[RecordLike], model) -> List[Any]:
    return [r if isinstance(r, model) else model.from_record(r) for r in records]


@dataclass
class DashboardView:
    """Statistics plus the short lists the dashboard renders beside them."""

    stats: DashboardStats
    recent_properties: List[Property] = field(default_factory=list)
    hot_contacts: List[Contact] = field(default_factory=list)
    overdue_activities: List[Activity] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "recentProperties": [
                {
                    **asdict(p),
                    "profit": property_profit(p),
                    "stage_category": deal_stage_category(p.deal_stage),
                    "stage_color": deal_stage_color(p.deal_stage),
                }
                for p in self.recent_properties
            ],
            "hotContacts": [asdict(c) for c in self.hot_contacts],
            "overdueActivities": [asdict(a) for a in self.overdue_activities],
        }


def build_dashboard(
    properties: Iterable[RecordLike],
    contacts: Iterable[RecordLike],
    activities: Iterable[RecordLike],
    now: Optional[datetime] = None,
) -> DashboardView:
    """Typed view over raw Airtable records (or already-typed entities)."""
    props = _typed(properties, Property)
    people = _typed(contacts, Contact)
    acts = _typed(activities, Activity)
    today_start = start_of_local_day(now)
    return DashboardView(
        stats=aggregate(props, people, acts, now=now),
        recent_properties=props[:RECENT_PROPERTIES_LIMIT],
        hot_contacts=[c for c in people if is_hot(c)][:HOT_CONTACTS_LIMIT],
        overdue_activities=[a for a in acts if is_overdue(a, today_start)][:OVERDUE_ACTIVITIES_LIMIT],
    )
