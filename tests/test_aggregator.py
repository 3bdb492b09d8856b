import copy
from datetime import datetime, timedelta

import pytest

from crm.aggregator import (
    aggregate,
    build_dashboard,
    contact_action,
    deal_stage_color,
    property_profit,
    thousands_display,
)
from crm.models import Activity, Contact, Property

NOW = datetime(2024, 6, 15, 14, 30).astimezone()


def _prop(stage="New Lead", asking=None, arv=None, repair=None, address="1 Main"):
    fields = {"Address": address, "Deal Stage": stage}
    if asking is not None:
        fields["Asking Price"] = asking
    if arv is not None:
        fields["ARV Estimate"] = arv
    if repair is not None:
        fields["Repair Estimate"] = repair
    return {"id": f"rec{address}", "fields": fields}


def _activity(date=None, status="Pending"):
    fields = {"Next Action": "Call", "Status": status}
    if date is not None:
        fields["Date"] = date
    return {"id": "recA", "fields": fields}


def test_spec_example_snapshot():
    properties = [
        _prop("Negotiating", asking=100000, arv=200000, repair=50000),
        _prop("Closed", asking=50000, arv=40000),
    ]
    contacts = [{"id": "c1", "fields": {"Name": "A", "Temperature": "Hot"}}, {"id": "c2", "fields": {"Name": "B"}}]
    activities = [_activity("2024-06-14")]

    stats = build_dashboard(properties, contacts, activities, now=NOW).stats

    assert stats.total_properties == 2
    assert stats.active_deals == 1
    assert stats.total_portfolio_value == 150000
    assert stats.potential_profit == 50000
    assert stats.hot_contacts == 1
    assert stats.overdue_activities == 1
    assert stats.portfolio_value_display == "$150K"
    assert stats.potential_profit_display == "$50K"


def test_profit_is_never_negative():
    assert property_profit(Property(asking_price=50000, arv_estimate=40000)) == 0
    assert property_profit(Property()) == 0
    assert property_profit(Property(arv_estimate=10000)) == 10000


def test_missing_deal_stage_is_not_active():
    stats = aggregate([Property(deal_stage=None), Property(deal_stage="Dead")], [], [], now=NOW)
    assert stats.active_deals == 0
    assert stats.total_properties == 2


def test_unrecognized_stage_counts_as_active():
    stats = aggregate([Property(deal_stage="Under Review")], [], [], now=NOW)
    assert stats.active_deals == 1


@pytest.mark.parametrize(
    "date,status,expected",
    [
        ("2024-06-14", "Pending", True),
        ("2024-06-14T23:59:59", "Pending", True),
        ("2024-06-15", "Pending", False),
        ("2024-06-15T09:00:00", "Pending", False),
        ("2024-06-14", "Completed", False),
        (None, "Pending", False),
        ("not a date", "Pending", False),
    ],
)
def test_overdue_boundary_is_local_midnight(date, status, expected):
    stats = build_dashboard([], [], [_activity(date, status)], now=NOW).stats
    assert stats.overdue_activities == (1 if expected else 0)


def test_utc_timestamps_compare_as_instants():
    yesterday = (NOW - timedelta(days=1)).astimezone().isoformat()
    stats = build_dashboard([], [], [_activity(yesterday)], now=NOW).stats
    assert stats.overdue_activities == 1


def test_aggregation_does_not_mutate_inputs():
    properties = [_prop("Negotiating", asking=1, arv=5)]
    contacts = [{"id": "c1", "fields": {"Temperature": "Hot"}}]
    before = copy.deepcopy((properties, contacts))

    first = build_dashboard(properties, contacts, [], now=NOW).stats
    second = build_dashboard(properties, contacts, [], now=NOW).stats

    assert first == second
    assert (properties, contacts) == before


def test_dashboard_lists_are_capped():
    properties = [_prop(address=str(i)) for i in range(12)]
    contacts = [{"id": f"c{i}", "fields": {"Temperature": "Hot"}} for i in range(7)]
    activities = [_activity("2024-01-01") for _ in range(6)]

    view = build_dashboard(properties, contacts, activities, now=NOW)

    assert len(view.recent_properties) == 10
    assert view.recent_properties[0].address == "0"
    assert len(view.hot_contacts) == 5
    assert len(view.overdue_activities) == 5
    assert view.stats.hot_contacts == 7
    assert view.stats.overdue_activities == 6


def test_view_dict_carries_profit_and_stage_color():
    view = build_dashboard([_prop("Under Contract", asking=100, arv=300)], [], [], now=NOW)
    row = view.to_dict()["recentProperties"][0]
    assert row["profit"] == 200
    assert row["stage_category"] == "under_contract"
    assert row["stage_color"] == "purple"


@pytest.mark.parametrize(
    "stage,color",
    [
        ("New Lead", "gray"),
        ("Contacted", "blue"),
        ("Analyzing", "yellow"),
        ("Negotiating", "orange"),
        ("Under Contract", "purple"),
        ("Closed", "green"),
        ("Dead", "red"),
        ("Offer Made", "gray"),
        (None, "gray"),
    ],
)
def test_deal_stage_colors(stage, color):
    assert deal_stage_color(stage) == color


def test_thousands_display_rounds_half_up():
    assert thousands_display(0) == "$0K"
    assert thousands_display(1500) == "$2K"
    assert thousands_display(149499) == "$149K"


def test_contact_actions():
    contact = Contact(name="Jane", email="jane@x.com")
    assert contact_action(contact, "email") == "mailto:jane@x.com"
    assert contact_action(contact, "phone") is None
    with pytest.raises(ValueError):
        contact_action(contact, "fax")


def test_typed_entities_are_accepted_directly():
    stats = aggregate(
        [Property(asking_price=1000, deal_stage="Contacted")],
        [Contact(temperature="Cold")],
        [Activity(date="2024-06-01", status="Completed")],
        now=NOW,
    )
    assert stats.total_portfolio_value == 1000
    assert stats.hot_contacts == 0
    assert stats.overdue_activities == 0


_AMOUNTS = [None, 0, 40000, 150000]
_STAGES = [None, "New Lead", "Negotiating", "Offer Made", "Closed", "Dead"]


def _portfolio(seed):
    props = []
    for i in range(len(_STAGES) * 2):
        n = seed + i
        props.append(Property(
            asking_price=_AMOUNTS[n % 4],
            arv_estimate=_AMOUNTS[(n // 4) % 4],
            repair_estimate=_AMOUNTS[(n // 16) % 4],
            deal_stage=_STAGES[n % len(_STAGES)],
        ))
    return props


@pytest.mark.parametrize("seed", range(0, 64, 3))
def test_profit_and_active_deal_bounds_hold_for_mixed_portfolios(seed):
    props = _portfolio(seed)

    stats = aggregate(props, [], [], now=NOW)

    assert stats.potential_profit >= 0
    assert all(property_profit(p) >= 0 for p in props)
    assert 0 <= stats.active_deals <= stats.total_properties
    assert stats.total_properties == len(props)
