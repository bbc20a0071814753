"""Default discount rules, used when no rules file is configured."""

SEED_RULES = [
    {
        "id": "1",
        "name": "Weekday Discount",
        "kind": "weekday",
        "discount_percent": 15,
        "condition": {"days_of_week": [1, 2, 3, 4]},
        "active": True,
    },
    {
        "id": "2",
        "name": "3+ Hours Booking",
        "kind": "bulk",
        "discount_percent": 10,
        "condition": {"min_hours": 3},
        "active": True,
    },
    {
        "id": "3",
        "name": "5+ Hours Booking",
        "kind": "bulk",
        "discount_percent": 15,
        "condition": {"min_hours": 5},
        "active": True,
    },
    {
        "id": "4",
        "name": "Lunch Hours Off-Peak",
        "kind": "off-peak",
        "discount_percent": 20,
        "condition": {"start": "12:00", "end": "15:00"},
        "active": True,
    },
]
