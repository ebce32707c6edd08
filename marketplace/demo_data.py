"""
Demo marketplace data for local development and screenshots.

Loaded by ``manage.py seed_demo``; nothing here runs in production.
"""

DEMO_PASSWORD = "waqti-demo-123"

# Users: username -> fields
DEMO_USERS = [
    {"username": "admin", "email": "admin@waqti.com", "full_name": "Waqti Admin", "role": ""},
    {"username": "ahmad_hassan", "email": "ahmad@example.com", "full_name": "Ahmad Hassan", "role": "freelancer"},
    {"username": "sara_ali", "email": "sara@example.com", "full_name": "Sara Ali", "role": "freelancer"},
    {"username": "layla_mohammed", "email": "layla@example.com", "full_name": "Layla Mohammed", "role": "freelancer"},
    {"username": "advanced_tech", "email": "ops@advancedtech.example", "full_name": "Advanced Technology Co.", "role": "client"},
    {"username": "ahmad_mohammed", "email": "ahmad.m@example.com", "full_name": "Ahmad Mohammed", "role": "client"},
    {"username": "arab_press", "email": "books@arabpress.example", "full_name": "Arab Publishing House", "role": "client"},
]

DEMO_SERVICES = [
    {"provider": "ahmad_hassan", "title": "E-commerce website development", "category": "Programming", "hourly_rate": 2},
    {"provider": "sara_ali", "title": "Brand identity design", "category": "Design", "hourly_rate": 1.5},
    {"provider": "layla_mohammed", "title": "Technical translation EN to AR", "category": "Translation", "hourly_rate": 1},
]

DEMO_PROJECTS = [
    {"client": "advanced_tech", "title": "E-commerce site with inventory management", "category": "Programming", "budget_hours": 50},
    {"client": "ahmad_mohammed", "title": "Visual identity for a startup", "category": "Design", "budget_hours": 20},
    {"client": "arab_press", "title": "Translate a technical book", "category": "Translation", "budget_hours": 30},
]

# Escrow: day offsets are relative to "now" at seed time
DEMO_ESCROW = [
    {
        "project_title": "E-commerce website development",
        "client": "advanced_tech",
        "freelancer": "ahmad_hassan",
        "amount": 50,
        "currency": "hours",
        "status": "held",
        "due_in_days": 10,
        "auto_release_in_days": 17,
        "description": "Full e-commerce website with an inventory management system",
    },
    {
        "project_title": "Visual identity design",
        "client": "ahmad_mohammed",
        "freelancer": "sara_ali",
        "amount": 2500,
        "currency": "AED",
        "status": "held",
        "due_in_days": 5,
        "auto_release_in_days": 12,
        "description": "Complete visual identity for a startup",
    },
    {
        "project_title": "Technical book translation",
        "client": "arab_press",
        "freelancer": "layla_mohammed",
        "amount": 30,
        "currency": "hours",
        "status": "disputed",
        "due_in_days": -3,
        "auto_release_in_days": 4,
        "description": "Translate a technical book from English to Arabic",
    },
]

DEMO_SAVED_SEARCHES = [
    {
        "user": "advanced_tech",
        "name": "Senior web developers",
        "description": "Experienced developers for e-commerce work",
        "query": "web development",
        "filters": {"category": "programming", "experience": "3+", "rating": "4+"},
        "category": "freelancers",
        "notifications": True,
        "is_public": False,
    },
    {
        "user": "sara_ali",
        "name": "Design projects",
        "description": "Branding and identity projects",
        "query": "identity",
        "filters": {"category": "design", "budget": "1000-5000", "urgency": "medium"},
        "category": "projects",
        "notifications": True,
        "is_public": True,
    },
    {
        "user": "arab_press",
        "name": "Translators",
        "description": "Technical translation services",
        "query": "translation",
        "filters": {"category": "translation", "rating": "4.5+", "delivery": "fast"},
        "category": "services",
        "notifications": False,
        "is_public": False,
    },
]
