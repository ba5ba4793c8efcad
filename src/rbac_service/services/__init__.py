"""Domain services: CRUD over users, roles and permissions, plus seeding."""
