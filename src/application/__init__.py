"""
Application layer - service wiring and cross-cutting services

This layer contains:
- Bootstrap (ServiceContainer, initialize_services)
- Event bus for domain events
- Settings managers backed by the preferences table
"""
