"""Domain layer - core business objects and interfaces.

This layer contains:
- Domain entities (Message, Recipient, Contact)
- Domain exceptions
- Repository interfaces
- Delivery gateway interface (Strategy Pattern)
"""
