"""Core infrastructure shared by every integration hub module.

Components:
- domain: base domain primitives (ValueObject, Entity, AggregateRoot, DomainEvent)
- cqrs: commands, queries, handlers and buses
- Cross-cutting: configuration, errors, logging, shared enums
"""
