"""Core domain layer - entities, interfaces, services and exceptions."""

from lumix.core import entities, exceptions, interfaces, services

__all__ = ["entities", "exceptions", "interfaces", "services"]
