"""Document template contract and registry.

Every deal document (settlement statement, agent letter, ...) is a
``DocumentTemplate``: it renders a deal record into a presentation tree
and says who the email goes to and what its subject is. Everything past
``render`` is the shared transport pipeline, so a new document type is
one subclass plus ``register_template``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from shared.presentation import Block


class DocumentTemplate(ABC):
    """Stateless renderer for one document type."""

    template_id: str = ""
    title: str = ""
    description: str = ""

    @abstractmethod
    def render(self, deal: Any) -> Block:
        """Build the presentation tree for *deal*."""

    @abstractmethod
    def subject(self, deal: Any) -> str:
        """Email subject line; never empty."""

    def recipient(self, deal: Any) -> str:
        """Recipient address(es), comma-separated. Empty means the user picks."""
        return ""

    def to_dict(self) -> dict:
        return {
            "id": self.template_id,
            "title": self.title,
            "description": self.description,
        }


_REGISTRY: dict[str, DocumentTemplate] = {}


def register_template(template: DocumentTemplate) -> DocumentTemplate:
    """Add *template* to the registry.

    Re-registering the same class (a module reload) replaces the entry;
    two different classes claiming one id is an error.
    """
    if not template.template_id:
        raise ValueError(f"{type(template).__name__} has no template_id")
    existing = _REGISTRY.get(template.template_id)
    if existing is not None and type(existing).__qualname__ != type(template).__qualname__:
        raise ValueError(f"Duplicate template id: {template.template_id}")
    _REGISTRY[template.template_id] = template
    return template


def get_template(template_id: str) -> DocumentTemplate | None:
    return _REGISTRY.get(template_id)


def list_templates() -> list[DocumentTemplate]:
    return list(_REGISTRY.values())
