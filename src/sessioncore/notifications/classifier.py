"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Maps raw feed events onto the notification taxonomy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .types import EntityRef, FeedEvent, NotificationCategory

# Document-already-registered messages; checked before anything else.
OMIT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"cpf\s*(já\s*)?cadastrado", re.IGNORECASE),
    re.compile(r"cnpj\s*(já\s*)?cadastrado", re.IGNORECASE),
    re.compile(r"documento\s*(já\s*)?cadastrado", re.IGNORECASE),
)

CREATED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"cliente.*cadastrado", re.IGNORECASE),
    re.compile(r"novo.*cliente", re.IGNORECASE),
    re.compile(r"cadastro.*realizado", re.IGNORECASE),
    re.compile(r"cliente.*criado", re.IGNORECASE),
    re.compile(r"integrado com sucesso", re.IGNORECASE),
)

SUCCESS_CODE = "success"
ERROR_CODE = "error"


class Verdict(str, Enum):
    SUPPRESSED = "suppressed"
    NEW_ENTITY_CREATED = "new_client"
    OPERATIONAL_ERROR = "error"


@dataclass(frozen=True, slots=True)
class Classification:
    """Outcome of classifying one feed event, with the derived notification text."""

    verdict: Verdict
    entity_ref: EntityRef = field(default_factory=EntityRef)
    title: str = ""
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def suppressed(self) -> bool:
        return self.verdict is Verdict.SUPPRESSED

    @property
    def category(self) -> NotificationCategory:
        if self.verdict is Verdict.NEW_ENTITY_CREATED:
            return NotificationCategory.NEW_ENTITY_CREATED
        if self.verdict is Verdict.OPERATIONAL_ERROR:
            return NotificationCategory.OPERATIONAL_ERROR
        raise ValueError("Suppressed classifications have no category")


SUPPRESSED = Classification(verdict=Verdict.SUPPRESSED)


def classify(raw: Any) -> Classification | None:
    """
    Classify a raw feed event.

    Returns ``SUPPRESSED`` for omitted events, a creation or error
    classification, or ``None`` when the event produces no notification.

    Raises:
        ParseError: The event is malformed.
    """
    event = FeedEvent.parse(raw)
    text = event.match_text()

    if any(p.search(text) for p in OMIT_PATTERNS):
        return SUPPRESSED

    ref = event.entity_ref
    if any(p.search(text) for p in CREATED_PATTERNS) or event.code == SUCCESS_CODE:
        if ref.name:
            message = f"{ref.name} ({ref.id})"
        else:
            message = event.title or f"Documento: {ref.id}"
        return Classification(
            verdict=Verdict.NEW_ENTITY_CREATED,
            entity_ref=ref,
            title="Novo Cliente Cadastrado",
            message=message,
            data=event.payload(),
        )

    if event.code == ERROR_CODE:
        return Classification(
            verdict=Verdict.OPERATIONAL_ERROR,
            entity_ref=ref,
            title=f"Erro: {ref.name}" if ref.name else "Erro no Sistema",
            message=event.title or (event.acao or "")[:100] or "Ocorreu um erro",
            data=event.payload(),
        )

    return None
