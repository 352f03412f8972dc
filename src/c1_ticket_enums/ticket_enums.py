"""Ticket Enums for TicketDesk.

Values are the wire/database values used by the dashboard, so they are kept
in the form the helpdesk team uses (Portuguese slugs).
"""

from enum import Enum
from typing import Optional


class TicketStatus(str, Enum):
    """Lifecycle status of a helpdesk ticket."""
    ABERTO = "aberto"
    FECHADO = "fechado"
    PENDENTE = "pendente"
    EM_ANDAMENTO = "em_andamento"


class TicketPriority(str, Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"


class TicketType(str, Enum):
    """Category of the request."""
    ORIENTACAO = "orientacao"
    CORRECAO_TECNICA = "correcao_tecnica"
    ERRO_TEMPORARIO = "erro_temporario"
    DUVIDA_NEGOCIAL = "duvida_negocial"
    MELHORIAS = "melhorias"
    OUTROS = "outros"


class KanbanStage(str, Enum):
    """Kanban columns, in board order."""
    BACKLOG = "backlog"
    DESENVOLVIMENTO = "desenvolvimento"
    HOMOLOGACAO = "homologacao"
    PRODUCAO = "producao"

    @classmethod
    def values(cls):
        return [stage.value for stage in cls]


class ActivityType(str, Enum):
    """Kinds of entries in a ticket's activity log."""
    CREATE = "create"
    UPDATE = "update"
    MOVE = "move"
    COMMENT = "comment"


class ReminderPriority(str, Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"
    URGENTE = "urgente"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


# Fixed lookup used by the quarterly root-cause chart
ROOT_CAUSE_BY_TYPE = {
    TicketType.CORRECAO_TECNICA.value: "Software (Bug)",
    TicketType.MELHORIAS.value: "Software (Bug)",
    TicketType.ERRO_TEMPORARIO.value: "Infraestrutura",
    TicketType.ORIENTACAO.value: "Usuário (Treinamento)",
    TicketType.DUVIDA_NEGOCIAL.value: "Usuário (Treinamento)",
    TicketType.OUTROS.value: "Acesso/Permissão",
}

DEFAULT_ROOT_CAUSE = "Outros"


def root_cause_for(ticket_type: Optional[str]) -> str:
    return ROOT_CAUSE_BY_TYPE.get(ticket_type or "", DEFAULT_ROOT_CAUSE)
