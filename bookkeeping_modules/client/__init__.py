"""
Client Module (``bookkeeping_modules.client``).

Clients, their contact persons, projects, milestones and project payments.
"""

from bookkeeping_modules.client.models import (
    BankTransferDetails,
    Client,
    ContactPerson,
    Project,
    ProjectMilestone,
    ProjectPayment,
    ProjectPaymentMethod,
    ProjectPaymentType,
    ProjectStatus,
)
from bookkeeping_modules.client.service import ClientService

__all__ = [
    "BankTransferDetails",
    "Client",
    "ClientService",
    "ContactPerson",
    "Project",
    "ProjectMilestone",
    "ProjectPayment",
    "ProjectPaymentMethod",
    "ProjectPaymentType",
    "ProjectStatus",
]
