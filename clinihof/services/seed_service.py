from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.core.logger import logger
from clinihof.db.models import Collaborator, CommissionType, Patient, Procedure

EXAMPLE_PROCEDURES = [
    {"name": "Botox", "price": 800, "duration": 30},
    {"name": "Preenchimento Labial", "price": 1200, "duration": 45},
    {"name": "Harmonização Facial", "price": 2500, "duration": 90},
]

EXAMPLE_COLLABORATORS = [
    {"name": "Dr. Exemplo", "role": "Médico", "commission_value": 30},
    {"name": "Ana Exemplo", "role": "Esteticista", "commission_value": 20},
]

EXAMPLE_PATIENTS = [
    {"name": "Maria Silva", "email": "maria@exemplo.com", "phone": "(11) 99999-0001"},
    {"name": "João Santos", "email": "joao@exemplo.com", "phone": "(11) 99999-0002"},
    {"name": "Ana Oliveira", "email": "ana@exemplo.com", "phone": "(11) 99999-0003"},
]


async def seed_workspace_data(session: AsyncSession, workspace_id: UUID) -> None:
    """Give a freshly created workspace example procedures, staff and patients."""
    logger.info(f"Creating example data for workspace {workspace_id}")

    for item in EXAMPLE_PROCEDURES:
        session.add(Procedure(workspace_id=workspace_id, fixed_cost=0, **item))

    for item in EXAMPLE_COLLABORATORS:
        session.add(Collaborator(
            workspace_id=workspace_id,
            commission_type=CommissionType.PERCENTAGE,
            base_salary=0,
            charges=0,
            monthly_hours=160,
            **item,
        ))

    for item in EXAMPLE_PATIENTS:
        session.add(Patient(workspace_id=workspace_id, **item))

    await session.commit()
