"""Idempotent seed data for the default workflow stages."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagegate.db.base import get_session_factory
from stagegate.db.models.workflow_stage import WorkflowStage

WORKFLOW_STAGES = [
    {
        "slug": "inquiry_received",
        "name": "Inquiry Received",
        "description": "Customer RFQ submitted and initial review completed",
        "stage_order": 1,
        "exit_criteria": ["RFQ document uploaded", "Customer identified"],
        "responsible_roles": ["sales", "procurement"],
        "estimated_duration_days": 20,
    },
    {
        "slug": "technical_review",
        "name": "Technical Review",
        "description": "Engineering, QA, and Production teams review technical requirements",
        "stage_order": 2,
        "exit_criteria": ["Drawings and BOM reviewed", "Engineering, QA and production feedback recorded"],
        "responsible_roles": ["engineering", "qa", "production"],
        "estimated_duration_days": 10,
    },
    {
        "slug": "supplier_rfq_sent",
        "name": "Supplier RFQ Sent",
        "description": "RFQs sent to qualified suppliers for component pricing and lead times",
        "stage_order": 3,
        "exit_criteria": ["Supplier quotes received"],
        "responsible_roles": ["procurement"],
        "estimated_duration_days": 5,
    },
    {
        "slug": "quoted",
        "name": "Quoted",
        "description": "Customer quote generated and sent based on supplier responses",
        "stage_order": 4,
        "exit_criteria": ["Quote sent to customer"],
        "required_approvals": True,
        "approval_roles": ["sales"],
        "responsible_roles": ["sales", "procurement"],
        "estimated_duration_days": 5,
    },
    {
        "slug": "order_confirmed",
        "name": "Order Confirmed",
        "description": "Customer accepted quote and order confirmed",
        "stage_order": 5,
        "exit_criteria": ["Customer PO received"],
        "required_approvals": True,
        "approval_roles": ["management"],
        "responsible_roles": ["sales", "procurement", "production"],
        "estimated_duration_days": 5,
    },
    {
        "slug": "procurement_planning",
        "name": "Procurement Planning",
        "description": "BOM finalized, purchase orders issued, material planning completed",
        "stage_order": 6,
        "exit_criteria": ["Supplier POs issued", "Material plan approved"],
        "responsible_roles": ["procurement", "production"],
        "estimated_duration_days": 5,
    },
    {
        "slug": "production",
        "name": "Production",
        "description": "Manufacturing process initiated and quality control implemented",
        "stage_order": 7,
        "exit_criteria": ["Production complete", "Quality inspection passed"],
        "responsible_roles": ["production", "qa"],
        "estimated_duration_days": 4,
    },
    {
        "slug": "completed",
        "name": "Completed",
        "description": "Order fulfilled and delivered to customer",
        "stage_order": 8,
        "exit_criteria": [],
        "required_approvals": True,
        "approval_roles": ["qa"],
        "responsible_roles": ["sales", "production"],
        "estimated_duration_days": 3,
    },
]


async def seed_workflow_stages(session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
    """Insert default workflow stages if they don't already exist."""
    factory = session_factory or get_session_factory()

    async with factory() as session:
        for stage_data in WORKFLOW_STAGES:
            result = await session.execute(
                select(WorkflowStage).where(WorkflowStage.slug == stage_data["slug"])
            )
            existing = result.scalar_one_or_none()

            if existing is None:
                session.add(WorkflowStage(**stage_data))

        await session.commit()
