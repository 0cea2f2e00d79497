import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from enums.approval_status import ApprovalStatus
from exceptions.admin import VendorNotFoundException
from models.auth_session import AuthSession
from models.base import utcnow
from models.filters import VendorFilter
from models.vendor import Vendor, VendorDTO
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class VendorRepository:
    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    async def _update_values(self, vendor_id: str, **values) -> None:
        stmt = update(Vendor).where(Vendor.id == vendor_id).values(updated_at=utcnow(), **values)
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise VendorNotFoundException(vendor_id)

    @TransactionManager.backend_call("get_vendors")
    async def get_vendors(self, filters: VendorFilter | None = None) -> list[VendorDTO]:
        filters = filters or VendorFilter()
        conditions = []
        if filters.search_query:
            conditions.append(Vendor.business_name.ilike(f"%{filters.search_query}%"))
        if filters.verification_status is not None:
            conditions.append(Vendor.verification_status == filters.verification_status)
        if filters.is_active is not None:
            conditions.append(Vendor.is_active.is_(filters.is_active))

        stmt = select(Vendor).where(*conditions).order_by(Vendor.created_at.desc())
        stmt = apply_page(stmt, filters)
        vendors = await session_execute(stmt, self.session)
        return [VendorDTO.model_validate(vendor, from_attributes=True) for vendor in vendors.scalars().all()]

    @TransactionManager.backend_call("get_vendor")
    async def get_by_id(self, vendor_id: str) -> VendorDTO:
        stmt = select(Vendor).where(Vendor.id == vendor_id).execution_options(populate_existing=True)
        vendor = await session_execute(stmt, self.session)
        vendor = vendor.scalar()
        if vendor is None:
            raise VendorNotFoundException(vendor_id)
        return VendorDTO.model_validate(vendor, from_attributes=True)

    @TransactionManager.backend_call("approve_vendor")
    async def approve(self, vendor_id: str, admin_notes: str | None = None) -> None:
        await self._update_values(
            vendor_id,
            verification_status=ApprovalStatus.VERIFIED,
            admin_notes=admin_notes,
            rejection_reason=None,
            approved_by=self.auth.user_id,
            approved_at=utcnow()
        )
        logger.info(f"Vendor {vendor_id} approved by {self.auth.user_id}")

    @TransactionManager.backend_call("reject_vendor")
    async def reject(self, vendor_id: str, rejection_reason: str, admin_notes: str | None = None) -> None:
        await self._update_values(
            vendor_id,
            verification_status=ApprovalStatus.REJECTED,
            rejection_reason=rejection_reason,
            admin_notes=admin_notes
        )
        logger.info(f"Vendor {vendor_id} rejected by {self.auth.user_id}: {rejection_reason}")

    @TransactionManager.backend_call("toggle_vendor_status")
    async def set_active(self, vendor_id: str, is_active: bool) -> None:
        await self._update_values(vendor_id, is_active=is_active)
        logger.info(f"Vendor {vendor_id} {'activated' if is_active else 'deactivated'} by {self.auth.user_id}")
