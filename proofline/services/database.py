"""
Database service for CRUD operations on ignore rules.
"""
from uuid import UUID
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from fastapi import HTTPException, status

from proofline.models.ignore_rule import IgnoreRule
from proofline.schemas.ignore_rule import IgnoreRuleCreate
from proofline.utils.logger import get_logger

logger = get_logger("database_service")


class DatabaseService:
    """Service for database operations on ignore rules."""

    async def get_ignore_rules(
        self,
        db: AsyncSession,
        user_id: UUID
    ) -> list[IgnoreRule]:
        """
        Get all ignore rules for a user, oldest first.

        Args:
            db: Database session
            user_id: UUID of the user

        Returns:
            List of IgnoreRule instances

        Raises:
            HTTPException: If database operation fails
        """
        try:
            result = await db.execute(
                select(IgnoreRule)
                .where(IgnoreRule.user_id == user_id)
                .order_by(IgnoreRule.created_at.asc())
            )
            rules = list(result.scalars().all())

            logger.info(
                "Retrieved ignore rules for user",
                user_id=str(user_id),
                count=len(rules)
            )
            return rules

        except Exception as e:
            logger.error(
                "Failed to retrieve ignore rules",
                user_id=str(user_id),
                error=str(e),
                exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to retrieve ignore rules"
            )

    async def get_ignore_rule(
        self,
        db: AsyncSession,
        user_id: UUID,
        token: str,
        issue_type: str
    ) -> Optional[IgnoreRule]:
        """
        Find a user's rule for (token, type).

        Returns:
            IgnoreRule if it exists, None otherwise
        """
        result = await db.execute(
            select(IgnoreRule).where(
                IgnoreRule.user_id == user_id,
                IgnoreRule.token == token,
                IgnoreRule.type == issue_type
            )
        )
        return result.scalar_one_or_none()

    async def create_ignore_rule(
        self,
        db: AsyncSession,
        user_id: UUID,
        rule_data: IgnoreRuleCreate
    ) -> IgnoreRule:
        """
        Register an ignore rule. Idempotent: an existing rule for the same
        (token, type) is returned instead of creating a duplicate.

        Args:
            db: Database session
            user_id: UUID of the user
            rule_data: Token and type to ignore

        Returns:
            The new or existing IgnoreRule

        Raises:
            HTTPException: If database operation fails
        """
        try:
            existing = await self.get_ignore_rule(db, user_id, rule_data.token, rule_data.type)
            if existing:
                logger.info(
                    "Ignore rule already exists",
                    user_id=str(user_id),
                    rule_id=str(existing.id)
                )
                return existing

            rule = IgnoreRule(
                user_id=user_id,
                token=rule_data.token,
                type=rule_data.type
            )
            db.add(rule)
            await db.flush()
            await db.refresh(rule)

            logger.info(
                "Ignore rule created",
                user_id=str(user_id),
                rule_id=str(rule.id),
                issue_type=rule.type
            )
            return rule

        except HTTPException:
            raise
        except Exception as e:
            logger.error(
                "Failed to create ignore rule",
                user_id=str(user_id),
                error=str(e),
                exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create ignore rule"
            )

    async def delete_ignore_rule(
        self,
        db: AsyncSession,
        rule_id: UUID,
        user_id: UUID
    ) -> bool:
        """
        Delete one ignore rule with ownership verification.

        Returns:
            True if deleted, False if no such rule belongs to the user

        Raises:
            HTTPException: If database operation fails
        """
        try:
            result = await db.execute(
                select(IgnoreRule).where(
                    IgnoreRule.id == rule_id,
                    IgnoreRule.user_id == user_id
                )
            )
            rule = result.scalar_one_or_none()
            if not rule:
                return False

            await db.delete(rule)
            await db.flush()

            logger.info(
                "Ignore rule deleted",
                rule_id=str(rule_id),
                user_id=str(user_id)
            )
            return True

        except Exception as e:
            logger.error(
                "Failed to delete ignore rule",
                rule_id=str(rule_id),
                error=str(e),
                exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete ignore rule"
            )

    async def clear_ignore_rules(
        self,
        db: AsyncSession,
        user_id: UUID
    ) -> int:
        """
        Delete every ignore rule of a user.

        Returns:
            Number of rules deleted

        Raises:
            HTTPException: If database operation fails
        """
        try:
            count_result = await db.execute(
                select(func.count()).select_from(IgnoreRule).where(IgnoreRule.user_id == user_id)
            )
            count = count_result.scalar_one()

            await db.execute(delete(IgnoreRule).where(IgnoreRule.user_id == user_id))
            await db.flush()

            logger.info(
                "Ignore rules cleared",
                user_id=str(user_id),
                deleted=count
            )
            return count

        except Exception as e:
            logger.error(
                "Failed to clear ignore rules",
                user_id=str(user_id),
                error=str(e),
                exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to clear ignore rules"
            )


# Global database service instance
db_service = DatabaseService()
