from __future__ import annotations

import asyncio
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from loanflow.config import settings
from loanflow.crud.user import user_crud
from loanflow.models.user import User
from loanflow.services.workflow_stages import STAGE_ORDER


@dataclass(frozen=True)
class SeedUserSpec:
    email: str
    role: str
    full_name: str


@dataclass(frozen=True)
class SeedResult:
    user_ids: dict[str, UUID]


# One active approver per stage, plus an admin who can never act on a stage.
DEMO_USERS: tuple[SeedUserSpec, ...] = tuple(
    SeedUserSpec(
        email=f"{stage.value}@demo.local",
        role=stage.value,
        full_name=f"Demo {stage.value.replace('_', ' ').title()}",
    )
    for stage in STAGE_ORDER
) + (SeedUserSpec(email="admin@demo.local", role="admin", full_name="Demo Admin"),)


async def _get_or_create_user(session: AsyncSession, *, spec: SeedUserSpec) -> User:
    user = await user_crud.get_by(session, email=spec.email)

    if user is None:
        user = await user_crud.create(
            session,
            obj_in={
                "email": spec.email,
                "role": spec.role,
                "full_name": spec.full_name,
                "is_active": True,
            },
        )
    else:
        # Keep the demo users active and their roles as expected.
        await user_crud.update(
            session,
            db_obj=user,
            obj_in={"is_active": True, "role": spec.role, "full_name": user.full_name or spec.full_name},
        )

    return user


async def seed_dev_data(database_url: str | None = None) -> SeedResult:
    engine = create_async_engine(database_url or settings.database_url)
    session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    user_ids: dict[str, UUID] = {}
    try:
        async with session_maker() as session:
            async with session.begin():
                for spec in DEMO_USERS:
                    user = await _get_or_create_user(session, spec=spec)
                    user_ids[spec.role] = user.id
    finally:
        await engine.dispose()

    return SeedResult(user_ids=user_ids)


def main() -> None:
    result = asyncio.run(seed_dev_data())
    for role, user_id in result.user_ids.items():
        print(f"{role:<14} {user_id}")


if __name__ == "__main__":
    main()
