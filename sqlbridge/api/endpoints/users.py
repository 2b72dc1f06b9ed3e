import logging
from typing import Annotated, List
from fastapi import APIRouter, HTTPException, status, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from sqlbridge.core import schemas, models
from sqlbridge.core.database import get_db

router = APIRouter(tags=["Users"])

db_dep = Annotated[AsyncSession, Depends(get_db)]


# Fetch all users
@router.get("/data", response_model=List[schemas.UserResponse])
async def get_users(db: db_dep):
    try:
        result = await db.execute(select(models.User).order_by(models.User.id))
        return result.scalars().all()
    except Exception as error:
        logging.error(f"Error fetching data: {error}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


# Add user
@router.post("/add-user", response_model=schemas.UserResponse)
async def add_user(user: schemas.UserCreate, db: db_dep):
    if not user.name or not user.email or user.age is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All fields are required",
        )

    # Validate whether the email is already taken
    query = select(models.User).where(models.User.email == user.email)
    result = await db.execute(query)
    if result.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists"
        )

    try:
        new_user = models.User(name=user.name, email=user.email, age=user.age)
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)
        return new_user
    except Exception as error:
        await db.rollback()
        logging.error(f"Error inserting user: {error}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not insert user",
        )
