"""Authentication router: registration and login."""
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session
import logging

from app.schemas.auth import RegisterRequest, LoginRequest, TokenResponse
from app.db.config import get_session
from app.services.auth_service import CredentialService, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post("/register", response_model=TokenResponse)
async def register(request: RegisterRequest, session: Session = Depends(get_session)):
    service = CredentialService(session)
    user = await run_in_threadpool(service.register, request.email, request.password)
    return TokenResponse(token=create_access_token(user.id), email=user.email)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, session: Session = Depends(get_session)):
    service = CredentialService(session)
    user = await run_in_threadpool(service.authenticate, request.email, request.password)
    logger.info(f"User {user.id} logged in")
    return TokenResponse(token=create_access_token(user.id), email=user.email)
