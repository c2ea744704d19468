from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from materials_api.auth import jwt_handler
from materials_api.auth.dependencies import AuthContext, protect
from materials_api.database import get_db
from materials_api.schemas.user_schema import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateDetailsRequest,
    UserEnvelope,
)
from materials_api.services import user_service

router = APIRouter(tags=['auth'])


@router.post('/register', response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user = user_service.register_user(db, data)
    return {'success': True, 'token': jwt_handler.create_access_token(user)}


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate(db, data)
    return {'success': True, 'token': jwt_handler.create_access_token(user)}


@router.get('/me', response_model=UserEnvelope)
def me(context: AuthContext = Depends(protect)):
    return {'success': True, 'data': context.user}


@router.put('/updatedetails', response_model=UserEnvelope)
def update_details(
    data: UpdateDetailsRequest,
    context: AuthContext = Depends(protect),
    db: Session = Depends(get_db),
):
    return {'success': True, 'data': user_service.update_user_details(db, context.user, data)}
