# app/core/admin_dependencies.py

from fastapi import Depends, HTTPException, status, Request, Path
from jose import JWTError
from sqlalchemy.orm import Session, selectinload

from app.api.empresas.models.usuario_model import UsuarioModel
from app.core.security import decode_access_token
from app.database.db_connection import get_db
from app.utils.logger import logger

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Não autenticado Access",
    headers={"WWW-Authenticate": "Bearer"},
)

forbidden_exception = HTTPException(
    status_code=status.HTTP_403_FORBIDDEN,
    detail="Você não tem permissão para acessar este recurso",
)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> UsuarioModel:
    """
    Recupera o usuário autenticado a partir do header Authorization (Bearer <token>).
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        logger.warning("[AUTH] Cabeçalho Authorization ausente ou malformado.")
        raise credentials_exception

    access_token = auth_header.replace("Bearer ", "")

    try:
        payload = decode_access_token(access_token)
        raw_sub = payload.get("sub")
        if raw_sub is None:
            raise credentials_exception
        user_id = int(raw_sub)
    except (JWTError, ValueError) as e:
        logger.error(f"[AUTH] Erro ao decodificar JWT: {e}")
        raise credentials_exception

    user = (
        db.query(UsuarioModel)
        .options(selectinload(UsuarioModel.empresas))
        .filter(UsuarioModel.id == user_id)
        .first()
    )
    if not user:
        raise credentials_exception

    return user


def require_admin_da_empresa(
    empresa_id: int = Path(..., description="ID da empresa", gt=0),
    current_user: UsuarioModel = Depends(get_current_user),
) -> UsuarioModel:
    """Garante que o usuário autenticado administra a empresa do path."""
    if empresa_id not in {e.id for e in current_user.empresas}:
        logger.warning(
            "[AUTH] Acesso negado. user_id=%s empresa_id=%s",
            current_user.id,
            empresa_id,
        )
        raise forbidden_exception
    return current_user
