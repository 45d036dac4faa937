# app/core/exception_handlers.py
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppError
from app.utils.logger import logger


async def app_error_handler(request: Request, exc: AppError):
    """Erros de domínio/provedor: status explícito no corpo, nunca exceção de transporte."""
    if exc.status_code >= 500:
        logger.error(
            f"[ERRO] {request.method} {request.url.path} code={exc.codigo} msg={exc.mensagem} detalhes={exc.detalhes}"
        )
    else:
        logger.info(f"[ERRO] {request.method} {request.url.path} code={exc.codigo} msg={exc.mensagem}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    erros = exc.errors()
    primeiro = erros[0] if erros else {}
    campo = ".".join(str(p) for p in primeiro.get("loc", []) if p != "body")
    mensagem = f"Requisição inválida: {campo} - {primeiro.get('msg', 'valor inválido')}" if campo else "Requisição inválida"
    logger.warning(f"[VALIDACAO] {request.method} {request.url.path} erros={erros}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"status": "error", "code": "invalid_request", "message": mensagem},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "code": "http_error", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"[ERRO] Exceção não tratada em {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "code": "internal_error", "message": "Erro interno do servidor"},
    )
