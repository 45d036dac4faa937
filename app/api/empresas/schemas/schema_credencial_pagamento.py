from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SalvarCredencialRequest(BaseModel):
    public_key: str = Field(..., min_length=1, max_length=255)
    access_token: str = Field(..., min_length=1, max_length=255)

    @field_validator("public_key", "access_token")
    @classmethod
    def _sem_espacos(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("campo não pode ser vazio")
        return v


class SalvarCredencialResponse(BaseModel):
    message: str
    verified: bool


class CredencialStatusResponse(BaseModel):
    """Nunca expõe o access token; a public key é usada pelo widget de cartão."""

    empresa_id: int
    configured: bool
    public_key: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
