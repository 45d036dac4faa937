from app.core.exceptions import AppError


class EmpresaNaoEncontradaError(AppError):
    codigo = "merchant_not_found"
    status_code = 404


class CredencialNaoConfiguradaError(AppError):
    """Empresa sem credencial de pagamento (ou com access token vazio)."""

    codigo = "missing_credential"
    status_code = 400


class CredencialIndisponivelError(AppError):
    """Falha transitória ao ler a credencial (banco fora, timeout...)."""

    codigo = "credential_lookup_failed"
    status_code = 503
