"""Error taxonomy shared by the ledger services and the HTTP layer.

Every error carries a snake_case ``code`` that is rendered as the response
``detail``, the same payload shape FastAPI uses for ``HTTPException``.
"""


class LedgerError(Exception):
    status_code = 500
    code = "ledger_error"

    def __init__(self, code: str | None = None, message: str | None = None):
        if code is not None:
            self.code = code
        self.message = message or self.code
        super().__init__(self.message)


class ValidationFailed(LedgerError):
    status_code = 400
    code = "validation_error"


class Unauthorized(LedgerError):
    status_code = 401
    code = "unauthorized"


class Forbidden(LedgerError):
    status_code = 403
    code = "forbidden"


class NotFound(LedgerError):
    status_code = 404
    code = "not_found"


class Conflict(LedgerError):
    status_code = 409
    code = "conflict"


class InternalError(LedgerError):
    status_code = 500
    code = "internal_error"
