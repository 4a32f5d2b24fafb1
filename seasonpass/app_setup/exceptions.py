"""
Gestionnaires d'exceptions enregistrés par la factory.
- HTTPException: JSON {"detail": ...}
- PurchaseError: JSON {"detail": message, "code": code} avec le statut porté par l'erreur
- RequestValidationError: 400 {"detail": "Validation échouée", "errors": [{field, message}]}
- TicketConflictError non traduite (ne devrait pas sortir du service): 409
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from seasonpass.payments.errors import PurchaseError, TicketConflictError, TICKET_ALREADY_EXISTS

logger = logging.getLogger(__name__)

def _validation_errors(exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = str(err.get("msg") or "")
        # pydantic préfixe les ValueError levées par nos validateurs
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.append({"field": ".".join(loc), "message": msg})
    return errors

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(PurchaseError)
    async def purchase_error(request: Request, exc: PurchaseError):
        if exc.status_code >= 500:
            logger.warning("purchase error path=%s code=%s", request.url.path, exc.code)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(TicketConflictError)
    async def ticket_conflict(request: Request, exc: TicketConflictError):
        return JSONResponse(
            status_code=409,
            content={"detail": "Abonnement déjà existant pour cette saison", "code": TICKET_ALREADY_EXISTS},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": "Validation échouée", "errors": _validation_errors(exc)})
