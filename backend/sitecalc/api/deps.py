"""FastAPI dependency injection — actor resolution and service access."""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from sitecalc.config import JWT_ALGORITHM, JWT_SECRET_KEY
from sitecalc.models.actor import GUEST, Actor, UserActor
from sitecalc.services.calculator_service import CalculatorService
from sitecalc.services.product_catalog import ProductCatalog
from sitecalc.services.project_service import ProjectService

security = HTTPBearer(auto_error=False)


def get_actor(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Actor:
    """
    Bearer token → UserActor(sub). No token → Guest.
    A token that is present but invalid is rejected rather than downgraded.
    """
    if not credentials:
        return GUEST
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return UserActor(user_id=str(user_id))


def get_calculator_service(request: Request) -> CalculatorService:
    return request.app.state.calculators


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.projects


def get_product_catalog(request: Request) -> ProductCatalog:
    return request.app.state.catalog
