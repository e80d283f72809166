from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from jobconnect.database import get_repository
from jobconnect.models.base import utcnow
from jobconnect.models.user import Role, User
from jobconnect.repositories.base import Repository
from jobconnect.utils.security import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY

# auto_error is off so a missing header gets the same 401 as a bad token
security = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({"sub": user_id, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repository: Repository = Depends(get_repository),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: Optional[str] = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = await repository.get_user(user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def require_roles(*roles: Role):
    """Dependency factory that lets only the given roles through."""
    allowed = {Role(role).value for role in roles}

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if Role(current_user.role).value not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {Role(current_user.role).value} is not authorized to access this route",
            )
        return current_user

    return checker
