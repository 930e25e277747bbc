from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from eventcheckin.core import security
from eventcheckin.db.session import get_db
from eventcheckin.models.user import User
from eventcheckin.schemas.user import Token

router = APIRouter()


@router.post("/token", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == form_data.username).first()
    if not user or not security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = security.create_access_token(data={"sub": user.email})
    return {"access_token": token, "token_type": "bearer", "role": user.role}
