from pydantic import BaseModel, Field

# ---------- Inputs ----------

class SignUpIn(BaseModel):
    email: str = Field(min_length=3, max_length=254, examples=["walt@breakingbad.com"])
    password: str = Field(min_length=8, max_length=72)

class SignInIn(BaseModel):
    email: str
    password: str

class RefreshIn(BaseModel):
    refresh_token: str

class RevokeIn(BaseModel):
    refresh_token: str


# ---------- Outputs ----------

class UserOut(BaseModel):
    id: int
    email: str

    model_config = {"from_attributes": True}

class SignInOut(BaseModel):
    user: UserOut
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # secondes (durée de l'access token)

class AccessTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
