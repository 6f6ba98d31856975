from typing import Optional

from sqlmodel import SQLModel, Field

Base = SQLModel  # Define Base as SQLModel


class User(Base, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    hashed_password: str = Field(nullable=False)
    name: str = Field(nullable=False)
    surname: str = Field(nullable=False)
    email: str = Field(nullable=False, unique=True, index=True)
    role: str = Field(default="user", nullable=False)

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.surname}".strip()
