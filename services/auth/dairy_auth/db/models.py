import enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer,String,DateTime,ForeignKey
from datetime import datetime
from dairy_auth.db.session import Base
from dairy_auth.security.utils import now_utc


class Role(str, enum.Enum):
    FARMER = 'farmer'
    ADMIN = 'admin'


class User(Base):
    __tablename__='users'
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), default=Role.FARMER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=now_utc)
    refresh_tokens = relationship('RefreshToken', back_populates='user', cascade='all, delete-orphan')

class RefreshToken(Base):
    # Rows are inserted on issuance and deleted on use; never updated.
    __tablename__='refresh_tokens'
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=now_utc)
    user = relationship('User', back_populates='refresh_tokens')
