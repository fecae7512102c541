"""Declarative base for ORM models"""

import secrets

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_id() -> str:
    """24-char hex identifier, same shape as a document-store object id"""
    return secrets.token_hex(12)
