from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import os
from pathlib import Path
from dotenv import load_dotenv
from .utils import MEMORY_SQLITE_URL, is_memory_url, resolve_sqlite_url

# Get DB url
load_dotenv()
# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATABASE_URL = resolve_sqlite_url(
    os.getenv("LUCKYDRAW_DB_URL", MEMORY_SQLITE_URL), ROOT_DIR
)


from typing import Optional


def make_engine(database_url: Optional[str] = None, echo: bool = False):
    url = database_url or DEFAULT_DATABASE_URL
    if is_memory_url(url):
        # A single shared connection, otherwise every checkout sees an empty DB
        return create_engine(
            url,
            echo=echo,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=echo,
        future=True,
    )


def get_sessionmaker(engine):
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Draw state objects stay readable after each commit
        future=True,
    )
