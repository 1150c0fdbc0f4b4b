"""
Application Context
Process-wide resources, built once per entry point and passed explicitly.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from photocatalog.config import Settings
from photocatalog.database import close_db, create_engine, create_session_factory


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = create_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=create_session_factory(engine),
        )

    async def dispose(self) -> None:
        await close_db(self.engine)
