from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from app.core.config import settings

# Security: Disable SQL query logging in production
# Only enable echo in development mode
engine = create_async_engine(
    str(settings.DATABASE_URL),
    echo=settings.is_dev,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=10,  # Set connection pool size
    max_overflow=20  # Allow overflow connections
)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
