from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.config import get_settings
from src.db.database import Base, ensure_sqlite_dir
from src.models import Asset, AssetDocument, DocumentType, User

settings = get_settings()

DEMO_USER = {"id": "demo-user", "email": "demo@enfocar.app", "name": "Demo"}

# (asset name, plate, document type, days until expiration)
DEMO_DOCUMENTS = [
    ("Camioneta Hilux", "ABC123", DocumentType.SOAT, 30),
    ("Camioneta Hilux", "ABC123", DocumentType.TECNOMECANICA, 7),
    ("Camioneta Hilux", "ABC123", DocumentType.IMPUESTO_VEHICULAR, 20),
    ("Moto NKD", "XYZ98A", DocumentType.SOAT, 3),
    ("Moto NKD", "XYZ98A", DocumentType.POLIZA_TODO_RIESGO, 1),
    ("Moto NKD", "XYZ98A", DocumentType.TARJETA_PROPIEDAD, None),
]


def seed_demo_data():
    """建立示範資料：一位使用者、兩台車與各種到期日的文件"""
    import src.models  # noqa: F401

    ensure_sqlite_dir(settings.sync_database_url)
    engine = create_engine(settings.sync_database_url)
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        if session.get(User, DEMO_USER["id"]):
            logger.info("Demo user already exists, skipping seed")
            return

        user = User(**DEMO_USER)
        session.add(user)

        # Midnight expirations round up to whole days for any scan later that day
        base = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        assets = {}
        for asset_name, plate, doc_type, days in DEMO_DOCUMENTS:
            asset = assets.get(asset_name)
            if asset is None:
                asset = Asset(name=asset_name, plate=plate, user=user)
                session.add(asset)
                assets[asset_name] = asset

            expiration = base + timedelta(days=days) if days is not None else None
            session.add(AssetDocument(asset=asset, type=doc_type, expiration_date=expiration))
            logger.info(f"Added {doc_type.value} for {asset_name} (expires in {days} days)")

        session.commit()

    logger.info("Seed completed")
