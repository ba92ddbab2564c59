from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, func
from partsflow.database import Base


class Product(Base):
    __tablename__ = "products"

    product_code = Column(String(20), primary_key=True)
    remarks = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class WorkStation(Base):
    __tablename__ = "work_stations"
    __table_args__ = (
        Index("ix_work_stations_process_group", "process_group"),
    )

    station_code = Column(String(20), primary_key=True)
    process_group = Column(String(10), nullable=False)
    remarks = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
