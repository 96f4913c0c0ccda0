# src/libs/fx-deals-common/fx_deals_common/db_base.py
from sqlalchemy.orm import declarative_base

Base = declarative_base()
