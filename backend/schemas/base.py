# schemas/base.py
from pydantic import BaseModel, ConfigDict


# Response models read straight from SQLAlchemy rows
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)
