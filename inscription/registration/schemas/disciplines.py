from pydantic import BaseModel, ConfigDict


class DisciplineRead(BaseModel):
    """Discipline as offered in the form"""

    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
