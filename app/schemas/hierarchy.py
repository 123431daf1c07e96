from pydantic import BaseModel

class HierarchyParticipant(BaseModel):
    user_type: str
    user_id: int
