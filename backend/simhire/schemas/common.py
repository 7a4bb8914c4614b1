from pydantic import BaseModel, Field

PHONE_PATTERN = r"^[0-9+\-\s()]+$"


class Pagination(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
