from pydantic import BaseModel


class OkResponse(BaseModel):
    """Acknowledgement for operations that return no entity."""

    ok: bool = True
