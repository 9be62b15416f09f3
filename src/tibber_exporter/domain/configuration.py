from pydantic import BaseModel, ConfigDict, Field, SecretStr


class HostConfig(BaseModel):
    """Connection details of the Tibber bridge, shared by all requests."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    node_id: int = Field(default=1, ge=0)
    password: SecretStr
    # The bridge web interface only knows this user
    username: str = "admin"
