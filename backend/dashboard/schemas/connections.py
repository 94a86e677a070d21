from pydantic import BaseModel, Field

from dashboard.config import DatabaseCredentials
from dashboard.exceptions import ErrorKind


class SqlCredentialsRequest(BaseModel):
    host: str = Field(min_length=1, max_length=255)
    port: int = Field(5432, ge=1, le=65535)
    database: str = Field(min_length=1, max_length=255)
    user: str = Field(min_length=1, max_length=255)
    password: str = Field("", max_length=255)
    save: bool = False

    def to_credentials(self) -> DatabaseCredentials:
        return DatabaseCredentials(
            host=self.host,
            port=self.port,
            database=self.database,
            user=self.user,
            password=self.password,
        )


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str
    timestamp: str | None = None
    error_kind: ErrorKind | None = None


class SaveConnectionResponse(BaseModel):
    success: bool
    message: str
    saved: bool = False
    error_kind: ErrorKind | None = None


class TableStatus(BaseModel):
    table: str
    exists: bool
    created: bool
    error: str | None = None


class SchemaStatusResponse(BaseModel):
    success: bool
    tables: list[TableStatus]
