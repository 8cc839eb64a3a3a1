from __future__ import annotations
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from customer_sync.errors import InvalidSyncTask
from customer_sync.models.enums import DBType, FrequencyUnit

UNIX_EPOCH = datetime(1970, 1, 1)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AccountRef(_Payload):
    id: str


class DatabaseConfig(_Payload):
    id: int
    db_type: DBType = Field(alias="dbType")
    query: str = ""
    frequency_number: int = Field(1, alias="frequencyNumber", ge=0)
    frequency_unit: FrequencyUnit = Field(FrequencyUnit.DAY, alias="frequencyUnit")
    last_sync: datetime | None = Field(None, alias="lastSync")
    databricks_host: str | None = Field(None, alias="databricksHost")
    databricks_path: str | None = Field(None, alias="databricksPath")
    databricks_token: str | None = Field(None, alias="databricksToken")

    @field_validator("last_sync")
    @classmethod
    def _naive_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @property
    def due_at(self) -> datetime:
        # a database that never synced counts from the Unix epoch
        since = self.last_sync if self.last_sync is not None else UNIX_EPOCH
        return since + self.frequency_number * self.frequency_unit.duration


class IntegrationPayload(_Payload):
    id: int | None = None
    owner: AccountRef
    database: DatabaseConfig | None = None


class SyncTask(_Payload):
    integration: IntegrationPayload | None = None


def parse_sync_task(payload: dict) -> tuple[IntegrationPayload, DatabaseConfig]:
    """Validate a queued sync task; raises InvalidSyncTask when it cannot be run."""
    try:
        task = SyncTask.model_validate(payload or {})
    except ValidationError as ve:
        raise InvalidSyncTask(f"Wrong integration was passed to job: {ve.errors()[0].get('msg', 'invalid')}") from ve
    if task.integration is None or task.integration.database is None:
        raise InvalidSyncTask("Wrong integration was passed to job")
    return task.integration, task.integration.database


def integration_to_payload(integration) -> dict:
    """Serialize an Integration row into the JSON task body queued for the sync worker."""
    database = None
    if integration.database is not None:
        db = integration.database
        database = DatabaseConfig(
            id=db.id,
            db_type=db.db_type,
            query=db.query or "",
            frequency_number=db.frequency_number,
            frequency_unit=db.frequency_unit,
            last_sync=db.last_sync,
            databricks_host=db.databricks_host,
            databricks_path=db.databricks_path,
            databricks_token=db.databricks_token,
        )
    task = SyncTask(integration=IntegrationPayload(id=integration.id, owner=AccountRef(id=integration.owner_id), database=database))
    return task.model_dump(mode="json", by_alias=True)
