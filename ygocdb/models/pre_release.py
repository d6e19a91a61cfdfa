from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class PreReleaseCard(BaseModel):
    """A card from the pre-release (test release) feed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    desc: str
    overall_string: str = Field(alias="overallString")
    pic_url: str = Field(alias="picUrl")
    create_time: int = Field(alias="createTime")
    update_time: int = Field(alias="updateTime")
    created: bool
    updated: bool
    create_commit: str | None = Field(default=None, alias="createCommit")
    update_commit: str | None = Field(default=None, alias="updateCommit")

    @property
    def is_new(self) -> bool:
        """Newly added or updated in the latest feed revision."""
        return self.created or self.updated

    @property
    def status_label(self) -> str | None:
        if self.created:
            return "NEW"
        if self.updated:
            return "更新"
        return None

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.create_time, tz=UTC)

    @property
    def updated_at(self) -> datetime:
        return datetime.fromtimestamp(self.update_time, tz=UTC)
