from pydantic import BaseModel, Field, model_validator

from src.domain.entities import Plan


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class AccessRules(BaseModel):
    bulk_max_items: int = 50
    default_preview_length: int = 300
    upgrade_url: str = "/pricing"
    operator_roles: list[str] = Field(default_factory=lambda: ["admin", "editor"])


class ReleaseRules(BaseModel):
    batch_max_items: int = 100
    sweep_batch_limit: int = 500
    sweep_interval_seconds: int = 300
    in_process_sweep: bool = False
    scheduled_list_max: int = 100
    scheduled_list_default: int = 20


class SubscriptionRules(BaseModel):
    cache_ttl_seconds: int = 1800
    expiring_soon_ttl_seconds: int = 300
    expiring_soon_days: int = 7
    cache_max_entries: int = 10_000
    lookup_timeout_seconds: float = 2.0


class PreviewRules(BaseModel):
    ellipsis: str = "..."
    recommendation_max: int = 20
    recommendation_default: int = 5
    interest_window: int = 20


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    access: AccessRules = Field(default_factory=AccessRules)
    release: ReleaseRules = Field(default_factory=ReleaseRules)
    subscriptions: SubscriptionRules = Field(default_factory=SubscriptionRules)
    preview: PreviewRules = Field(default_factory=PreviewRules)
    plans: list[Plan] = Field(default_factory=list)
    ops: OpsRules = Field(default_factory=OpsRules)

    @model_validator(mode="after")
    def _unique_plan_ids(self) -> "Rules":
        ids = [p.id for p in self.plans]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"Duplicate plan ids: {', '.join(dupes)}")
        return self

    def plans_by_id(self) -> dict[str, Plan]:
        return {p.id: p for p in self.plans}
