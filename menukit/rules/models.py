from pydantic import BaseModel, ConfigDict


class TranslationRules(BaseModel):
    enabled: bool = True
    required: bool = True


class BootstrapRules(BaseModel):
    forgiving: bool = False
    # Unset values follow ``forgiving``
    reconcile_on_add: bool | None = None
    reconcile_on_resolve: bool | None = None
    deterministic_ids: bool | None = None
    allow_collapsible_without_children: bool | None = None


class MenuRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rules_version: str = "1"
    translations: TranslationRules = TranslationRules()
    bootstrap: BootstrapRules = BootstrapRules()
