from dataclasses import dataclass

DEFAULT_DEBOUNCE_MS = 500


@dataclass(frozen=True)
class AppConfig:
    debug: bool = True
    log_level: str = "DEBUG"  # change to "INFO" later
    sqlite_db_path: str = "lookup_demo.db"
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    max_results: int = 10
    seed_demo_records: bool = True


def _coerce_flag(value: object) -> bool:
    # Hosts sometimes hand flags over as "true"/"false" strings.
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass(frozen=True)
class LookupFieldConfig:
    """Presentation and provider-context settings for one lookup field."""

    label: str = "Parent Account"
    help_text: str = "Start your search using some text input"
    object_label: str = "Account"
    object_api_name: str = "Account"
    field_api_name: str = "Name"
    other_field_api_name: str = "Industry"
    is_required: bool | str = False
    parent_record_id: str = ""
    parent_field_api_name: str = ""
    include_closed_opportunities: bool | str = False

    @property
    def required(self) -> bool:
        return _coerce_flag(self.is_required)

    @property
    def placeholder(self) -> str:
        name = self.object_api_name.strip()
        if name.upper() == "OPPORTUNITY":
            return "Search Opportunities..."
        return f"Search {name[:1].upper()}{name[1:]}s..."

    def provider_context(self) -> dict[str, object]:
        return {
            "object_api_name": self.object_api_name.lower(),
            "field_api_name": self.field_api_name,
            "other_field_api_name": self.other_field_api_name,
            "parent_record_id": self.parent_record_id,
            "parent_field_api_name": self.parent_field_api_name,
            "include_closed_opportunities": _coerce_flag(self.include_closed_opportunities),
        }
