from dataclasses import dataclass


@dataclass
class BulkConfig:
    parameterized: bool = True
    case_insensitive_fields: bool = False
    include_id_column: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        for name in ("parameterized", "case_insensitive_fields", "include_id_column"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a bool")
