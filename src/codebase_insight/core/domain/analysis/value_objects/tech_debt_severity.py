from enum import StrEnum


class TechDebtSeverity(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
