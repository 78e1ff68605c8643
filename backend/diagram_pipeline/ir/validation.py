from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: Optional[str] = None

    @classmethod
    def success(cls):
        return cls(valid=True, message=None)

    @classmethod
    def failure(cls, message: str):
        return cls(valid=False, message=message)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "message": self.message}
